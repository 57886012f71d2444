"""
System tag seeding for LifeLog.

System tags have no owner and are visible to every user. Seeding is
idempotent: tags already present (by case-insensitive name) are skipped.

Usage:
    python -m lifelog.seed
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from lifelog.models import Tag


SYSTEM_TAGS = [
    {"name": "work", "color": "#3b82f6", "icon": "briefcase"},
    {"name": "family", "color": "#ec4899", "icon": "home"},
    {"name": "exercise", "color": "#22c55e", "icon": "dumbbell"},
    {"name": "friends", "color": "#f59e0b", "icon": "users"},
    {"name": "health", "color": "#ef4444", "icon": "heart-pulse"},
    {"name": "study", "color": "#8b5cf6", "icon": "book"},
    {"name": "leisure", "color": "#14b8a6", "icon": "gamepad"},
    {"name": "meditation", "color": "#6366f1", "icon": "spa"},
]


def seed_system_tags(db: Session) -> int:
    """Insert missing system tags. Returns how many were created."""
    created = 0
    for tag_def in SYSTEM_TAGS:
        exists = (
            db.query(Tag.id)
            .filter(Tag.user_id.is_(None), func.lower(Tag.name) == tag_def["name"].lower())
            .first()
        )
        if exists:
            continue
        db.add(Tag(user_id=None, is_system=True, **tag_def))
        created += 1

    if created:
        db.commit()
    return created


if __name__ == "__main__":
    from lifelog.database import init_db

    init_db()
    print("System tags are in place.")
