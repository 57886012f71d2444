"""
Entry Service

Persistence helpers for journal entries: upsert-by-date, filtered listing,
tag association replacement and the side effects of insight generation.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from lifelog.models import AIInsight, Entry, EntryEmotion, EntryTag
from lifelog.models.entry import EMOTION_LABEL_LENGTH

logger = logging.getLogger(__name__)

CONTEXT_ENTRY_LIMIT = 7


def get_user_entry(db: Session, user_id: int, entry_id: int) -> Optional[Entry]:
    """Fetch an entry only if it belongs to the user."""
    return (
        db.query(Entry)
        .filter(Entry.id == entry_id, Entry.user_id == user_id)
        .first()
    )


def get_entry_by_date(db: Session, user_id: int, entry_date: date) -> Optional[Entry]:
    return (
        db.query(Entry)
        .filter(Entry.user_id == user_id, Entry.entry_date == entry_date)
        .first()
    )


def replace_entry_tags(db: Session, entry: Entry, tag_ids: List[int]):
    """Drop every association and insert the new set; duplicates collapse."""
    db.query(EntryTag).filter(EntryTag.entry_id == entry.id).delete(synchronize_session=False)
    for tag_id in dict.fromkeys(tag_ids or []):
        db.add(EntryTag(entry_id=entry.id, tag_id=tag_id))


def upsert_entry(db: Session, user_id: int, data: Dict[str, Any]) -> Tuple[Entry, bool]:
    """
    Create the entry for `data["entry_date"]` or fully replace the existing one.

    Metrics, content, highlight, privacy and tag associations are replaced;
    is_favorite is left untouched. Returns (entry, created).
    """
    entry_date = data["entry_date"]
    entry = get_entry_by_date(db, user_id, entry_date)
    created = entry is None

    if created:
        entry = Entry(user_id=user_id, entry_date=entry_date)
        db.add(entry)

    entry.content = data.get("content") or None
    entry.highlight = data.get("highlight") or None
    entry.is_private = bool(data.get("is_private"))
    for field in Entry.METRIC_FIELDS:
        setattr(entry, field, data.get(field))
    if not created:
        entry.updated_at = datetime.utcnow()

    db.flush()
    replace_entry_tags(db, entry, data.get("tag_ids") or [])
    db.commit()
    db.refresh(entry)

    logger.info(
        "%s entry %s for user %s on %s",
        "Created" if created else "Updated", entry.id, user_id, entry_date,
    )
    return entry, created


def list_entries(
    db: Session,
    user_id: int,
    limit: int = 30,
    offset: int = 0,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    tag_id: Optional[int] = None,
    min_mood: Optional[int] = None,
    max_mood: Optional[int] = None,
) -> Tuple[List[Entry], int]:
    """Filtered page of entries, newest first, plus the total matching count."""
    query = db.query(Entry).filter(Entry.user_id == user_id)

    if start_date:
        query = query.filter(Entry.entry_date >= start_date)
    if end_date:
        query = query.filter(Entry.entry_date <= end_date)
    if tag_id:
        query = query.filter(
            Entry.id.in_(db.query(EntryTag.entry_id).filter(EntryTag.tag_id == tag_id))
        )
    if min_mood is not None:
        query = query.filter(Entry.mood >= min_mood)
    if max_mood is not None:
        query = query.filter(Entry.mood <= max_mood)

    total = query.with_entities(func.count(Entry.id)).scalar() or 0

    entries = (
        query.options(selectinload(Entry.tags))
        .order_by(Entry.entry_date.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return entries, total


def get_context_entries(db: Session, entry: Entry, limit: int = CONTEXT_ENTRY_LIMIT) -> List[Entry]:
    """Up to `limit` non-private entries before `entry`, newest first."""
    return (
        db.query(Entry)
        .options(selectinload(Entry.tags))
        .filter(
            Entry.user_id == entry.user_id,
            Entry.entry_date < entry.entry_date,
            Entry.is_private.is_(False),
        )
        .order_by(Entry.entry_date.desc())
        .limit(limit)
        .all()
    )


def clean_emotion_labels(labels: List[str]) -> List[str]:
    """Trimmed, non-empty, de-duplicated labels cut to the column length."""
    cleaned = (
        label.strip()[:EMOTION_LABEL_LENGTH].strip()
        for label in labels
        if isinstance(label, str)
    )
    return list(dict.fromkeys(label for label in cleaned if label))


def record_daily_insight(
    db: Session, entry: Entry, insights: Dict[str, Any], generated_at: datetime
) -> AIInsight:
    """
    Persist a generated insight and, when it carries emotion labels,
    replace the entry's emotions with them.
    """
    insight = AIInsight.record(
        user_id=entry.user_id,
        entry_id=entry.id,
        insight_type="daily_summary",
        payload=insights,
        generated_at=generated_at,
    )
    db.add(insight)

    emotions = clean_emotion_labels(insights.get("emotions") or [])
    if emotions:
        db.query(EntryEmotion).filter(EntryEmotion.entry_id == entry.id).delete(
            synchronize_session=False
        )
        for emotion in emotions:
            db.add(EntryEmotion(entry_id=entry.id, emotion=emotion))

    db.commit()
    db.refresh(insight)
    return insight


def toggle_favorite(db: Session, entry: Entry) -> bool:
    entry.is_favorite = not entry.is_favorite
    entry.updated_at = datetime.utcnow()
    db.commit()
    return bool(entry.is_favorite)


def entry_detail(entry: Entry, include_emotions: bool = True) -> Dict[str, Any]:
    """Entry with tags, insights (newest first) and optionally emotions."""
    data = entry.to_dict()
    data["insights"] = [insight.to_dict() for insight in entry.insights]
    if include_emotions:
        data["emotions"] = [emotion.to_dict() for emotion in entry.emotions]
    return data
