"""
Dashboard Statistics Service

Aggregates a user's entries for the dashboard:
- Rolling averages over a lookback window (empty mean is 0)
- Current streak over the whole history
- Top tags, mood and sleep trends
- Heatmap, emotion summary and weekly window helpers

Dates are calendar days; callers pass `today` (see template_config.app_today).
"""

import calendar
import math
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from lifelog.models import Entry, EntryEmotion, EntryTag, Tag
from lifelog.services.insights import ContextData

DEFAULT_PERIOD = 7
TOP_TAGS_LIMIT = 5

# Neutral values used only for prompting when the recent window has no data
CONTEXT_DEFAULTS = {"mood": 5.0, "sleep_hours": 7.0, "energy": 5.0}


def parse_period(value: Any, default: int = DEFAULT_PERIOD) -> int:
    """Coerce a query value to a positive day count, falling back to `default`."""
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    period = int(number)
    return period if period >= 1 else default


def round_one(value: float) -> float:
    """Round half up to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def mean_or_zero(values: Iterable[Optional[float]]) -> float:
    """Mean of the non-null values, rounded to one decimal; 0 when there are none."""
    present = [v for v in values if v is not None]
    if not present:
        return 0
    return round_one(sum(present) / len(present))


def compute_streak(entry_dates: Iterable[date], today: date) -> int:
    """
    Count consecutive days with an entry, walking backward from today.

    Returns 0 when today itself has no entry.
    """
    days = set(entry_dates)
    streak = 0
    current = today
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def build_trend(entries: Iterable[Entry], field: str, key: str) -> List[dict]:
    """Oldest-to-newest points for entries that have `field` set."""
    points = [
        {"date": e.entry_date.isoformat(), key: getattr(e, field)}
        for e in entries
        if getattr(e, field) is not None
    ]
    points.sort(key=lambda p: p["date"])
    return points


def get_window_entries(db: Session, user_id: int, start: date, end: date) -> List[Entry]:
    return (
        db.query(Entry)
        .filter(
            Entry.user_id == user_id,
            Entry.entry_date >= start,
            Entry.entry_date <= end,
        )
        .order_by(Entry.entry_date.desc())
        .all()
    )


def get_top_tags(
    db: Session, user_id: int, start: date, end: date, limit: int = TOP_TAGS_LIMIT
) -> List[dict]:
    rows = (
        db.query(Tag.name, Tag.color, func.count(EntryTag.id).label("count"))
        .join(EntryTag, EntryTag.tag_id == Tag.id)
        .join(Entry, Entry.id == EntryTag.entry_id)
        .filter(
            Entry.user_id == user_id,
            Entry.entry_date >= start,
            Entry.entry_date <= end,
        )
        .group_by(Tag.id, Tag.name, Tag.color)
        .order_by(func.count(EntryTag.id).desc())
        .limit(limit)
        .all()
    )
    return [{"name": name, "color": color, "count": count} for name, color, count in rows]


def get_dashboard_stats(db: Session, user_id: int, period: Any, today: date) -> dict:
    """
    Summary of the window [today - period, today] plus the all-time streak.

    Returns:
        Dict with avgMood, avgEnergy, avgSleep, avgStress, totalEntries,
        currentStreak, topTags, moodTrend and sleepTrend.
    """
    days = parse_period(period)
    start = today - timedelta(days=days)
    entries = get_window_entries(db, user_id, start, today)

    all_dates = [
        row.entry_date
        for row in db.query(Entry.entry_date)
        .filter(Entry.user_id == user_id, Entry.entry_date <= today)
        .all()
    ]

    return {
        "avgMood": mean_or_zero(e.mood for e in entries),
        "avgEnergy": mean_or_zero(e.energy for e in entries),
        "avgSleep": mean_or_zero(e.sleep_hours for e in entries),
        "avgStress": mean_or_zero(e.stress for e in entries),
        "totalEntries": len(entries),
        "currentStreak": compute_streak(all_dates, today),
        "topTags": get_top_tags(db, user_id, start, today),
        "moodTrend": build_trend(entries, "mood", "mood"),
        "sleepTrend": build_trend(entries, "sleep_hours", "hours"),
    }


def get_heatmap(db: Session, user_id: int, year: int, month: Optional[int] = None) -> List[dict]:
    """Daily mood/energy/sleep for a whole year, or one month of it."""
    if month:
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
    else:
        start = date(year, 1, 1)
        end = date(year, 12, 31)

    rows = (
        db.query(Entry.entry_date, Entry.mood, Entry.energy, Entry.sleep_hours)
        .filter(
            Entry.user_id == user_id,
            Entry.entry_date >= start,
            Entry.entry_date <= end,
        )
        .order_by(Entry.entry_date)
        .all()
    )
    return [
        {"date": d.isoformat(), "mood": mood, "energy": energy, "sleep": sleep}
        for d, mood, energy, sleep in rows
    ]


def get_emotion_summary(db: Session, user_id: int, period: Any, today: date) -> List[dict]:
    """Emotion labels detected over the window, most frequent first."""
    days = parse_period(period, default=30)
    start = today - timedelta(days=days)

    rows = (
        db.query(
            EntryEmotion.emotion,
            func.count(EntryEmotion.id).label("count"),
            func.avg(EntryEmotion.intensity).label("avg_intensity"),
        )
        .join(Entry, Entry.id == EntryEmotion.entry_id)
        .filter(
            Entry.user_id == user_id,
            Entry.entry_date >= start,
            Entry.entry_date <= today,
        )
        .group_by(EntryEmotion.emotion)
        .order_by(func.count(EntryEmotion.id).desc())
        .all()
    )
    return [
        {
            "emotion": emotion,
            "count": count,
            "avg_intensity": round_one(float(avg)) if avg is not None else None,
        }
        for emotion, count, avg in rows
    ]


def get_tag_usage(db: Session, user_id: int) -> List[dict]:
    """Every tag visible to the user with how many of the user's entries use it."""
    usage = (
        db.query(EntryTag.tag_id, func.count(EntryTag.id).label("usage_count"))
        .join(Entry, Entry.id == EntryTag.entry_id)
        .filter(Entry.user_id == user_id)
        .group_by(EntryTag.tag_id)
        .subquery()
    )
    usage_count = func.coalesce(usage.c.usage_count, 0)

    rows = (
        db.query(Tag, usage_count)
        .outerjoin(usage, usage.c.tag_id == Tag.id)
        .filter(or_(Tag.user_id.is_(None), Tag.user_id == user_id))
        .order_by(usage_count.desc(), Tag.name)
        .all()
    )
    return [{**tag.to_dict(), "usage_count": count} for tag, count in rows]


def week_bounds(today: date, offset: int = 0) -> Tuple[date, date]:
    """Sunday..Saturday of the week `offset` weeks before the current one."""
    days_since_sunday = (today.weekday() + 1) % 7
    start = today - timedelta(days=days_since_sunday + 7 * offset)
    return start, start + timedelta(days=6)


def build_context(entries: List[Entry], tag_limit: int = TOP_TAGS_LIMIT) -> ContextData:
    """Averages and frequent tag names over recent entries, for prompting."""

    def avg(field):
        values = [getattr(e, field) for e in entries if getattr(e, field) is not None]
        if not values:
            return CONTEXT_DEFAULTS[field]
        return sum(values) / len(values)

    tag_counts = Counter(tag.name for e in entries for tag in e.tags)

    return ContextData(
        recent_entries=list(entries),
        avg_mood=avg("mood"),
        avg_sleep=avg("sleep_hours"),
        avg_energy=avg("energy"),
        frequent_tags=[name for name, _ in tag_counts.most_common(tag_limit)],
    )


def empty_week_summary() -> dict:
    return {
        "title": "A week without entries",
        "narrative": "You did not record any entries this week.",
        "highlights": [],
        "lowlights": [],
        "suggestions": ["Try writing for a few minutes a day to keep track of your progress."],
    }


def basic_week_summary(entries: List[Entry]) -> dict:
    """Weekly review computed locally when no API key is configured."""
    moods = [e.mood for e in entries if e.mood is not None]
    avg_mood = sum(moods) / len(moods) if moods else 0
    return {
        "title": f"A week with {len(entries)} entries",
        "narrative": (
            f"You recorded {len(entries)} entr{'y' if len(entries) == 1 else 'ies'} this week "
            f"with an average mood of {avg_mood:.1f}/10. "
            "Configure your API key for more detailed reviews."
        ),
        "highlights": [
            e.highlight or f"Day {e.entry_date.isoformat()}" for e in entries if e.is_favorite
        ],
        "lowlights": [],
        "suggestions": ["Configure your API key in the settings to receive personalized reviews."],
    }


def text_search(db: Session, user_id: int, query: str, limit: int = 20) -> List[Entry]:
    """Plain substring search over content and highlight, newest first."""
    pattern = f"%{query}%"
    return (
        db.query(Entry)
        .options(selectinload(Entry.tags))
        .filter(
            Entry.user_id == user_id,
            or_(Entry.content.ilike(pattern), Entry.highlight.ilike(pattern)),
        )
        .order_by(Entry.entry_date.desc())
        .limit(limit)
        .all()
    )
