import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session, selectinload

from lifelog.database import get_db
from lifelog.auth import get_current_user
from lifelog.models import Entry, User
from lifelog.services.dashboard_service import (
    basic_week_summary,
    build_context,
    empty_week_summary,
    get_dashboard_stats,
    get_emotion_summary,
    get_heatmap,
    get_window_entries,
    text_search,
    week_bounds,
)
from lifelog.services.insights import generate_weekly_summary, semantic_search
from lifelog.services.settings_service import get_or_create_settings
from lifelog.template_config import app_today

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

SEMANTIC_SEARCH_POOL = 100


class SearchRequest(BaseModel):
    query: Optional[str] = None
    limit: int = 20


@router.get("/stats")
async def dashboard_stats(
    period: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Averages, streak, top tags and trends for the last `period` days (default 7)."""
    return {"stats": get_dashboard_stats(db, user.id, period, app_today())}


@router.get("/weekly-summary")
def weekly_summary(
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Review of the Sunday-Saturday week `offset` weeks ago."""
    start, end = week_bounds(app_today(), offset)
    period = {"start": start.isoformat(), "end": end.isoformat()}

    entries = list(reversed(get_window_entries(db, user.id, start, end)))
    if not entries:
        return {"summary": empty_week_summary(), "period": period, "entries_count": 0}

    settings = get_or_create_settings(db, user)
    if not settings.deepseek_api_key:
        summary = basic_week_summary(entries)
    else:
        summary = generate_weekly_summary(
            settings.deepseek_api_key,
            settings.ai_depth,
            entries,
            build_context(entries),
        )

    return {"summary": summary, "period": period, "entries_count": len(entries)}


@router.post("/search")
def search_entries(
    data: SearchRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Search entries. Without an API key this is a plain text match; with
    one, the latest non-private entries are ranked by the AI.
    """
    query = (data.query or "").strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query is required")
    limit = max(1, data.limit)

    settings = get_or_create_settings(db, user)
    if not settings.deepseek_api_key:
        return {
            "results": [e.to_dict() for e in text_search(db, user.id, query, limit)],
            "method": "text",
            "message": "Configure your API key for smarter semantic search.",
        }

    pool = (
        db.query(Entry)
        .options(selectinload(Entry.tags))
        .filter(Entry.user_id == user.id, Entry.is_private.is_(False))
        .order_by(Entry.entry_date.desc())
        .limit(SEMANTIC_SEARCH_POOL)
        .all()
    )
    if not pool:
        return {"results": [], "method": "semantic"}

    found = semantic_search(settings.deepseek_api_key, query, pool)
    by_id = {entry.id: entry for entry in pool}

    results = []
    for item in found["results"][:limit]:
        entry = by_id.get(item["entry_id"])
        if entry:
            results.append({**entry.to_dict(), "relevance": item["relevance"]})

    return {"results": results, "summary": found["summary"], "method": "semantic"}


@router.get("/heatmap")
async def heatmap(
    year: Optional[int] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Daily metrics for a year (or a single month) to colour a calendar."""
    year = year or app_today().year
    return {"heatmap": get_heatmap(db, user.id, year, month), "year": year, "month": month}


@router.get("/emotions")
async def emotions(
    period: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"emotions": get_emotion_summary(db, user.id, period, app_today())}
