import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from lifelog.database import get_db
from lifelog.auth import get_current_user
from lifelog.models import User
from lifelog.services.dashboard_service import build_context
from lifelog.services.entry_service import (
    entry_detail,
    get_context_entries,
    get_entry_by_date,
    get_user_entry,
    list_entries,
    record_daily_insight,
    toggle_favorite,
    upsert_entry,
)
from lifelog.services.insights import generate_daily_insights
from lifelog.services.settings_service import get_or_create_settings
from lifelog.services.validators import parse_date, validate_entry, validate_tag_ids
from lifelog.template_config import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/entries", tags=["entries"])


class EntryRequest(BaseModel):
    entry_date: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[int] = None
    energy: Optional[int] = None
    sleep_hours: Optional[float] = None
    sleep_quality: Optional[int] = None
    stress: Optional[int] = None
    focus: Optional[int] = None
    physical_discomfort: Optional[int] = None
    highlight: Optional[str] = None
    is_private: bool = False
    tag_ids: Optional[List[int]] = None


def _require_entry(db: Session, user: User, entry_id: int):
    entry = get_user_entry(db, user.id, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


def _date_param(value: Optional[str], name: str):
    if not value:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"{name} must be in YYYY-MM-DD format")
    return parsed


@router.get("")
async def get_entries(
    limit: int = Query(30, ge=1, le=365),
    offset: int = Query(0, ge=0),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    tag_id: Optional[int] = None,
    min_mood: Optional[int] = None,
    max_mood: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List entries newest first with optional date, tag and mood filters."""
    entries, total = list_entries(
        db,
        user.id,
        limit=limit,
        offset=offset,
        start_date=_date_param(start_date, "start_date"),
        end_date=_date_param(end_date, "end_date"),
        tag_id=tag_id,
        min_mood=min_mood,
        max_mood=max_mood,
    )
    return {
        "entries": [entry.to_dict() for entry in entries],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/date/{entry_date}")
async def get_entry_for_date(
    entry_date: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Entry for one calendar day, or {"entry": null}."""
    entry = get_entry_by_date(db, user.id, _date_param(entry_date, "date"))
    if not entry:
        return {"entry": None}
    return {"entry": entry_detail(entry, include_emotions=False)}


@router.get("/{entry_id}")
async def get_entry(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Entry with tags, insights and emotions."""
    return entry_detail(_require_entry(db, user, entry_id))


@router.post("")
async def save_entry(
    data: EntryRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create or replace the entry for `entry_date` (201 when created)."""
    payload = data.model_dump()
    try:
        validate_entry(payload).raise_if_invalid()
        validate_tag_ids(db, user.id, payload.get("tag_ids") or []).raise_if_invalid()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    payload["entry_date"] = parse_date(payload["entry_date"])
    entry, created = upsert_entry(db, user.id, payload)

    return JSONResponse(status_code=201 if created else 200, content=entry.to_dict())


@router.post("/{entry_id}/insights")
def generate_entry_insights(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Generate and store AI insights for an entry.

    Private entries are never sent to the AI. Generation itself never fails:
    when the API cannot be used the fixed fallback is stored and returned.
    """
    entry = _require_entry(db, user, entry_id)
    if entry.is_private:
        raise HTTPException(
            status_code=400,
            detail="This entry is marked as private and will not be processed by the AI",
        )

    settings = get_or_create_settings(db, user)
    if not settings.deepseek_api_key:
        raise HTTPException(
            status_code=400,
            detail="API key not configured. Add your DeepSeek API key in the settings to generate insights.",
        )

    context = build_context(get_context_entries(db, entry))
    insights = generate_daily_insights(
        settings.deepseek_api_key, settings.ai_depth, entry, context
    )
    record_daily_insight(db, entry, insights, utc_now())

    return {"insights": insights}


@router.patch("/{entry_id}/favorite")
async def favorite_entry(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    entry = _require_entry(db, user, entry_id)
    return {"is_favorite": toggle_favorite(db, entry)}


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete an entry; its tag links, emotions and insights go with it."""
    entry = _require_entry(db, user, entry_id)
    db.delete(entry)
    db.commit()
    logger.info("Deleted entry %s for user %s", entry_id, user.id)
    return {"success": True}
