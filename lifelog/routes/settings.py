import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from lifelog.database import get_db
from lifelog.auth import get_current_user
from lifelog.models import User
from lifelog.services.insights import check_api_key
from lifelog.services.settings_service import get_or_create_settings
from lifelog.services.validators import validate_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SettingsUpdateRequest(BaseModel):
    deepseek_api_key: Optional[str] = None
    ai_depth: Optional[str] = None
    theme: Optional[str] = None
    discrete_mode: Optional[bool] = None
    notifications_enabled: Optional[bool] = None
    notification_time: Optional[str] = None


class ApiKeyTestRequest(BaseModel):
    api_key: Optional[str] = None


@router.get("")
async def get_settings(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Settings with the API key masked."""
    return {"settings": get_or_create_settings(db, user).to_dict()}


@router.patch("")
async def update_settings(
    data: SettingsUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial update; only keys present in the body are applied."""
    changes = data.model_dump(exclude_unset=True)
    try:
        validate_settings(changes).raise_if_invalid()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    settings = get_or_create_settings(db, user)
    for key, value in changes.items():
        if key == "deepseek_api_key":
            # An empty string clears the key
            value = value.strip() if value else None
        elif key in ("discrete_mode", "notifications_enabled"):
            value = bool(value)
        elif value is None:
            continue
        setattr(settings, key, value)
    settings.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(settings)

    return {"settings": settings.to_dict()}


@router.post("/test-api-key")
def verify_api_key(
    data: ApiKeyTestRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Check a key from the body, or the stored key when none is given."""
    key_to_test = data.api_key or get_or_create_settings(db, user).deepseek_api_key
    if not key_to_test:
        raise HTTPException(status_code=400, detail="No API key provided or configured")

    valid, message = check_api_key(key_to_test)
    if valid:
        return {"valid": True, "message": message}
    return {"valid": False, "error": message}


@router.delete("/api-key")
async def delete_api_key(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    settings = get_or_create_settings(db, user)
    settings.deepseek_api_key = None
    settings.updated_at = datetime.utcnow()
    db.commit()
    logger.info("Removed API key for user %s", user.id)
    return {"success": True, "message": "API key removed"}
