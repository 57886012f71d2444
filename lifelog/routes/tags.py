from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from lifelog.database import get_db
from lifelog.auth import get_current_user
from lifelog.models import Tag, User
from lifelog.services.dashboard_service import get_tag_usage
from lifelog.services.validators import validate_tag_name

router = APIRouter(prefix="/api/tags", tags=["tags"])


class TagCreateRequest(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class TagUpdateRequest(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


def _get_own_tag(db: Session, user: User, tag_id: int) -> Tag:
    """Custom tags only; system tags cannot be edited or deleted."""
    tag = (
        db.query(Tag)
        .filter(Tag.id == tag_id, Tag.user_id == user.id, Tag.is_system.is_(False))
        .first()
    )
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found or cannot be modified")
    return tag


@router.get("")
async def list_tags(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """System tags first, then the user's own, each group by name."""
    tags = (
        db.query(Tag)
        .filter(or_(Tag.user_id.is_(None), Tag.user_id == user.id))
        .order_by(Tag.is_system.desc(), Tag.name)
        .all()
    )
    return {"tags": [tag.to_dict() for tag in tags]}


@router.get("/stats")
async def tag_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Usage count of every visible tag across the user's entries."""
    return {"stats": get_tag_usage(db, user.id)}


@router.post("", status_code=201)
async def create_tag(
    data: TagCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a custom tag. Names are stored trimmed and lower-cased."""
    try:
        validate_tag_name(db, user.id, data.name).raise_if_invalid()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    tag = Tag(
        user_id=user.id,
        name=data.name.strip().lower(),
        color=data.color or Tag.DEFAULT_COLOR,
        icon=data.icon or Tag.DEFAULT_ICON,
        is_system=False,
    )
    db.add(tag)
    db.commit()
    db.refresh(tag)
    return {"tag": tag.to_dict()}


@router.patch("/{tag_id}")
async def update_tag(
    tag_id: int,
    data: TagUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update only the fields that were provided."""
    tag = _get_own_tag(db, user, tag_id)

    if data.name is not None:
        try:
            validate_tag_name(db, user.id, data.name, existing_id=tag.id).raise_if_invalid()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        tag.name = data.name.strip().lower()
    if data.color:
        tag.color = data.color
    if data.icon:
        tag.icon = data.icon

    db.commit()
    db.refresh(tag)
    return {"tag": tag.to_dict()}


@router.delete("/{tag_id}")
async def delete_tag(
    tag_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tag = _get_own_tag(db, user, tag_id)
    db.delete(tag)
    db.commit()
    return {"success": True}
