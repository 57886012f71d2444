import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from lifelog.database import get_db
from lifelog.auth import (
    MIN_PASSWORD_LENGTH,
    authenticate_user,
    create_access_token,
    get_current_user,
    hash_password,
)
from lifelog.models import User, UserSettings
from lifelog.services.validators import validate_registration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=201)
async def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account with default settings and return a token."""
    try:
        validate_registration(
            data.model_dump(), db, min_password_length=MIN_PASSWORD_LENGTH
        ).raise_if_invalid()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    user = User(
        email=data.email.strip().lower(),
        password_hash=hash_password(data.password),
        name=data.name.strip(),
    )
    user.settings = UserSettings()
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Registered user %s", user.id)
    return {"token": create_access_token(user.id), "user": user.to_dict()}


@router.post("/login")
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    if not data.email or not data.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = authenticate_user(db, data.email, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {"token": create_access_token(user.id), "user": user.to_dict()}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Return the authenticated user."""
    return {"user": user.to_dict()}
