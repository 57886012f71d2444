import os
from datetime import datetime
from typing import Optional
from passlib.context import CryptContext
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from fastapi import Request, HTTPException, status, Depends
from sqlalchemy.orm import Session

from lifelog.database import get_db, DATABASE_URL
from lifelog.models import User

# Password hashing
# Use a compatible hashing scheme for SQLite/dev when bcrypt may be unavailable
if DATABASE_URL.startswith("sqlite"):
    # pbkdf2_sha256 is widely available and avoids compiled bcrypt issues in dev
    pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
else:
    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt has a 72-byte limit on passwords
BCRYPT_MAX_BYTES = 72

# Token serializer
SECRET_KEY = os.getenv("SECRET_KEY", "lifelog-default-secret-change-in-production")
TOKEN_EXPIRE_MINUTES = int(os.getenv("TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
serializer = URLSafeTimedSerializer(SECRET_KEY, salt="lifelog-auth")

MIN_PASSWORD_LENGTH = 6


def _safe_password(password: str) -> bytes:
    """Encode password and truncate to bcrypt's 72-byte limit if needed."""
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password for storing."""
    return pwd_context.hash(_safe_password(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a stored password against one provided by user."""
    try:
        return pwd_context.verify(_safe_password(plain_password), hashed_password)
    except (ValueError, TypeError):
        # Malformed or unknown hash
        return False


def create_access_token(user_id: int) -> str:
    """Create a signed bearer token for a user."""
    data = {
        "user_id": user_id,
        "created": datetime.utcnow().isoformat()
    }
    return serializer.dumps(data)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate a bearer token. Returns None when invalid or expired."""
    try:
        return serializer.loads(token, max_age=TOKEN_EXPIRE_MINUTES * 60)
    except (BadSignature, SignatureExpired):
        return None


def get_bearer_token(request: Request) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer ...` header."""
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


async def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Resolve the authenticated user from the bearer token.
    Raises HTTPException(401) when the token is missing, invalid or stale.
    """
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    data = decode_access_token(token)
    if not data or not data.get("user_id"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.query(User).filter(User.id == data["user_id"]).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user by email and password."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
