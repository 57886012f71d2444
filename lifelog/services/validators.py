"""
Input Validators

Centralized validation for entries, tags, settings and registration.
Each validator collects every problem into a ValidationResult; routes call
raise_if_invalid() and turn the ValueError into a 400 response.
"""

import re
from datetime import date, datetime
from typing import Optional, Dict, Any, List
from sqlalchemy import func
from sqlalchemy.orm import Session

from lifelog.models import Tag, User, UserSettings


class ValidationResult:
    """Collects every validation error before failing."""
    def __init__(self):
        self.errors: List[str] = []

    def add_error(self, msg: str):
        self.errors.append(msg)

    def raise_if_invalid(self):
        """Raise ValueError if there are blocking errors."""
        if self.errors:
            raise ValueError("; ".join(self.errors))


def _is_empty(value: Any) -> bool:
    """Check if value is None or empty string."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def parse_date(value: Any) -> Optional[date]:
    """Parse a YYYY-MM-DD string (or pass a date through). None when invalid."""
    if isinstance(value, date):
        return value
    if _is_empty(value):
        return None
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


# ============================================================
# ENTRY VALIDATION
# ============================================================

# field -> (label, minimum, maximum)
METRIC_RANGES = {
    "mood": ("Mood", 0, 10),
    "energy": ("Energy", 0, 10),
    "stress": ("Stress", 0, 10),
    "sleep_hours": ("Sleep hours", 0, 24),
    "sleep_quality": ("Sleep quality", 0, 10),
    "focus": ("Focus", 0, 10),
    "physical_discomfort": ("Physical discomfort", 0, 10),
}


def validate_entry(data: Dict[str, Any]) -> ValidationResult:
    """
    Validate entry data for an upsert.

    Required: entry_date (YYYY-MM-DD)
    Each metric is optional but must be inside its range when present.
    """
    result = ValidationResult()

    if _is_empty(data.get("entry_date")):
        result.add_error("Entry date is required")
    elif parse_date(data.get("entry_date")) is None:
        result.add_error("Entry date must be in YYYY-MM-DD format")

    for field, (label, low, high) in METRIC_RANGES.items():
        value = data.get(field)
        if value is None:
            continue
        if value < low or value > high:
            result.add_error(f"{label} must be between {low} and {high}")

    return result


def validate_tag_ids(db: Session, user_id: int, tag_ids: List[int]) -> ValidationResult:
    """Every tag attached to an entry must be a system tag or owned by the user."""
    result = ValidationResult()
    wanted = set(tag_ids or [])
    if not wanted:
        return result

    visible = {
        row.id
        for row in db.query(Tag.id).filter(
            Tag.id.in_(wanted),
            (Tag.user_id.is_(None)) | (Tag.user_id == user_id),
        )
    }
    missing = sorted(wanted - visible)
    if missing:
        result.add_error(f"Unknown tag ids: {', '.join(str(i) for i in missing)}")
    return result


# ============================================================
# TAG VALIDATION
# ============================================================

def validate_tag_name(
    db: Session,
    user_id: int,
    name: Optional[str],
    existing_id: Optional[int] = None,
) -> ValidationResult:
    """
    Tag names are required and unique (case-insensitive) across the
    system tags plus the user's own tags.
    """
    result = ValidationResult()

    if _is_empty(name):
        result.add_error("Tag name is required")
        return result

    query = db.query(Tag).filter(
        (Tag.user_id.is_(None)) | (Tag.user_id == user_id),
        func.lower(Tag.name) == name.strip().lower(),
    )
    if existing_id:
        query = query.filter(Tag.id != existing_id)

    if query.first():
        result.add_error("A tag with this name already exists")

    return result


# ============================================================
# SETTINGS VALIDATION
# ============================================================

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_settings(data: Dict[str, Any]) -> ValidationResult:
    """Validate a partial settings update (only provided keys are checked)."""
    result = ValidationResult()

    if not data:
        result.add_error("No settings to update")
        return result

    ai_depth = data.get("ai_depth")
    if ai_depth is not None and ai_depth not in UserSettings.AI_DEPTHS:
        result.add_error("Invalid AI depth")

    theme = data.get("theme")
    if theme is not None and theme not in UserSettings.THEMES:
        result.add_error("Invalid theme")

    notification_time = data.get("notification_time")
    if notification_time is not None and not TIME_PATTERN.match(notification_time):
        result.add_error("Notification time must be in HH:MM format")

    return result


# ============================================================
# REGISTRATION VALIDATION
# ============================================================

def validate_registration(
    data: Dict[str, Any],
    db: Session,
    min_password_length: int = 6,
) -> ValidationResult:
    """
    Validate a new account.

    Required: email, password, name
    Block: password shorter than the minimum, email already registered
    """
    result = ValidationResult()

    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password or _is_empty(data.get("name")):
        result.add_error("Email, password and name are required")
        return result

    if len(password) < min_password_length:
        result.add_error(f"Password must be at least {min_password_length} characters")

    if db.query(User.id).filter(User.email == email).first():
        result.add_error("Email already registered")

    return result
