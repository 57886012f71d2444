"""Centralized Jinja2 template configuration with timezone support."""
import os
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from fastapi.templating import Jinja2Templates

# Calendar days (entry dates, streaks, dashboard windows) are taken in this zone
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")


def get_app_tz() -> ZoneInfo:
    """Get the application timezone."""
    return ZoneInfo(APP_TIMEZONE)


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime. Use this instead of datetime.now()."""
    return datetime.now(timezone.utc)


def app_today() -> date:
    """Today's calendar date in the application timezone."""
    return datetime.now(get_app_tz()).date()


templates = Jinja2Templates(directory=TEMPLATES_DIR)
