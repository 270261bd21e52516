"""Centralized Jinja2 template configuration with timezone support."""
import os
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from fastapi.templating import Jinja2Templates

from em_diary.config import APP_TIMEZONE

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")


def get_app_tz() -> ZoneInfo:
    """Get the application timezone."""
    return ZoneInfo(APP_TIMEZONE)


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime. Use this instead of datetime.now()."""
    return datetime.now(timezone.utc)


def local_today() -> date:
    """Today's date in the app timezone (the note form's default date)."""
    return utc_now().astimezone(get_app_tz()).date()


def to_local(dt: datetime) -> datetime:
    """Convert a datetime to the app's local timezone for display.

    Naive datetimes are assumed to be UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(get_app_tz())


def localtime(dt: datetime, fmt: str = None) -> str:
    """Jinja filter to convert UTC datetime to local time string.

    Usage in templates:
        {{ note.created_at | localtime }}
        {{ note.created_at | localtime('%b %d, %H:%M') }}
    """
    if dt is None:
        return ""

    return to_local(dt).strftime(fmt or "%b %d, %H:%M")


def localdate(value, fmt: str = None) -> str:
    """Jinja filter for calendar dates and timestamps.

    Plain dates (birthdays, note dates) are shown as-is; datetimes are
    converted to local time first.

    Usage in templates:
        {{ note.date | localdate }}
        {{ member.birthday | localdate('%B %d') }}
    """
    if value is None:
        return ""

    if isinstance(value, datetime):
        value = to_local(value)

    # Default format: "January 15, 2025"
    return value.strftime(fmt or "%B %d, %Y")


def create_templates() -> Jinja2Templates:
    """Create a Jinja2Templates instance with custom filters."""
    templates = Jinja2Templates(directory=TEMPLATE_DIR)

    templates.env.filters["localtime"] = localtime
    templates.env.filters["localdate"] = localdate

    return templates


# Singleton template instance - import this in route files
templates = create_templates()
