"""Helpers shared by the page routes."""
from datetime import date
from typing import Optional

from fastapi import Request

from em_diary.auth import NotAuthenticated
from em_diary.state import StateError
from em_diary.store import StorePermissionError


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD form value; blank or malformed gives None."""
    if not value or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return False


def raise_if_permission_denied(exc: StateError, request: Request) -> None:
    """Send the user back through sign-in when the database refused them."""
    if isinstance(exc.__cause__, StorePermissionError):
        raise NotAuthenticated(request.url.path) from exc
