"""
Form Validators

Required-field checks for the team member and note forms.
Each validator returns a ValidationResult; forms re-render with the errors.
"""

from datetime import date
from typing import Any, Dict, List

from em_diary.models import Mood


class ValidationResult:
    """Container for validation results."""
    def __init__(self):
        self.errors: List[str] = []

    def add_error(self, msg: str):
        self.errors.append(msg)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def message(self) -> str:
        return "; ".join(self.errors)


def _is_empty(value: Any) -> bool:
    """Check if value is None or empty string."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def _is_date(value: Any) -> bool:
    if isinstance(value, date):
        return True
    try:
        date.fromisoformat(str(value).strip())
    except ValueError:
        return False
    return True


# ============================================================
# TEAM MEMBER VALIDATION
# ============================================================

MEMBER_REQUIRED_FIELDS = {
    "name": "Name",
    "role": "Role",
    "birthday": "Birthday",
    "hiring_date": "Hiring date",
    "location": "Location",
}


def validate_team_member(data: Dict[str, Any]) -> ValidationResult:
    """
    Validate team member form data.

    Required: name, role, birthday, hiring_date, location
    Dates must be YYYY-MM-DD.
    """
    result = ValidationResult()

    for field, label in MEMBER_REQUIRED_FIELDS.items():
        if _is_empty(data.get(field)):
            result.add_error(f"{label} is required")

    for field in ("birthday", "hiring_date"):
        value = data.get(field)
        if not _is_empty(value) and not _is_date(value):
            result.add_error(f"{MEMBER_REQUIRED_FIELDS[field]} must be a valid date")

    return result


# ============================================================
# NOTE VALIDATION
# ============================================================

def validate_note(data: Dict[str, Any]) -> ValidationResult:
    """
    Validate one-on-one note form data.

    Required: date, talking_points, mood
    Required when flag is set: flag_description
    Action items need a description; due dates are optional.
    """
    result = ValidationResult()

    if _is_empty(data.get("date")):
        result.add_error("Date is required")
    elif not _is_date(data["date"]):
        result.add_error("Date must be a valid date")

    if _is_empty(data.get("talking_points")):
        result.add_error("Talking points are required")

    mood = data.get("mood")
    if _is_empty(mood):
        result.add_error("Mood is required")
    else:
        try:
            Mood(mood)
        except ValueError:
            result.add_error(f"Unknown mood: {mood}")

    if data.get("flag") and _is_empty(data.get("flag_description")):
        result.add_error("Flag description is required when flagging a note")

    for position, item in enumerate(data.get("action_items") or [], start=1):
        if _is_empty(item.get("description")):
            result.add_error(f"Action item {position} needs a description")
        due = item.get("due_date")
        if not _is_empty(due) and not _is_date(due):
            result.add_error(f"Action item {position} has an invalid due date")

    return result
