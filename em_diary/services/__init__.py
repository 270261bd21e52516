from em_diary.services.summary_service import NotesSummaryTracker, fold_note_summaries
from em_diary.services.validators import (
    ValidationResult,
    validate_note,
    validate_team_member,
)

__all__ = [
    'NotesSummaryTracker',
    'fold_note_summaries',
    'ValidationResult',
    'validate_note',
    'validate_team_member',
]
