from em_diary.models.mood import Mood
from em_diary.models.team_member import TeamMember, TeamMemberCreate, TeamMemberUpdate
from em_diary.models.note import (
    ActionItem,
    NotesSummary,
    OneOnOneNote,
    OneOnOneNoteCreate,
    OneOnOneNoteUpdate,
)

__all__ = [
    "Mood",
    "TeamMember",
    "TeamMemberCreate",
    "TeamMemberUpdate",
    "ActionItem",
    "NotesSummary",
    "OneOnOneNote",
    "OneOnOneNoteCreate",
    "OneOnOneNoteUpdate",
]
