from em_diary.state.base import CollectionSnapshot, EntityState, StateError
from em_diary.state.notes import NoteState
from em_diary.state.team import TeamMemberState

__all__ = [
    "CollectionSnapshot",
    "EntityState",
    "StateError",
    "NoteState",
    "TeamMemberState",
]
