from typing import List

from em_diary.models import OneOnOneNote, OneOnOneNoteUpdate
from em_diary.state.base import EntityState, StateError
from em_diary.store import NoteRepository


class NoteState(EntityState[OneOnOneNote]):
    """One team member's notes, most recent date first."""

    entity_label = "note"
    fetch_error = "Failed to fetch notes"

    def __init__(self, repository: NoteRepository, user_id: str) -> None:
        super().__init__(repository)
        self.user_id = user_id

    def _list(self) -> List[OneOnOneNote]:
        return self.repository.list_by_user(self.user_id)

    def _add(self, items: List[OneOnOneNote], entity: OneOnOneNote) -> List[OneOnOneNote]:
        return [entity] + items

    async def resolve_flag(self, note_id: str) -> None:
        """Clear a note's flag and its description."""
        await self.update(note_id, OneOnOneNoteUpdate(flag=False, flag_description=""))

    async def set_action_item_done(self, note_id: str, index: int, done: bool) -> None:
        """Mark one action item done (or not done) by position.

        The whole ``actionItems`` list is written back through ``update``.
        """
        note = self.get(note_id)
        if note is None or not 0 <= index < len(note.action_items):
            raise StateError("Failed to update note")
        items = [item.model_copy() for item in note.action_items]
        items[index] = items[index].model_copy(update={"done": done})
        await self.update(note_id, OneOnOneNoteUpdate(action_items=items))
