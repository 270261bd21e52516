import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from em_diary.models.mood import Mood


class ActionItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str
    done: bool = False
    due_date: Optional[dt.date] = Field(default=None, alias="dueDate")

    @property
    def is_overdue(self) -> bool:
        if self.done or self.due_date is None:
            return False
        return self.due_date < dt.date.today()


class OneOnOneNoteCreate(BaseModel):
    """Fields collected by the note form.

    ``user_id`` references a team member but is not checked against the
    ``users`` collection; notes outlive a deleted member.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    date: dt.date
    talking_points: str = Field(alias="talkingPoints")
    mood: Mood = Mood.HAPPY
    flag: bool = False
    flag_description: str = Field(default="", alias="flagDescription")
    action_items: List[ActionItem] = Field(default_factory=list, alias="actionItems")

    @field_validator("flag_description", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("action_items", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value


class OneOnOneNote(OneOnOneNoteCreate):
    id: str
    created_at: dt.datetime = Field(alias="createdAt")

    def __repr__(self):
        return f"<OneOnOneNote {self.id} {self.date.isoformat()}>"


class OneOnOneNoteUpdate(BaseModel):
    """Partial update: only fields explicitly set are written.

    ``id``, ``userId`` and ``createdAt`` are not updatable.
    """

    model_config = ConfigDict(populate_by_name=True)

    date: Optional[dt.date] = None
    talking_points: Optional[str] = Field(default=None, alias="talkingPoints")
    mood: Optional[Mood] = None
    flag: Optional[bool] = None
    flag_description: Optional[str] = Field(default=None, alias="flagDescription")
    action_items: Optional[List[ActionItem]] = Field(default=None, alias="actionItems")


class NotesSummary(BaseModel):
    """Derived per-member note statistics; never stored."""

    model_config = ConfigDict(populate_by_name=True)

    total_notes: int = Field(default=0, alias="totalNotes")
    flagged_notes: int = Field(default=0, alias="flaggedNotes")
    last_note_mood: Optional[Mood] = Field(default=None, alias="lastNoteMood")
