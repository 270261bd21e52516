"""Shared application state and the FastAPI dependencies that hand it out.

``DiaryContext`` is built once when the app starts and stored on
``app.state``; routes receive it (or parts of it) through ``Depends`` rather
than importing module globals.
"""
from dataclasses import dataclass

from fastapi import Depends, Request

from em_diary.services.summary_service import NotesSummaryTracker
from em_diary.state import NoteState, TeamMemberState
from em_diary.store import MongoStore


@dataclass
class DiaryContext:
    store: MongoStore
    team: TeamMemberState
    summaries: NotesSummaryTracker

    @classmethod
    def from_store(cls, store: MongoStore) -> "DiaryContext":
        return cls(
            store=store,
            team=TeamMemberState(store.members),
            summaries=NotesSummaryTracker(store.notes),
        )


def get_context(request: Request) -> DiaryContext:
    return request.app.state.diary


def get_team(context: DiaryContext = Depends(get_context)) -> TeamMemberState:
    """The roster shared by every request."""
    return context.team


def get_summaries(context: DiaryContext = Depends(get_context)) -> NotesSummaryTracker:
    return context.summaries


def get_note_state(
    member_id: str, context: DiaryContext = Depends(get_context)
) -> NoteState:
    """A fresh notes controller for the member in the URL."""
    return NoteState(context.store.notes, member_id)
