"""
Notes Summary Service

Per team member, over that member's notes:
- totalNotes   => number of notes
- flaggedNotes => number of notes with flag set
- lastNoteMood => mood of the earliest-dated note seen (the first note seen
                  sets it, a strictly earlier date replaces it)

Members without notes get {0, 0, None}. Summaries are recomputed on every
refresh and never stored.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from fastapi.concurrency import run_in_threadpool

from em_diary.models import NotesSummary, OneOnOneNote
from em_diary.store import NoteRepository, StoreError

logger = logging.getLogger(__name__)


def fold_note_summaries(
    notes: Iterable[OneOnOneNote], user_ids: Iterable[str]
) -> Dict[str, NotesSummary]:
    """
    Fold notes into one summary per requested user id.

    Args:
        notes: Notes in any order
        user_ids: Team member ids to summarize; notes for other ids are ignored

    Returns:
        Mapping of every requested id to its NotesSummary
    """
    summary: Dict[str, NotesSummary] = {uid: NotesSummary() for uid in user_ids}
    mood_dates: Dict[str, date] = {}

    for note in notes:
        entry = summary.get(note.user_id)
        if entry is None:
            continue

        entry.total_notes += 1
        if note.flag:
            entry.flagged_notes += 1

        # TODO: confirm with product whether this should track the latest note;
        # it keeps the earliest-dated one today.
        seen: Optional[date] = mood_dates.get(note.user_id)
        if entry.last_note_mood is None or (seen is not None and note.date < seen):
            entry.last_note_mood = note.mood
            mood_dates[note.user_id] = note.date

    return summary


class NotesSummaryTracker:
    """Holds the latest summaries for a roster and refreshes them on demand."""

    def __init__(self, repository: NoteRepository) -> None:
        self.repository = repository
        self.summary: Dict[str, NotesSummary] = {}

    async def refresh(self, user_ids: List[str]) -> Dict[str, NotesSummary]:
        """Fetch every note for ``user_ids`` in one query and re-fold.

        On a failed fetch the previous summary is kept.
        """
        if not user_ids:
            return self.summary

        try:
            notes = await run_in_threadpool(self.repository.list_by_users, user_ids)
        except StoreError as e:
            logger.error("Error fetching notes summary: %s", str(e))
            return self.summary

        self.summary = fold_note_summaries(notes, user_ids)
        return self.summary
