from typing import List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from em_diary.models import TeamMember
from em_diary.state.base import EntityState
from em_diary.store import StoreError, TeamMemberRepository


class TeamMemberState(EntityState[TeamMember]):
    """The team roster.

    One instance lives for the whole app (see ``em_diary.main``); every route
    reads the same roster and writes only through these methods.
    """

    entity_label = "user"
    fetch_error = "Failed to fetch users"

    def __init__(self, repository: TeamMemberRepository) -> None:
        super().__init__(repository)

    def _list(self) -> List[TeamMember]:
        return self.repository.list_all()

    def _add(self, items: List[TeamMember], entity: TeamMember) -> List[TeamMember]:
        # Order is restored by name on the next fetch
        return items + [entity]

    async def lookup(self, member_id: str) -> Tuple[Optional[TeamMember], Optional[str]]:
        """Find one member, from the roster when cached, else from the store.

        Returns ``(member, None)`` or ``(None, error message)``.
        """
        member = self.get(member_id)
        if member is not None:
            return member, None
        try:
            member = await run_in_threadpool(self.repository.get_by_id, member_id)
        except StoreError:
            return None, "Failed to load user"
        if member is None:
            return None, "User not found"
        return member, None
