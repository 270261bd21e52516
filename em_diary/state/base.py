"""In-memory collection controllers backed by a document repository.

A controller caches one collection (``items``) together with a ``loading``
flag and an ``error`` slot. Mutations are applied locally only after the
store confirms them; nothing is applied ahead of the remote call.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from em_diary.store import DocumentRepository, StoreError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)


class StateError(Exception):
    """A create/update/delete did not go through.

    The store error is chained as ``__cause__``; check it for
    ``StorePermissionError`` to tell an expired session from an outage.
    """


@dataclass(frozen=True)
class CollectionSnapshot(Generic[E]):
    """The collection as one fetch left it.

    Pages render this rather than the live controller, which other requests
    may be refetching.
    """

    items: List[E] = field(default_factory=list)
    error: Optional[str] = None
    loading: bool = False


class EntityState(Generic[E]):
    """Cached collection of one entity type.

    Subclasses set the user-facing ``entity_label`` and ``fetch_error`` text
    and implement ``_list`` and ``_add``.
    """

    entity_label = "item"
    fetch_error = "Failed to fetch items"

    def __init__(self, repository: DocumentRepository) -> None:
        self.repository = repository
        self.items: List[E] = []
        self.loading = False
        self.error: Optional[str] = None

    def _list(self) -> List[E]:
        raise NotImplementedError

    def _add(self, items: List[E], entity: E) -> List[E]:
        raise NotImplementedError

    def get(self, entity_id: str) -> Optional[E]:
        """Cached entity by id, without a round trip."""
        for item in self.items:
            if item.id == entity_id:
                return item
        return None

    async def fetch_all(self) -> CollectionSnapshot[E]:
        """Replace the collection with a fresh listing.

        A failed fetch clears the collection and sets ``error``. Returns the
        result of this fetch.
        """
        self.loading = True
        self.error = None
        error = None
        try:
            items = await run_in_threadpool(self._list)
        except StoreError as e:
            logger.warning("%s: %s", self.fetch_error, str(e))
            items = []
            error = self.fetch_error
        finally:
            self.loading = False
        self.items = items
        self.error = error
        return CollectionSnapshot(items=items, error=error)

    async def create(self, data: BaseModel) -> E:
        try:
            entity = await run_in_threadpool(self.repository.create, data)
        except StoreError as e:
            raise StateError(f"Failed to create {self.entity_label}") from e
        self.items = self._add(self.items, entity)
        return entity

    async def update(
        self, entity_id: str, changes: Union[BaseModel, Dict[str, Any]]
    ) -> None:
        """Apply a partial update; only fields set on ``changes`` change."""
        if not isinstance(changes, self.repository.update_model):
            changes = self.repository.update_model.model_validate(changes)
        try:
            await run_in_threadpool(self.repository.update, entity_id, changes)
        except StoreError as e:
            raise StateError(f"Failed to update {self.entity_label}") from e

        fields = {name: getattr(changes, name) for name in changes.model_fields_set}
        self.items = [
            item.model_copy(update=fields) if item.id == entity_id else item
            for item in self.items
        ]

    async def delete(self, entity_id: str) -> None:
        try:
            await run_in_threadpool(self.repository.delete, entity_id)
        except StoreError as e:
            raise StateError(f"Failed to delete {self.entity_label}") from e
        self.items = [item for item in self.items if item.id != entity_id]
