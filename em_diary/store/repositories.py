"""Collection repositories for team members and one-on-one notes."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, Iterable, List, Optional, TypeVar, Union

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from em_diary.models import (
    OneOnOneNote,
    OneOnOneNoteCreate,
    OneOnOneNoteUpdate,
    TeamMember,
    TeamMemberCreate,
    TeamMemberUpdate,
)
from em_diary.store.errors import (
    CreateError,
    DeleteError,
    FetchError,
    StoreError,
    StorePermissionError,
    UpdateError,
    is_permission_failure,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def store_operation(
    error_cls: type[StoreError], action: str
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Map driver failures raised by a repository method to ``error_cls``.

    Authorization failures become ``StorePermissionError`` regardless of the
    operation. Nothing is retried.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(self: "DocumentRepository", *args: Any, **kwargs: Any) -> T:
            try:
                return func(self, *args, **kwargs)
            except PyMongoError as e:
                logger.error(
                    "Failed to %s in %s: %s", action, self.collection_name, str(e)
                )
                if is_permission_failure(e):
                    raise StorePermissionError(
                        f"Not allowed to {action} in {self.collection_name}"
                    ) from e
                raise error_cls(f"Failed to {action}") from e

        return wrapper

    return decorator


def to_object_id(entity_id: str) -> Optional[ObjectId]:
    """Parse a document id; ids that are not ObjectIds cannot exist."""
    if isinstance(entity_id, str) and ObjectId.is_valid(entity_id):
        return ObjectId(entity_id)
    return None


class DocumentRepository:
    """Shared CRUD plumbing over one collection.

    Subclasses set ``model`` (the entity read back) and ``update_model`` (the
    partial-update shape).
    """

    model: type[BaseModel]
    update_model: type[BaseModel]

    def __init__(self, collection: Collection[Dict[str, Any]]) -> None:
        self._collection = collection
        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        pass

    @property
    def collection_name(self) -> str:
        return self._collection.name

    def _to_entity(self, doc: Dict[str, Any]):
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return self.model.model_validate(data)

    @store_operation(FetchError, "fetch document")
    def get_by_id(self, entity_id: str):
        """Return the entity, or ``None`` when no such document exists."""
        oid = to_object_id(entity_id)
        if oid is None:
            return None
        doc = self._collection.find_one({"_id": oid})
        if doc is None:
            return None
        return self._to_entity(doc)

    def _insert(self, doc: Dict[str, Any]):
        result = self._collection.insert_one(doc)
        doc = dict(doc)
        doc["_id"] = result.inserted_id
        return self._to_entity(doc)

    @store_operation(UpdateError, "update document")
    def update(self, entity_id: str, changes: Union[BaseModel, Dict[str, Any]]) -> None:
        """Write only the fields set on ``changes``.

        Raises ``UpdateError`` when the document does not exist.
        """
        if not isinstance(changes, self.update_model):
            changes = self.update_model.model_validate(changes)
        fields = changes.model_dump(mode="json", by_alias=True, exclude_unset=True)
        oid = to_object_id(entity_id)
        if oid is None:
            raise UpdateError(f"No document {entity_id!r} in {self.collection_name}")
        if not fields:
            return
        result = self._collection.update_one({"_id": oid}, {"$set": fields})
        if result.matched_count == 0:
            raise UpdateError(f"No document {entity_id!r} in {self.collection_name}")

    @store_operation(DeleteError, "delete document")
    def delete(self, entity_id: str) -> None:
        """Delete a document; deleting a missing document succeeds."""
        oid = to_object_id(entity_id)
        if oid is None:
            return
        self._collection.delete_one({"_id": oid})


class TeamMemberRepository(DocumentRepository):
    model = TeamMember
    update_model = TeamMemberUpdate

    def _ensure_indexes(self) -> None:
        self._collection.create_index([("name", ASCENDING)])

    @store_operation(FetchError, "fetch team members")
    def list_all(self) -> List[TeamMember]:
        """All team members, ordered by name."""
        cursor = self._collection.find({}).sort("name", ASCENDING)
        return [self._to_entity(doc) for doc in cursor]

    @store_operation(CreateError, "create team member")
    def create(self, data: TeamMemberCreate) -> TeamMember:
        return self._insert(data.model_dump(mode="json", by_alias=True))


class NoteRepository(DocumentRepository):
    model = OneOnOneNote
    update_model = OneOnOneNoteUpdate

    def _ensure_indexes(self) -> None:
        self._collection.create_index([("userId", ASCENDING), ("date", DESCENDING)])

    def _to_entity(self, doc: Dict[str, Any]) -> OneOnOneNote:
        # Older documents may predate the createdAt stamp
        if "createdAt" not in doc and isinstance(doc.get("_id"), ObjectId):
            doc = dict(doc, createdAt=doc["_id"].generation_time)
        return super()._to_entity(doc)

    @store_operation(FetchError, "fetch notes")
    def list_by_user(self, user_id: str) -> List[OneOnOneNote]:
        """Notes for one team member, most recent date first."""
        cursor = self._collection.find({"userId": user_id}).sort("date", DESCENDING)
        return [self._to_entity(doc) for doc in cursor]

    @store_operation(FetchError, "fetch notes")
    def list_by_users(self, user_ids: Iterable[str]) -> List[OneOnOneNote]:
        """Notes for any of ``user_ids`` in a single query, unordered."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return []
        cursor = self._collection.find({"userId": {"$in": ids}})
        return [self._to_entity(doc) for doc in cursor]

    @store_operation(CreateError, "create note")
    def create(self, data: OneOnOneNoteCreate) -> OneOnOneNote:
        doc = data.model_dump(mode="json", by_alias=True)
        doc["createdAt"] = datetime.now(timezone.utc).isoformat()
        return self._insert(doc)
