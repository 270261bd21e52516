from em_diary.store.client import MongoStore
from em_diary.store.errors import (
    CreateError,
    DeleteError,
    FetchError,
    StoreError,
    StorePermissionError,
    UpdateError,
)
from em_diary.store.repositories import (
    DocumentRepository,
    NoteRepository,
    TeamMemberRepository,
)

__all__ = [
    "MongoStore",
    "StoreError",
    "FetchError",
    "CreateError",
    "UpdateError",
    "DeleteError",
    "StorePermissionError",
    "DocumentRepository",
    "NoteRepository",
    "TeamMemberRepository",
]
