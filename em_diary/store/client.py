"""MongoDB connection management.

``MongoStore`` owns the client connection and hands out the collection
repositories.
"""

import logging
from typing import Any, Dict, Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from em_diary import config
from em_diary.store.repositories import NoteRepository, TeamMemberRepository

logger = logging.getLogger(__name__)


class MongoStore:
    """High-level document store client."""

    def __init__(
        self,
        uri: str = config.MONGODB_URI,
        database_name: str = config.MONGODB_DATABASE,
        users_collection: str = config.MONGODB_USERS_COLLECTION,
        notes_collection: str = config.MONGODB_NOTES_COLLECTION,
        timeout_ms: int = config.MONGODB_TIMEOUT_MS,
    ) -> None:
        self._uri = uri
        self._database_name = database_name
        self._users_collection = users_collection
        self._notes_collection = notes_collection
        self._timeout_ms = timeout_ms

        self._client: Optional[MongoClient[Dict[str, Any]]] = None
        self._db: Optional[Database[Dict[str, Any]]] = None
        self._members: Optional[TeamMemberRepository] = None
        self._notes: Optional[NoteRepository] = None

    @classmethod
    def from_database(
        cls,
        database: Database[Dict[str, Any]],
        users_collection: str = config.MONGODB_USERS_COLLECTION,
        notes_collection: str = config.MONGODB_NOTES_COLLECTION,
    ) -> "MongoStore":
        """Wrap an already-open database (e.g. a mongomock one in tests)."""
        store = cls(users_collection=users_collection, notes_collection=notes_collection)
        store._attach(database)
        return store

    def _attach(self, database: Database[Dict[str, Any]]) -> None:
        self._db = database
        self._members = TeamMemberRepository(database[self._users_collection])
        self._notes = NoteRepository(database[self._notes_collection])

    def connect(self) -> None:
        """Connect and verify the server answers a ping.

        Raises:
            ConnectionFailure: If the server cannot be reached.
        """
        if self._db is not None:
            return

        try:
            self._client = MongoClient(
                self._uri,
                connectTimeoutMS=self._timeout_ms,
                serverSelectionTimeoutMS=self._timeout_ms,
            )
            self._client.admin.command("ping")
            self._attach(self._client[self._database_name])
            logger.info("Connected to MongoDB database %s", self._database_name)
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error("Failed to connect to MongoDB: %s", str(e))
            self.disconnect()
            raise

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("Disconnected from MongoDB")
        self._client = None
        self._db = None
        self._members = None
        self._notes = None

    def health_check(self) -> bool:
        """True when the database answers a ping."""
        if self._db is None:
            return False
        try:
            self._db.command("ping")
            return True
        except Exception:
            return False

    @property
    def members(self) -> TeamMemberRepository:
        if self._members is None:
            raise RuntimeError("Not connected to MongoDB. Call connect() first.")
        return self._members

    @property
    def notes(self) -> NoteRepository:
        if self._notes is None:
            raise RuntimeError("Not connected to MongoDB. Call connect() first.")
        return self._notes
