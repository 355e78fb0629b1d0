"""
Document Store - the persistence port used by every service.

Services never talk to pymongo directly; they receive a DocumentStore and
use only the capabilities below (equality filtering and full scans).

Records come back as plain dicts with their document id under "id" and
every `*At` field normalized to an aware datetime.

Two implementations:
- MongoDocumentStore (app.db.mongodb)  - production
- InMemoryDocumentStore (app.db.memory) - tests and local runs
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.core.config import get_settings


class DocumentStore(ABC):

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        """Fetch one record, or None when absent."""

    @abstractmethod
    def query(self, collection: str, **filters: Any) -> List[dict]:
        """All records whose fields equal every filter value (no filters = full scan)."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, record: dict, merge: bool = False) -> None:
        """Write a record under a known id. merge=True keeps fields not in `record`."""

    @abstractmethod
    def add(self, collection: str, record: dict) -> str:
        """Insert a record under a generated id and return the id."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, changes: dict) -> bool:
        """Apply a partial update. Returns False when the record does not exist."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a record. Returns False when it did not exist."""

    @abstractmethod
    def create(self, collection: str, doc_id: str, record: dict) -> bool:
        """
        Insert only if no record exists under doc_id (atomic).
        Returns False when the id is already taken.
        """

    @abstractmethod
    def update_if(
        self,
        collection: str,
        doc_id: str,
        expected: Dict[str, Any],
        changes: Dict[str, Any],
        upsert: bool = False
    ) -> bool:
        """
        Atomically apply `changes` only if every field in `expected` currently
        has that value (a missing field counts as None).

        With upsert=True a missing record is created from `expected` + `changes`.
        Returns True when the write happened.
        """


_store: Optional[DocumentStore] = None


def get_store() -> DocumentStore:
    """
    Get or create the configured store (singleton pattern).

    FastAPI routes depend on this function, so tests swap the store with
    app.dependency_overrides[get_store].
    """
    global _store
    if _store is None:
        backend = get_settings().storage_backend.lower()
        if backend == "memory":
            from app.db.memory import InMemoryDocumentStore
            _store = InMemoryDocumentStore()
        elif backend == "mongo":
            from app.db.mongodb import MongoDocumentStore
            _store = MongoDocumentStore()
        else:
            raise ValueError(f"Unknown storage backend: {backend}")
    return _store
