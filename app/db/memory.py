"""
In-memory DocumentStore.

Used by the test-suite and for running the API without MongoDB
(STORAGE_BACKEND=memory). A single lock makes every operation atomic,
which gives create/update_if the same guarantees as the Mongo store.
"""
import copy
import threading
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from bson import ObjectId

from app.db.store import DocumentStore
from app.utils.helpers import normalize_timestamps


class InMemoryDocumentStore(DocumentStore):

    def __init__(self):
        self._collections: Dict[str, "OrderedDict[str, dict]"] = {}
        self._lock = threading.RLock()

    def _col(self, collection: str) -> "OrderedDict[str, dict]":
        return self._collections.setdefault(collection, OrderedDict())

    @staticmethod
    def _out(doc_id: str, doc: dict) -> dict:
        record = copy.deepcopy(doc)
        record["id"] = doc_id
        return normalize_timestamps(record)

    @staticmethod
    def _in(record: dict) -> dict:
        return copy.deepcopy({k: v for k, v in record.items() if k != "id"})

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            doc = self._col(collection).get(doc_id)
            return self._out(doc_id, doc) if doc is not None else None

    def query(self, collection: str, **filters: Any) -> List[dict]:
        with self._lock:
            return [
                self._out(doc_id, doc)
                for doc_id, doc in self._col(collection).items()
                if all(doc.get(field) == value for field, value in filters.items())
            ]

    def set(self, collection: str, doc_id: str, record: dict, merge: bool = False) -> None:
        with self._lock:
            col = self._col(collection)
            if merge and doc_id in col:
                col[doc_id].update(self._in(record))
            else:
                col[doc_id] = self._in(record)

    def add(self, collection: str, record: dict) -> str:
        doc_id = str(ObjectId())
        with self._lock:
            self._col(collection)[doc_id] = self._in(record)
        return doc_id

    def update(self, collection: str, doc_id: str, changes: dict) -> bool:
        with self._lock:
            col = self._col(collection)
            if doc_id not in col:
                return False
            col[doc_id].update(self._in(changes))
            return True

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._col(collection).pop(doc_id, None) is not None

    def create(self, collection: str, doc_id: str, record: dict) -> bool:
        with self._lock:
            col = self._col(collection)
            if doc_id in col:
                return False
            col[doc_id] = self._in(record)
            return True

    def update_if(
        self,
        collection: str,
        doc_id: str,
        expected: Dict[str, Any],
        changes: Dict[str, Any],
        upsert: bool = False
    ) -> bool:
        with self._lock:
            col = self._col(collection)
            doc = col.get(doc_id)
            if doc is None:
                if not upsert:
                    return False
                col[doc_id] = self._in({**expected, **changes})
                return True
            if any(doc.get(field) != value for field, value in expected.items()):
                return False
            doc.update(self._in(changes))
            return True

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._col(collection))

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()
