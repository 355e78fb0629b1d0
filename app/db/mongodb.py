"""
MongoDB Connection Utility + DocumentStore implementation

MongoDB holds every collection of the platform:
- users, students, institutions, companies
- grades, studentDocuments, notifications
- courses, faculties, applications (course), admissionOffers
- jobs, jobApplications, savedJobs

Document ids are stored as strings in `_id` so that deterministic ids
("<studentId>_<jobId>") and generated ObjectIds live side by side.
"""
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from app.core.config import get_settings
from app.db.store import DocumentStore
from app.utils.helpers import normalize_timestamps

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        # tz_aware so stored datetimes come back as aware UTC values
        _client = MongoClient(get_settings().mongodb_uri, tz_aware=True)
    return _client


def get_mongo_db() -> Database:
    """Get the platform database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "students": "students",
    "institutions": "institutions",
    "companies": "companies",
    "faculties": "faculties",
    "courses": "courses",
    "applications": "applications",
    "admission_offers": "admissionOffers",
    "grades": "grades",
    "documents": "studentDocuments",
    "jobs": "jobs",
    "job_applications": "jobApplications",
    "saved_jobs": "savedJobs",
    "notifications": "notifications",
}


def init_mongo_indexes():
    """
    Create indexes for the equality filters the services run.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["users"]].create_index("email", unique=True)

    # Per-student lookups
    for name in ("grades", "documents", "notifications", "job_applications", "saved_jobs"):
        db[COLLECTIONS[name]].create_index("studentId")

    # Exclusivity guard queries admitted offers per student
    db[COLLECTIONS["applications"]].create_index([("studentId", 1), ("status", 1)])
    db[COLLECTIONS["applications"]].create_index("institutionId")

    db[COLLECTIONS["job_applications"]].create_index("jobId")
    db[COLLECTIONS["jobs"]].create_index([("companyId", 1), ("status", 1)])
    db[COLLECTIONS["courses"]].create_index("institutionId")
    db[COLLECTIONS["faculties"]].create_index("institutionId")

    logger.info("MongoDB indexes created successfully")


# ============================================================
# HELPERS: move between Mongo documents and port records
# ============================================================

def to_record(doc: Optional[dict]) -> Optional[dict]:
    """Mongo document -> record with "id" and normalized timestamps."""
    if doc is None:
        return None
    doc["id"] = str(doc.pop("_id"))
    return normalize_timestamps(doc)


def to_document(record: dict) -> dict:
    """Drop the "id" key; the id lives in `_id`."""
    return {k: v for k, v in record.items() if k != "id"}


class MongoDocumentStore(DocumentStore):
    """DocumentStore backed by pymongo."""

    def __init__(self, db: Database = None):
        self.db: Database = db if db is not None else get_mongo_db()

    def _col(self, collection: str) -> Collection:
        return self.db[collection]

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        return to_record(self._col(collection).find_one({"_id": doc_id}))

    def query(self, collection: str, **filters: Any) -> List[dict]:
        return [to_record(doc) for doc in self._col(collection).find(filters)]

    def set(self, collection: str, doc_id: str, record: dict, merge: bool = False) -> None:
        document = to_document(record)
        if merge:
            self._col(collection).update_one({"_id": doc_id}, {"$set": document}, upsert=True)
        else:
            self._col(collection).replace_one({"_id": doc_id}, document, upsert=True)

    def add(self, collection: str, record: dict) -> str:
        doc_id = str(ObjectId())
        self._col(collection).insert_one({"_id": doc_id, **to_document(record)})
        return doc_id

    def update(self, collection: str, doc_id: str, changes: dict) -> bool:
        result = self._col(collection).update_one({"_id": doc_id}, {"$set": to_document(changes)})
        return result.matched_count > 0

    def delete(self, collection: str, doc_id: str) -> bool:
        result = self._col(collection).delete_one({"_id": doc_id})
        return result.deleted_count > 0

    def create(self, collection: str, doc_id: str, record: dict) -> bool:
        try:
            self._col(collection).insert_one({"_id": doc_id, **to_document(record)})
        except DuplicateKeyError:
            return False
        return True

    def update_if(
        self,
        collection: str,
        doc_id: str,
        expected: Dict[str, Any],
        changes: Dict[str, Any],
        upsert: bool = False
    ) -> bool:
        # {"field": None} matches both null and missing fields in MongoDB
        condition = {"_id": doc_id, **expected}
        try:
            result = self._col(collection).update_one(
                condition,
                {"$set": to_document(changes)},
                upsert=upsert
            )
        except DuplicateKeyError:
            # Upsert raced with (or collided with) a record that failed the condition
            return False
        return result.matched_count > 0 or result.upserted_id is not None
