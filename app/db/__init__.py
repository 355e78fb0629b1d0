"""
Database module - document store port and its MongoDB / in-memory backends.
"""
from app.db.store import DocumentStore, get_store
from app.db.mongodb import COLLECTIONS, get_mongo_db, test_mongo_connection

__all__ = [
    "DocumentStore",
    "get_store",
    "COLLECTIONS",
    "get_mongo_db",
    "test_mongo_connection"
]
