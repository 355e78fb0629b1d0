"""
Shared fixtures.

The suite runs against the in-memory document store; the environment is set
before any app module is imported so the cached settings pick it up.
"""

import os

os.environ["STORAGE_BACKEND"] = "memory"
os.environ["DEBUG"] = "true"
os.environ["SMTP_HOST"] = ""
os.environ["REQUIRE_EMAIL_VERIFICATION"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.core.auth import token_for_user
from app.db.memory import InMemoryDocumentStore
from app.db.mongodb import COLLECTIONS
from app.db.store import get_store
from app.main import app
from app.utils.helpers import utcnow


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(store, user_id, role, email=None, name=None, **profile):
    """Create a users record plus the role record under the same id."""
    email = email or f"{user_id}@example.com"
    name = name or user_id.title()
    now = utcnow()
    store.set(COLLECTIONS["users"], user_id, {
        "email": email,
        "name": name,
        "role": role,
        "status": profile.pop("user_status", "active"),
        "isVerified": True,
        "createdAt": now,
    })
    role_collection = {
        "student": COLLECTIONS["students"],
        "institution": COLLECTIONS["institutions"],
        "company": COLLECTIONS["companies"],
    }.get(role)
    if role_collection:
        store.set(role_collection, user_id, {
            "uid": user_id,
            "email": email,
            "name": name,
            "status": "approved",
            "createdAt": now,
            **profile,
        })
    return user_id


def auth_headers(user_id, role, email=None):
    token = token_for_user(user_id, role, email or f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


def add_grades(store, student_id, *grades):
    """add_grades(store, "s1", ("Math", 80), ("English", 60))"""
    for subject, grade in grades:
        store.add(COLLECTIONS["grades"], {"studentId": student_id, "subject": subject, "grade": grade})


def add_certificate(store, student_id, file_name, document_type="certificate"):
    return store.add(COLLECTIONS["documents"], {
        "studentId": student_id,
        "fileName": file_name,
        "documentType": document_type,
        "uploadedAt": utcnow(),
    })
