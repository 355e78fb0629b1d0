"""InMemoryDocumentStore behaviour, including the conditional writes."""

from datetime import datetime


def test_add_get_query(store):
    doc_id = store.add("jobs", {"title": "Engineer", "status": "active"})
    store.add("jobs", {"title": "Analyst", "status": "closed"})

    job = store.get("jobs", doc_id)
    assert job["id"] == doc_id
    assert job["title"] == "Engineer"

    active = store.query("jobs", status="active")
    assert [j["id"] for j in active] == [doc_id]
    assert len(store.query("jobs")) == 2


def test_get_missing_returns_none(store):
    assert store.get("jobs", "missing") is None


def test_records_are_copies(store):
    store.set("students", "s1", {"skills": "python", "experience": []})
    record = store.get("students", "s1")
    record["experience"].append({"role": "dev"})
    assert store.get("students", "s1")["experience"] == []


def test_set_merge(store):
    store.set("students", "s1", {"name": "Ann", "gpa": 3.0})
    store.set("students", "s1", {"gpa": 3.5}, merge=True)
    assert store.get("students", "s1")["name"] == "Ann"
    assert store.get("students", "s1")["gpa"] == 3.5

    store.set("students", "s1", {"gpa": 2.0})
    assert "name" not in store.get("students", "s1")


def test_update_and_delete(store):
    assert store.update("jobs", "missing", {"title": "x"}) is False
    store.set("jobs", "j1", {"title": "Engineer"})
    assert store.update("jobs", "j1", {"title": "Senior Engineer"}) is True
    assert store.get("jobs", "j1")["title"] == "Senior Engineer"
    assert store.delete("jobs", "j1") is True
    assert store.delete("jobs", "j1") is False


def test_create_is_insert_if_absent(store):
    assert store.create("savedJobs", "s1_j1", {"studentId": "s1"}) is True
    assert store.create("savedJobs", "s1_j1", {"studentId": "other"}) is False
    assert store.get("savedJobs", "s1_j1")["studentId"] == "s1"
    assert store.count("savedJobs") == 1


def test_update_if_matches_expected_values(store):
    store.set("admissionOffers", "s1", {"applicationId": None})
    assert store.update_if("admissionOffers", "s1", {"applicationId": None}, {"applicationId": "a1"}) is True
    assert store.update_if("admissionOffers", "s1", {"applicationId": None}, {"applicationId": "a2"}) is False
    assert store.get("admissionOffers", "s1")["applicationId"] == "a1"


def test_update_if_missing_field_counts_as_none(store):
    store.set("admissionOffers", "s1", {})
    assert store.update_if("admissionOffers", "s1", {"applicationId": None}, {"applicationId": "a1"}) is True


def test_update_if_upsert(store):
    assert store.update_if("admissionOffers", "s1", {"applicationId": None}, {"applicationId": "a1"}) is False
    assert store.get("admissionOffers", "s1") is None

    assert store.update_if(
        "admissionOffers", "s1", {"applicationId": None}, {"applicationId": "a1"}, upsert=True
    ) is True
    assert store.get("admissionOffers", "s1")["applicationId"] == "a1"


def test_timestamps_come_back_as_datetimes(store):
    store.set("notifications", "n1", {"createdAt": {"seconds": 1_700_000_000, "nanoseconds": 0}})
    assert isinstance(store.get("notifications", "n1")["createdAt"], datetime)


def test_clear(store):
    store.add("jobs", {"title": "x"})
    store.clear()
    assert store.count("jobs") == 0
