"""Applicant ranking for a company's job posting."""

import pytest

from app.db.mongodb import COLLECTIONS
from app.services.ranking_service import RankingService, compute_score

from tests.conftest import add_certificate, add_grades


def apply(store, student_id, job_id="j1"):
    store.create(COLLECTIONS["job_applications"], f"{student_id}_{job_id}", {
        "studentId": student_id,
        "jobId": job_id,
        "status": "applied",
    })


@pytest.fixture
def posting(store):
    job = {"companyId": "c1", "title": "Engineer", "minGPA": 3.0, "minExperienceYears": 0, "requirements": {}}
    store.set(COLLECTIONS["jobs"], "j1", job)
    return store.get(COLLECTIONS["jobs"], "j1")


def test_compute_score():
    details = {"meetsGPA": True, "meetsExperience": True, "meetsCertificates": True, "matchesKeywords": True}
    assert compute_score(details, 3.5, 3.0, 2) == pytest.approx(4 + 0.125 + 0.2)
    # Below the minimum never subtracts
    assert compute_score(details, 2.0, 3.0, 0) == pytest.approx(4)


def test_higher_gpa_ranks_first(store, posting):
    store.set(COLLECTIONS["students"], "low", {"name": "Low"})
    store.set(COLLECTIONS["students"], "high", {"name": "High"})
    add_grades(store, "low", ("Math", 80))
    add_grades(store, "high", ("Math", 95))
    apply(store, "low")
    apply(store, "high")

    ranked = RankingService(store).rank_applicants(posting)

    assert [entry["studentId"] for entry in ranked] == ["high", "low"]
    assert ranked[0]["evaluation"]["score"] == pytest.approx(4.20)
    assert ranked[1]["evaluation"]["score"] == pytest.approx(4.05)
    assert ranked[0]["student"]["gpa"] == "3.80"
    assert ranked[0]["readyForInterview"] is True


def test_non_qualifying_and_orphaned_applicants_are_dropped(store, posting):
    store.set(COLLECTIONS["students"], "weak", {"gpa": 3.9})
    add_grades(store, "weak", ("Math", 50))
    store.set(COLLECTIONS["students"], "ok", {})
    add_grades(store, "ok", ("Math", 90))
    apply(store, "weak")
    apply(store, "ghost")
    apply(store, "ok")

    ranked = RankingService(store).rank_applicants(posting)

    assert [entry["studentId"] for entry in ranked] == ["ok"]


def test_equal_scores_keep_application_order(store, posting):
    for student_id in ("first", "second", "third"):
        store.set(COLLECTIONS["students"], student_id, {})
        add_grades(store, student_id, ("Math", 85))
        apply(store, student_id)

    ranked = RankingService(store).rank_applicants(posting)

    assert [entry["studentId"] for entry in ranked] == ["first", "second", "third"]


def test_experience_breaks_gpa_tie(store, posting):
    store.set(COLLECTIONS["students"], "junior", {})
    store.set(COLLECTIONS["students"], "senior", {"experience": [{"role": "Dev", "years": 3}]})
    add_grades(store, "junior", ("Math", 85))
    add_grades(store, "senior", ("Math", 85))
    apply(store, "junior")
    apply(store, "senior")

    ranked = RankingService(store).rank_applicants(posting)

    assert [entry["studentId"] for entry in ranked] == ["senior", "junior"]
    assert ranked[0]["evaluation"]["totalExperienceYears"] == 3


def test_evaluation_lists_matched_certificates(store):
    store.set(COLLECTIONS["jobs"], "j2", {
        "title": "Cloud",
        "requirements": {"requiredCertificates": ["AWS"], "keywords": []},
    })
    store.set(COLLECTIONS["students"], "s1", {})
    add_certificate(store, "s1", "AWS_Cert_2023.pdf")
    apply(store, "s1", job_id="j2")

    ranked = RankingService(store).rank_applicants(store.get(COLLECTIONS["jobs"], "j2"))

    evaluation = ranked[0]["evaluation"]
    assert evaluation["requiredCertificates"] == ["AWS"]
    assert evaluation["matchedCertificates"] == ["AWS_Cert_2023.pdf"]
    assert evaluation["score"] == pytest.approx(4)
