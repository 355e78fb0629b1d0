"""Profile aggregation and the job / course qualification gates."""

import pytest

from app.services.profile_service import (
    MatchProfile, ProfileService, build_match_profile, calculate_gpa, display_gpa
)
from app.services.qualification_service import evaluate_course, evaluate_job

from tests.conftest import add_certificate, add_grades


def job(**fields):
    base = {"id": "j1", "title": "Cloud Engineer", "minGPA": 0, "minExperienceYears": 0, "requirements": {}}
    base.update(fields)
    return base


# ============================================================
# GPA & PROFILE
# ============================================================

def test_gpa_from_grades():
    gpa = calculate_gpa([{"grade": 80}, {"grade": 60}])
    assert gpa == pytest.approx(2.8)
    assert display_gpa(gpa) == 2.8
    assert f"{gpa:.2f}" == "2.80"


def test_gpa_without_grades_is_zero():
    assert calculate_gpa([]) == 0.0


def test_build_match_profile_aggregates_experience_and_certificates():
    student = {
        "gpa": "3.1",
        "skills": "Python, AWS",
        "experience": [
            {"role": "Developer", "description": "Built APIs", "years": "2"},
            {"role": "Intern", "years": 0.5},
            "not an entry",
        ],
    }
    documents = [
        {"id": "d1", "fileName": "AWS_Cert_2023.pdf", "documentType": "certificate"},
        {"id": "d2", "fileName": "Transcript.pdf", "documentType": "transcript"},
        {"id": "d3", "fileName": "BSc.pdf", "documentType": "Diploma"},
    ]

    profile = build_match_profile(student, documents)

    assert profile.gpa == pytest.approx(3.1)
    assert profile.total_experience_years == pytest.approx(2.5)
    assert "built apis" in profile.skills_text
    assert "python, aws" in profile.skills_text
    assert profile.certificate_names == ["aws_cert_2023.pdf", "bsc.pdf"]


def test_build_match_profile_tolerates_missing_fields():
    profile = build_match_profile({})
    assert profile == MatchProfile()


def test_grade_derived_gpa_overrides_stored(store):
    store.set("students", "s1", {"gpa": 1.0})
    add_grades(store, "s1", ("Math", 80), ("English", 60))
    service = ProfileService(store)

    assert service.build("s1").gpa == pytest.approx(1.0)
    assert service.build("s1", use_grades=True).gpa == pytest.approx(2.8)


def test_grade_derived_gpa_falls_back_to_stored(store):
    store.set("students", "s1", {"gpa": 3.3})
    assert ProfileService(store).build("s1", use_grades=True).gpa == pytest.approx(3.3)


# ============================================================
# JOB GATES
# ============================================================

def test_unset_requirements_are_vacuously_met():
    result = evaluate_job(job(minGPA=None, minExperienceYears="", requirements=None), MatchProfile())
    assert result["qualifies"] is True
    assert all(result["details"].values())


def test_every_criterion_is_a_hard_gate():
    strong = MatchProfile(
        gpa=3.9,
        total_experience_years=5,
        skills_text="python docker",
        certificate_names=["aws_cert.pdf"],
    )
    posting = job(
        minGPA=3.0,
        minExperienceYears=2,
        requirements={"requiredCertificates": ["AWS"], "keywords": "python, docker"},
    )
    assert evaluate_job(posting, strong)["qualifies"] is True

    missing_keyword = MatchProfile(
        gpa=3.9, total_experience_years=5, skills_text="python", certificate_names=["aws_cert.pdf"]
    )
    result = evaluate_job(posting, missing_keyword)
    assert result["qualifies"] is False
    assert result["details"] == {
        "meetsGPA": True,
        "meetsExperience": True,
        "meetsCertificates": True,
        "matchesKeywords": False,
    }


def test_gpa_and_experience_thresholds_are_inclusive():
    profile = MatchProfile(gpa=3.0, total_experience_years=2)
    assert evaluate_job(job(minGPA=3.0, minExperienceYears=2), profile)["qualifies"] is True
    assert evaluate_job(job(minGPA=3.01), profile)["details"]["meetsGPA"] is False
    assert evaluate_job(job(minExperienceYears="2.5"), profile)["details"]["meetsExperience"] is False


def test_certificate_is_a_substring_of_file_name(store):
    store.set("students", "s1", {})
    add_certificate(store, "s1", "AWS_Cert_2023.pdf")
    profile = ProfileService(store).build("s1")

    assert evaluate_job(job(requirements={"requiredCertificates": "aws"}), profile)["qualifies"] is True
    assert evaluate_job(job(requirements={"requiredCertificates": "gcp"}), profile)["qualifies"] is False


def test_certificate_must_come_from_certificate_documents(store):
    store.set("students", "s1", {})
    add_certificate(store, "s1", "Azure_Cert.pdf")
    add_certificate(store, "s1", "AWS_notes.pdf", document_type="other")
    profile = ProfileService(store).build("s1")

    result = evaluate_job(job(requirements={"requiredCertificates": ["AWS"]}), profile)
    assert result["details"]["meetsCertificates"] is False


def test_keywords_match_experience_descriptions():
    profile = build_match_profile({
        "skills": "",
        "experience": [{"role": "Data Engineer", "description": "Kafka pipelines"}],
    })
    assert evaluate_job(job(requirements={"keywords": ["KAFKA", "data engineer"]}), profile)["qualifies"] is True


# ============================================================
# COURSE GATES
# ============================================================

def course(**requirements):
    return {"id": "c1", "name": "Computer Science", "requirements": requirements}


def test_course_without_requirements_qualifies():
    result = evaluate_course({"name": "Open Course"}, [])
    assert result == {
        "qualifies": True,
        "details": {"meetsGPA": True, "meetsSubjects": True},
        "failedRequirements": [],
    }


def test_course_gpa_requirement():
    grades = [{"subject": "Math", "grade": 80}, {"subject": "English", "grade": 60}]
    assert evaluate_course(course(minGPA=2.5), grades)["qualifies"] is True

    result = evaluate_course(course(minGPA=3), grades)
    assert result["qualifies"] is False
    assert result["failedRequirements"] == ["Minimum GPA of 3 required for Computer Science"]


def test_course_subject_requirements_are_case_insensitive():
    grades = [{"subject": "mathematics", "grade": 75}]
    passing = course(requiredSubjects="Mathematics", minSubjectGrade=70)
    assert evaluate_course(passing, grades)["qualifies"] is True

    failing = course(requiredSubjects=["Mathematics", "Physics"], minSubjectGrade=70)
    result = evaluate_course(failing, grades)
    assert result["qualifies"] is False
    assert result["details"]["meetsSubjects"] is False
    assert result["failedRequirements"] == ["Required: Physics >= 70"]
