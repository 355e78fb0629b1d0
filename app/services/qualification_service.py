"""
Qualification Evaluator

Decides whether a MatchProfile meets a job posting or a course's requirements.

Every criterion is a hard gate and is vacuously true when its requirement
is unset, zero or empty. "Does not qualify" is a normal outcome, never an
exception.

Job criteria:
- meetsGPA           profile GPA >= minGPA
- meetsExperience    total experience years >= minExperienceYears
- meetsCertificates  each required certificate is a SUBSTRING of some
                     certificate file name ("aws" matches "AWS_Certificate_2023.pdf")
- matchesKeywords    each keyword is a substring of the skills/experience text

Course criteria:
- meetsGPA           grade-derived GPA >= requirements.minGPA
- meetsSubjects      a grade exists for every required subject (case-insensitive)
                     with grade >= requirements.minSubjectGrade
"""

from typing import Iterable, List

from app.services.profile_service import MatchProfile, calculate_gpa
from app.utils.normalize import to_lower_list, to_list, to_number, to_text


# ============================================================
# JOB REQUIREMENTS
# ============================================================

def job_requirements(job: dict) -> dict:
    """Coerced view of a job's requirement fields."""
    requirements = job.get("requirements") or {}
    return {
        "minGPA": to_number(job.get("minGPA")),
        "minExperienceYears": to_number(job.get("minExperienceYears")),
        "requiredCertificates": to_lower_list(requirements.get("requiredCertificates")),
        "keywords": to_lower_list(requirements.get("keywords")),
    }


def meets_certificates(required: List[str], certificate_names: List[str]) -> bool:
    return all(
        any(req in name for name in certificate_names)
        for req in required
    )


def matches_keywords(keywords: List[str], skills_text: str) -> bool:
    return all(keyword in skills_text for keyword in keywords)


def evaluate_job(job: dict, profile: MatchProfile) -> dict:
    """
    Evaluate a profile against a job posting.

    Returns:
        {
            "qualifies": bool,
            "details": {
                "meetsGPA": bool,
                "meetsExperience": bool,
                "meetsCertificates": bool,
                "matchesKeywords": bool
            }
        }
    """
    reqs = job_requirements(job)

    details = {
        "meetsGPA": not reqs["minGPA"] or profile.gpa >= reqs["minGPA"],
        "meetsExperience": (
            not reqs["minExperienceYears"]
            or profile.total_experience_years >= reqs["minExperienceYears"]
        ),
        "meetsCertificates": meets_certificates(reqs["requiredCertificates"], profile.certificate_names),
        "matchesKeywords": matches_keywords(reqs["keywords"], profile.skills_text),
    }

    return {"qualifies": all(details.values()), "details": details}


# ============================================================
# COURSE REQUIREMENTS
# ============================================================

def course_requirements(course: dict) -> dict:
    requirements = course.get("requirements") or {}
    return {
        "minGPA": to_number(requirements.get("minGPA")),
        "requiredSubjects": to_list(requirements.get("requiredSubjects")),
        "minSubjectGrade": to_number(requirements.get("minSubjectGrade")),
    }


def find_grade(grades: List[dict], subject: str):
    wanted = subject.lower()
    for grade in grades:
        if to_text(grade.get("subject")).lower() == wanted:
            return grade
    return None


def evaluate_course(course: dict, grades: Iterable[dict]) -> dict:
    """
    Evaluate a student's grade records against a course's requirements.

    Returns:
        {
            "qualifies": bool,
            "details": {"meetsGPA": bool, "meetsSubjects": bool},
            "failedRequirements": [str, ...]
        }
    """
    grades = list(grades or [])
    reqs = course_requirements(course)
    name = course.get("name") or "this course"
    failed = []

    gpa = calculate_gpa(grades)
    meets_gpa = not reqs["minGPA"] or gpa >= reqs["minGPA"]
    if not meets_gpa:
        failed.append(f"Minimum GPA of {reqs['minGPA']:g} required for {name}")

    meets_subjects = True
    for subject in reqs["requiredSubjects"]:
        record = find_grade(grades, subject)
        if record is None or to_number(record.get("grade")) < reqs["minSubjectGrade"]:
            meets_subjects = False
            failed.append(f"Required: {subject} >= {reqs['minSubjectGrade']:g}")

    return {
        "qualifies": meets_gpa and meets_subjects,
        "details": {"meetsGPA": meets_gpa, "meetsSubjects": meets_subjects},
        "failedRequirements": failed
    }
