"""
Applicant Ranking Engine

For a company's job posting:
1. Walk the job's applications in store order
2. Build each applicant's MatchProfile (grade-derived GPA when grades exist)
3. Drop applicants that fail any criterion
4. Score the rest and sort best-first

SCORE:
    criteria_score + max(0, gpa - minGPA) * 0.25 + total_experience_years * 0.1

criteria_score counts the passed criteria, so it is always 4 once
non-qualifiers are filtered out. Sorting uses the unrounded score and is
stable, so equal scores keep application order.
"""

import logging
from typing import Iterator, List, Tuple

from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.services.profile_service import MatchProfile, ProfileService, display_gpa
from app.services.qualification_service import evaluate_job, job_requirements

logger = logging.getLogger(__name__)

GPA_WEIGHT = 0.25
EXPERIENCE_WEIGHT = 0.1


def compute_score(details: dict, gpa: float, min_gpa: float, experience_years: float) -> float:
    criteria_score = sum(1 for passed in details.values() if passed)
    return (
        criteria_score
        + max(0.0, gpa - min_gpa) * GPA_WEIGHT
        + experience_years * EXPERIENCE_WEIGHT
    )


def build_applicant_entry(
    application: dict,
    student: dict,
    job: dict,
    profile: MatchProfile,
    details: dict,
    score: float
) -> dict:
    """Shape one ranked applicant for the response."""
    requirements = job.get("requirements") or {}
    reqs = job_requirements(job)

    entry = dict(application)
    entry["student"] = {
        **student,
        "skills": student.get("skills") or "",
        "gpa": f"{profile.gpa:.2f}",
        "experience": profile.experience,
        "certificates": profile.certificates,
    }
    entry["evaluation"] = {
        **details,
        "score": round(score, 2),
        "gpa": display_gpa(profile.gpa),
        "minGPA": reqs["minGPA"],
        "totalExperienceYears": profile.total_experience_years,
        "minExperienceYears": reqs["minExperienceYears"],
        "requiredCertificates": requirements.get("requiredCertificates") or [],
        "matchedCertificates": [cert["fileName"] for cert in profile.certificates],
        "keywords": requirements.get("keywords") or [],
    }
    entry["readyForInterview"] = True
    return entry


class RankingService:
    """Ranks the qualifying applicants of one job."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.profiles = ProfileService(store)

    def iter_evaluations(self, job: dict) -> Iterator[Tuple[float, dict]]:
        """
        Lazily evaluate each application of `job`.

        Yields (raw_score, applicant_entry) for qualifying applicants only.
        Applications whose student record is gone are skipped.
        """
        min_gpa = job_requirements(job)["minGPA"]
        applications = self.store.query(COLLECTIONS["job_applications"], jobId=job["id"])

        for application in applications:
            student_id = application.get("studentId")
            student = self.store.get(COLLECTIONS["students"], student_id) if student_id else None
            if student is None:
                logger.debug("Skipping application %s: student %s missing", application.get("id"), student_id)
                continue

            profile = self.profiles.build(student_id, student=student, use_grades=True)
            result = evaluate_job(job, profile)
            if not result["qualifies"]:
                continue

            score = compute_score(result["details"], profile.gpa, min_gpa, profile.total_experience_years)
            yield score, build_applicant_entry(application, student, job, profile, result["details"], score)

    def rank_applicants(self, job: dict) -> List[dict]:
        """Qualifying applicants sorted by score, best first."""
        ranked = sorted(self.iter_evaluations(job), key=lambda pair: pair[0], reverse=True)
        return [entry for _, entry in ranked]


def get_ranking_service(store: DocumentStore) -> RankingService:
    return RankingService(store)
