"""
Job Service

Company side:  post / update / list jobs, ranked applicants
Student side:  available jobs, apply, save, applied / saved job ids

A student may apply to a job only when they meet every requirement
(Qualification Evaluator). The student side evaluates the grade-derived GPA,
the same profile the applicant ranking uses. Applications and saves use deterministic ids
("<studentId>_<jobId>") so duplicates are rejected by the store itself.
"""

import logging
from typing import List

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.services.notification_service import NotificationService
from app.services.profile_service import ProfileService
from app.services.qualification_service import evaluate_job
from app.services.ranking_service import RankingService
from app.utils.helpers import utcnow
from app.utils.normalize import to_list, to_number, to_text

logger = logging.getLogger(__name__)

PROTECTED_JOB_FIELDS = ("id", "companyId", "createdAt")


def pair_id(student_id: str, job_id: str) -> str:
    return f"{student_id}_{job_id}"


def normalize_requirements(requirements: dict) -> dict:
    requirements = requirements or {}
    return {
        "education": to_text(requirements.get("education")),
        "experience": to_text(requirements.get("experience")),
        "skills": to_text(requirements.get("skills")),
        "requiredCertificates": to_list(requirements.get("requiredCertificates")),
        "keywords": to_list(requirements.get("keywords")),
    }


def non_negative(value, field: str) -> float:
    number = to_number(value)
    if number < 0:
        raise ValidationError(f"{field} must be zero or greater")
    return number


class JobService:

    def __init__(self, store: DocumentStore):
        self.store = store
        self.profiles = ProfileService(store)

    # ============================================================
    # COMPANY
    # ============================================================

    def list_company_jobs(self, company_id: str) -> List[dict]:
        return self.store.query(COLLECTIONS["jobs"], companyId=company_id)

    def get_owned_job(self, company_id: str, job_id: str) -> dict:
        job = self.store.get(COLLECTIONS["jobs"], job_id)
        if not job or job.get("companyId") != company_id:
            raise NotFoundError("Job not found")
        return job

    def post_job(self, company_id: str, data: dict) -> str:
        """
        Create an active job posting and notify matching students.

        Notification failures never fail the posting.
        """
        if not data.get("title") or not data.get("description"):
            raise ValidationError("Job title and description are required")

        company = self.store.get(COLLECTIONS["companies"], company_id)
        company_name = (company or {}).get("name") or "A Company"

        now = utcnow()
        job = {
            "companyId": company_id,
            "title": data["title"],
            "description": data["description"],
            "requirements": normalize_requirements(data.get("requirements")),
            "minGPA": non_negative(data.get("minGPA"), "minGPA"),
            "minExperienceYears": non_negative(data.get("minExperienceYears"), "minExperienceYears"),
            "location": data.get("location") or "",
            "type": data.get("type") or "full-time",
            "salary": data.get("salary") or "",
            "applicationDeadline": data.get("applicationDeadline"),
            "status": "active",
            "createdAt": now,
            "updatedAt": now
        }
        job_id = self.store.add(COLLECTIONS["jobs"], job)
        logger.info("Job posted: %s (%s)", job["title"], job_id)

        try:
            NotificationService(self.store).notify_students_of_job(job_id, job, company_name)
        except Exception:
            logger.warning("Job notifications failed for %s", job_id, exc_info=True)

        return job_id

    def update_job(self, company_id: str, job_id: str, data: dict) -> None:
        job = self.get_owned_job(company_id, job_id)

        changes = {k: v for k, v in data.items() if k not in PROTECTED_JOB_FIELDS}
        if "requirements" in changes:
            # Partial requirement updates keep the fields that were not sent
            merged = {**(job.get("requirements") or {}), **(changes["requirements"] or {})}
            changes["requirements"] = normalize_requirements(merged)
        if "minGPA" in changes:
            changes["minGPA"] = non_negative(changes["minGPA"], "minGPA")
        if "minExperienceYears" in changes:
            changes["minExperienceYears"] = non_negative(changes["minExperienceYears"], "minExperienceYears")
        if "status" in changes and changes["status"] not in ("active", "closed"):
            raise ValidationError("Job status must be active or closed")

        changes["updatedAt"] = utcnow()
        self.store.update(COLLECTIONS["jobs"], job_id, changes)
        logger.info("Job updated: %s", job_id)

    def get_applicants(self, company_id: str, job_id: str) -> List[dict]:
        """Qualifying applicants of one of the company's jobs, best first."""
        job = self.get_owned_job(company_id, job_id)
        return RankingService(self.store).rank_applicants(job)

    # ============================================================
    # STUDENT
    # ============================================================

    def available_jobs(self, student_id: str) -> List[dict]:
        """Active jobs the student qualifies for, with the posting company."""
        profile = self.profiles.build(student_id, use_grades=True)

        jobs = []
        for job in self.store.query(COLLECTIONS["jobs"], status="active"):
            if not evaluate_job(job, profile)["qualifies"]:
                continue
            company = self.store.get(COLLECTIONS["companies"], job.get("companyId") or "")
            if company:
                job["company"] = company
            jobs.append(job)
        return jobs

    def apply_for_job(self, student_id: str, job_id: str) -> str:
        job = self.store.get(COLLECTIONS["jobs"], job_id)
        if not job:
            raise NotFoundError("Job not found")

        application_id = pair_id(student_id, job_id)
        if self.store.get(COLLECTIONS["job_applications"], application_id):
            raise ConflictError("Already applied to this job")

        profile = self.profiles.build(student_id, use_grades=True)
        if not evaluate_job(job, profile)["qualifies"]:
            raise ValidationError("You do not meet all of the requirements for this job.")

        now = utcnow()
        created = self.store.create(COLLECTIONS["job_applications"], application_id, {
            "studentId": student_id,
            "jobId": job_id,
            "status": "applied",
            "appliedAt": now,
            "updatedAt": now
        })
        if not created:
            raise ConflictError("Already applied to this job")

        logger.info("Student %s applied to job %s", student_id, job_id)
        return application_id

    def save_job(self, student_id: str, job_id: str) -> str:
        if not self.store.get(COLLECTIONS["jobs"], job_id):
            raise NotFoundError("Job not found")

        saved_id = pair_id(student_id, job_id)
        created = self.store.create(COLLECTIONS["saved_jobs"], saved_id, {
            "studentId": student_id,
            "jobId": job_id,
            "savedAt": utcnow()
        })
        if not created:
            raise ConflictError("Job already saved")
        return saved_id

    def applied_job_ids(self, student_id: str) -> List[str]:
        return [a.get("jobId") for a in self.store.query(COLLECTIONS["job_applications"], studentId=student_id)]

    def saved_job_ids(self, student_id: str) -> List[str]:
        return [s.get("jobId") for s in self.store.query(COLLECTIONS["saved_jobs"], studentId=student_id)]


def get_job_service(store: DocumentStore) -> JobService:
    return JobService(store)
