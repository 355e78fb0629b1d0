"""
Admin Service

- system statistics
- institution / company moderation (status changes keep the account's
  user status in sync: suspended -> suspended, anything else -> active)
- course administration for any institution
- user listing
- opening / closing admissions
"""

import logging
from typing import List, Optional

from app.core.auth import hash_password
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.services.institution_service import build_course, course_changes
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

ORGANIZATION_STATUSES = ("pending", "approved", "suspended", "rejected")
INSTITUTION_FIELDS = ("name", "location", "type", "contactEmail", "phone")
USER_FIELDS = ("id", "email", "name", "role", "isVerified", "status", "createdAt")
DEFAULT_INSTITUTION_PASSWORD = "TempPassword123!"


def user_status_for(status: str) -> str:
    return "suspended" if status == "suspended" else "active"


class AdminService:

    def __init__(self, store: DocumentStore):
        self.store = store

    # ============================================================
    # STATISTICS
    # ============================================================

    def system_stats(self) -> dict:
        q = self.store.query
        return {
            "totalStudents": len(q(COLLECTIONS["students"])),
            "totalInstitutions": len(q(COLLECTIONS["institutions"], status="approved")),
            "totalCompanies": len(q(COLLECTIONS["companies"], status="approved")),
            "activeJobs": len(q(COLLECTIONS["jobs"], status="active")),
            "totalApplications": len(q(COLLECTIONS["applications"])),
            "pendingInstitutions": len(q(COLLECTIONS["institutions"], status="pending")),
            "pendingCompanies": len(q(COLLECTIONS["companies"], status="pending")),
        }

    def _set_organization_status(self, collection: str, org_id: str, status: str, label: str) -> None:
        if status not in ORGANIZATION_STATUSES:
            raise ValidationError("Invalid status")

        now = utcnow()
        if not self.store.update(collection, org_id, {"status": status, "updatedAt": now}):
            raise NotFoundError(f"{label} not found")
        self.store.update(COLLECTIONS["users"], org_id, {
            "status": user_status_for(status),
            "updatedAt": now
        })
        logger.info("%s status updated: %s -> %s", label, org_id, status)

    # ============================================================
    # INSTITUTIONS
    # ============================================================

    def list_institutions(self, status: Optional[str] = None) -> List[dict]:
        filters = {"status": status} if status else {}
        return self.store.query(COLLECTIONS["institutions"], **filters)

    def create_institution(self, data: dict) -> str:
        """Create an institution together with its (pre-verified) account."""
        name = data.get("name")
        email = (data.get("email") or "").strip().lower()
        if not name or not email:
            raise ValidationError("Institution name and email are required")
        if self.store.query(COLLECTIONS["users"], email=email):
            raise ConflictError("Institution with this email already exists")

        now = utcnow()
        institution_id = self.store.add(COLLECTIONS["users"], {
            "email": email,
            "name": name,
            "role": "institution",
            "password": hash_password(data.get("password") or DEFAULT_INSTITUTION_PASSWORD),
            "isVerified": True,
            "status": "active",
            "createdAt": now,
            "updatedAt": now
        })
        self.store.set(COLLECTIONS["institutions"], institution_id, {
            "uid": institution_id,
            "name": name,
            "email": email,
            "location": data.get("location") or "",
            "type": data.get("type") or "",
            "contactEmail": data.get("contactEmail") or email,
            "phone": data.get("phone") or "",
            "status": "approved",
            "createdAt": now,
            "updatedAt": now
        })

        logger.info("Institution created: %s", name)
        return institution_id

    def update_institution(self, institution_id: str, data: dict) -> None:
        if not self.store.get(COLLECTIONS["institutions"], institution_id):
            raise NotFoundError("Institution not found")

        now = utcnow()
        changes = {field: data[field] for field in INSTITUTION_FIELDS if data.get(field) is not None}
        changes["updatedAt"] = now
        self.store.update(COLLECTIONS["institutions"], institution_id, changes)

        if data.get("name"):
            self.store.update(COLLECTIONS["users"], institution_id, {"name": data["name"], "updatedAt": now})
        logger.info("Institution updated: %s", institution_id)

    def update_institution_status(self, institution_id: str, status: str) -> None:
        self._set_organization_status(COLLECTIONS["institutions"], institution_id, status, "Institution")

    def delete_institution(self, institution_id: str) -> int:
        """Delete an institution, its account and its courses. Returns the number of courses removed."""
        if not self.store.delete(COLLECTIONS["institutions"], institution_id):
            raise NotFoundError("Institution not found")
        self.store.delete(COLLECTIONS["users"], institution_id)

        courses = self.store.query(COLLECTIONS["courses"], institutionId=institution_id)
        for course in courses:
            self.store.delete(COLLECTIONS["courses"], course["id"])

        logger.info("Institution deleted: %s (%d courses)", institution_id, len(courses))
        return len(courses)

    # ============================================================
    # COURSES
    # ============================================================

    def list_institution_courses(self, institution_id: str) -> List[dict]:
        return self.store.query(COLLECTIONS["courses"], institutionId=institution_id)

    def add_institution_course(self, institution_id: str, data: dict) -> str:
        if not self.store.get(COLLECTIONS["institutions"], institution_id):
            raise NotFoundError("Institution not found")
        course = build_course(institution_id, data)
        course_id = self.store.add(COLLECTIONS["courses"], course)
        logger.info("Course added by admin: %s", course["name"])
        return course_id

    def update_course(self, course_id: str, data: dict) -> None:
        if not self.store.get(COLLECTIONS["courses"], course_id):
            raise NotFoundError("Course not found")
        self.store.update(COLLECTIONS["courses"], course_id, course_changes(data))
        logger.info("Course updated: %s", course_id)

    def delete_course(self, course_id: str) -> None:
        if not self.store.delete(COLLECTIONS["courses"], course_id):
            raise NotFoundError("Course not found")
        logger.info("Course deleted: %s", course_id)

    # ============================================================
    # COMPANIES
    # ============================================================

    def list_companies(self, status: Optional[str] = None) -> List[dict]:
        """
        Company profiles, optionally by status. Without a filter and with no
        profiles on file, company accounts from `users` are listed instead.
        """
        filters = {"status": status} if status else {}
        companies = self.store.query(COLLECTIONS["companies"], **filters)
        if companies or status:
            return companies

        return [
            {
                "id": user["id"],
                "email": user.get("email"),
                "name": user.get("name"),
                "status": "approved" if user.get("status") in (None, "active") else user["status"],
                "createdAt": user.get("createdAt")
            }
            for user in self.store.query(COLLECTIONS["users"], role="company")
        ]

    def update_company_status(self, company_id: str, status: str) -> None:
        self._set_organization_status(COLLECTIONS["companies"], company_id, status, "Company")

    def delete_company(self, company_id: str) -> int:
        """Delete a company, its account and its jobs. Returns the number of jobs removed."""
        if not self.store.delete(COLLECTIONS["companies"], company_id):
            raise NotFoundError("Company not found")
        self.store.delete(COLLECTIONS["users"], company_id)

        jobs = self.store.query(COLLECTIONS["jobs"], companyId=company_id)
        for job in jobs:
            self.store.delete(COLLECTIONS["jobs"], job["id"])

        logger.info("Company deleted: %s (%d jobs)", company_id, len(jobs))
        return len(jobs)

    # ============================================================
    # USERS & ADMISSIONS
    # ============================================================

    def list_users(self, role: Optional[str] = None) -> List[dict]:
        filters = {"role": role} if role else {}
        return [
            {field: user.get(field) for field in USER_FIELDS}
            for user in self.store.query(COLLECTIONS["users"], **filters)
        ]

    def publish_admissions(self, action: str, institution_id: Optional[str] = None) -> int:
        """
        Open or close admissions for one institution, or for all of them.
        Returns the number of institutions updated.
        """
        if action not in ("open", "close"):
            raise ValidationError('Action must be "open" or "close"')

        changes = {"admissionsOpen": action == "open", "updatedAt": utcnow()}
        if institution_id:
            if not self.store.update(COLLECTIONS["institutions"], institution_id, changes):
                raise NotFoundError("Institution not found")
            updated = 1
        else:
            institutions = self.store.query(COLLECTIONS["institutions"])
            for institution in institutions:
                self.store.update(COLLECTIONS["institutions"], institution["id"], changes)
            updated = len(institutions)

        logger.info("Admissions %s for %s", action, institution_id or "all institutions")
        return updated


def get_admin_service(store: DocumentStore) -> AdminService:
    return AdminService(store)
