"""
Institution Service - profile, faculties, courses and admissions settings.

Course requirements are normalized on every write:
    {"minGPA": float, "requiredSubjects": [str], "minSubjectGrade": float}
"""

import logging
from typing import List

from app.core.errors import NotFoundError, ValidationError
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.utils.helpers import utcnow
from app.utils.normalize import to_list, to_number

logger = logging.getLogger(__name__)

PROTECTED_PROFILE_FIELDS = ("id", "uid", "email", "role", "status", "createdAt")
FACULTY_FIELDS = ("code", "description", "contactEmail", "contactPhone", "headOfDepartment")
COURSE_FIELDS = ("name", "faculty", "description", "duration", "requirements", "capacity", "status")


def normalize_course_requirements(requirements: dict) -> dict:
    requirements = requirements or {}
    return {
        "minGPA": to_number(requirements.get("minGPA")),
        "requiredSubjects": to_list(requirements.get("requiredSubjects")),
        "minSubjectGrade": to_number(requirements.get("minSubjectGrade")),
    }


def build_course(institution_id: str, data: dict) -> dict:
    if not data.get("name") or not data.get("faculty"):
        raise ValidationError("Course name and faculty are required")
    now = utcnow()
    return {
        "institutionId": institution_id,
        "name": data["name"],
        "faculty": data["faculty"],
        "description": data.get("description") or "",
        "duration": data.get("duration") or "",
        "requirements": normalize_course_requirements(data.get("requirements")),
        "capacity": int(to_number(data.get("capacity"))),
        "status": data.get("status") or "active",
        "createdAt": now,
        "updatedAt": now
    }


def course_changes(data: dict) -> dict:
    """Whitelisted, normalized course update."""
    changes = {field: data[field] for field in COURSE_FIELDS if field in data}
    if "requirements" in changes:
        changes["requirements"] = normalize_course_requirements(changes["requirements"])
    if "capacity" in changes:
        changes["capacity"] = int(to_number(changes["capacity"]))
    changes["updatedAt"] = utcnow()
    return changes


class InstitutionService:

    def __init__(self, store: DocumentStore):
        self.store = store

    # ============================================================
    # PROFILE
    # ============================================================

    def get_profile(self, institution_id: str) -> dict:
        institution = self.store.get(COLLECTIONS["institutions"], institution_id)
        if not institution:
            raise NotFoundError("Institution profile not found")

        courses = self.store.query(COLLECTIONS["courses"], institutionId=institution_id)
        applications = self.store.query(COLLECTIONS["applications"], institutionId=institution_id)
        return {
            **institution,
            "coursesCount": len(courses),
            "applicationsCount": len(applications)
        }

    def update_profile(self, institution_id: str, data: dict) -> None:
        if not self.store.get(COLLECTIONS["institutions"], institution_id):
            raise NotFoundError("Institution profile not found")

        changes = {k: v for k, v in data.items() if k not in PROTECTED_PROFILE_FIELDS}
        now = utcnow()
        changes["updatedAt"] = now
        self.store.update(COLLECTIONS["institutions"], institution_id, changes)
        self.store.update(COLLECTIONS["users"], institution_id, {"updatedAt": now})
        logger.info("Institution profile updated: %s", institution_id)

    def update_admissions_settings(self, institution_id: str, data: dict) -> None:
        if not self.store.get(COLLECTIONS["institutions"], institution_id):
            raise NotFoundError("Institution profile not found")

        updates = {"updatedAt": utcnow()}
        if isinstance(data.get("admissionsOpen"), bool):
            updates["admissionsOpen"] = data["admissionsOpen"]
        if "admissionsMessage" in data:
            updates["admissionsMessage"] = data["admissionsMessage"]
        if "nextIntakeDate" in data:
            updates["nextIntakeDate"] = data["nextIntakeDate"]
        if "contactEmail" in data:
            updates["admissionsContactEmail"] = data["contactEmail"]

        self.store.update(COLLECTIONS["institutions"], institution_id, updates)
        logger.info("Admissions settings updated for institution %s", institution_id)

    # ============================================================
    # FACULTIES
    # ============================================================

    def list_faculties(self, institution_id: str) -> List[dict]:
        return self.store.query(COLLECTIONS["faculties"], institutionId=institution_id)

    def _owned_faculty(self, institution_id: str, faculty_id: str) -> dict:
        faculty = self.store.get(COLLECTIONS["faculties"], faculty_id)
        if not faculty or faculty.get("institutionId") != institution_id:
            raise NotFoundError("Faculty not found")
        return faculty

    def add_faculty(self, institution_id: str, data: dict) -> str:
        if not data.get("name"):
            raise ValidationError("Faculty name is required")

        now = utcnow()
        faculty = {"institutionId": institution_id, "name": data["name"]}
        faculty.update({field: data.get(field) or "" for field in FACULTY_FIELDS})
        faculty.update({"createdAt": now, "updatedAt": now})

        faculty_id = self.store.add(COLLECTIONS["faculties"], faculty)
        logger.info("Faculty added: %s", faculty["name"])
        return faculty_id

    def update_faculty(self, institution_id: str, faculty_id: str, data: dict) -> None:
        self._owned_faculty(institution_id, faculty_id)
        changes = {k: v for k, v in data.items() if k in FACULTY_FIELDS or k == "name"}
        changes["updatedAt"] = utcnow()
        self.store.update(COLLECTIONS["faculties"], faculty_id, changes)

    def delete_faculty(self, institution_id: str, faculty_id: str) -> None:
        self._owned_faculty(institution_id, faculty_id)
        self.store.delete(COLLECTIONS["faculties"], faculty_id)
        logger.info("Faculty deleted: %s", faculty_id)

    # ============================================================
    # COURSES
    # ============================================================

    def list_courses(self, institution_id: str) -> List[dict]:
        return self.store.query(COLLECTIONS["courses"], institutionId=institution_id)

    def _owned_course(self, institution_id: str, course_id: str) -> dict:
        course = self.store.get(COLLECTIONS["courses"], course_id)
        if not course or course.get("institutionId") != institution_id:
            raise NotFoundError("Course not found")
        return course

    def add_course(self, institution_id: str, data: dict) -> str:
        course = build_course(institution_id, data)
        course_id = self.store.add(COLLECTIONS["courses"], course)
        logger.info("Course added: %s", course["name"])
        return course_id

    def update_course(self, institution_id: str, course_id: str, data: dict) -> None:
        self._owned_course(institution_id, course_id)
        self.store.update(COLLECTIONS["courses"], course_id, course_changes(data))
        logger.info("Course updated: %s", course_id)

    def delete_course(self, institution_id: str, course_id: str) -> None:
        self._owned_course(institution_id, course_id)
        self.store.delete(COLLECTIONS["courses"], course_id)
        logger.info("Course deleted: %s", course_id)


def get_institution_service(store: DocumentStore) -> InstitutionService:
    return InstitutionService(store)
