"""
Student Service - profile, grades and documents.

Grades are replaced as a whole: the old records are deleted and the new ones
inserted, then the rounded GPA is written to the student record. Readers may
briefly see no grades while a replacement is in progress.
"""

import logging
from typing import List, Optional

from app.core.errors import NotFoundError, UnauthorizedError, ValidationError
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.services.profile_service import calculate_gpa, display_gpa
from app.utils.helpers import utcnow
from app.utils.normalize import to_number, to_text

logger = logging.getLogger(__name__)

DOCUMENT_TYPES = ("additional", "transcript", "certificate", "diploma", "other")
PROTECTED_PROFILE_FIELDS = ("id", "uid", "email", "role", "gpa", "documentCount", "createdAt")


def normalize_experience(entries: list) -> List[dict]:
    """Experience entries as {company, role, years (number), description}."""
    return [
        {
            "company": to_text(exp.get("company")),
            "role": to_text(exp.get("role")),
            "years": to_number(exp.get("years")),
            "description": to_text(exp.get("description")),
        }
        for exp in entries
        if isinstance(exp, dict)
    ]


class StudentService:

    def __init__(self, store: DocumentStore):
        self.store = store

    # ============================================================
    # PROFILE
    # ============================================================

    def get_profile(self, student_id: str) -> dict:
        """
        Student record with the GPA recomputed from grades, plus the
        student's course applications and grades.
        """
        student = self.store.get(COLLECTIONS["students"], student_id)
        if not student:
            raise NotFoundError("Student profile not found")

        applications = self.store.query(COLLECTIONS["applications"], studentId=student_id)
        grades = self.store.query(COLLECTIONS["grades"], studentId=student_id)

        return {
            "student": {
                **student,
                "gpa": display_gpa(calculate_gpa(grades)) if grades else to_number(student.get("gpa")),
                "applicationCount": len(applications)
            },
            "applications": applications,
            "grades": grades
        }

    def update_profile(self, student_id: str, data: dict) -> None:
        if not self.store.get(COLLECTIONS["students"], student_id):
            raise NotFoundError("Student profile not found")

        changes = {k: v for k, v in data.items() if k not in PROTECTED_PROFILE_FIELDS}
        if isinstance(changes.get("skills"), str):
            changes["skills"] = changes["skills"].strip()
        if "experience" in changes:
            if not isinstance(changes["experience"], list):
                raise ValidationError("Experience must be a list")
            changes["experience"] = normalize_experience(changes["experience"])

        now = utcnow()
        changes["updatedAt"] = now
        self.store.update(COLLECTIONS["students"], student_id, changes)
        self.store.update(COLLECTIONS["users"], student_id, {"updatedAt": now})
        logger.info("Student profile updated: %s", student_id)

    # ============================================================
    # GRADES
    # ============================================================

    def update_grades(self, student_id: str, grades: list) -> float:
        """
        Replace all of the student's grades and store the new GPA.

        Returns the GPA rounded to 2 places.
        """
        if not isinstance(grades, list):
            raise ValidationError("Grades must be an array")

        for grade in grades:
            value = grade.get("grade") if isinstance(grade, dict) else None
            if (
                not isinstance(grade, dict)
                or not grade.get("subject")
                or isinstance(value, bool)
                or not isinstance(value, (int, float))
                or not 0 <= value <= 100
            ):
                raise ValidationError("Each grade must have subject (string) and grade (number between 0-100)")

        for existing in self.store.query(COLLECTIONS["grades"], studentId=student_id):
            self.store.delete(COLLECTIONS["grades"], existing["id"])

        now = utcnow()
        for grade in grades:
            self.store.add(COLLECTIONS["grades"], {
                "studentId": student_id,
                "subject": grade["subject"],
                "grade": grade["grade"],
                "createdAt": now,
                "updatedAt": now
            })

        gpa = display_gpa(calculate_gpa(grades))
        self.store.set(COLLECTIONS["students"], student_id, {"gpa": gpa, "updatedAt": now}, merge=True)

        logger.info("Grades updated for student %s (gpa %.2f)", student_id, gpa)
        return gpa

    # ============================================================
    # DOCUMENTS
    # ============================================================

    def _bump_document_count(self, student_id: str, delta: int) -> None:
        student = self.store.get(COLLECTIONS["students"], student_id)
        if student:
            count = int(to_number(student.get("documentCount")))
            self.store.update(COLLECTIONS["students"], student_id, {
                "documentCount": max(0, count + delta),
                "updatedAt": utcnow()
            })

    def upload_document(self, student_id: str, data: dict) -> str:
        document_type = data.get("documentType")
        file_name = data.get("fileName")
        if not document_type or not file_name:
            raise ValidationError("Document type and file name are required")
        if document_type not in DOCUMENT_TYPES:
            raise ValidationError(f"Document type must be one of: {', '.join(DOCUMENT_TYPES)}")

        now = utcnow()
        document_id = self.store.add(COLLECTIONS["documents"], {
            "studentId": student_id,
            "documentType": document_type,
            "fileName": file_name,
            "fileUrl": data.get("fileUrl") or "",
            "description": data.get("description") or "",
            "uploadedAt": now,
            "updatedAt": now
        })
        self._bump_document_count(student_id, 1)

        logger.info("Document uploaded by student %s: %s", student_id, file_name)
        return document_id

    def list_documents(self, student_id: str, document_type: Optional[str] = None) -> List[dict]:
        filters = {"studentId": student_id}
        if document_type:
            filters["documentType"] = document_type
        return self.store.query(COLLECTIONS["documents"], **filters)

    def delete_document(self, student_id: str, document_id: str) -> None:
        document = self.store.get(COLLECTIONS["documents"], document_id)
        if not document:
            raise NotFoundError("Document not found")
        if document.get("studentId") != student_id:
            raise UnauthorizedError("Unauthorized to delete this document")

        self.store.delete(COLLECTIONS["documents"], document_id)
        self._bump_document_count(student_id, -1)


def get_student_service(store: DocumentStore) -> StudentService:
    return StudentService(store)
