"""
Admissions Service

Course applications from submission to the student's final decision.

    student applies          -> pending
    institution decides      -> pending | admitted | rejected | waiting-list
    student answers an offer -> accepted | declined   (only from admitted)

EXCLUSIVITY:
A student holds at most one `admitted` application at a time. The slot is a
single document per student in `admissionOffers`:

    admissionOffers/<studentId> = {"applicationId": <id> | None}

Admitting claims the slot with one conditional write that succeeds only when
the slot is empty or already held by the same application, so two
institutions admitting the same student concurrently cannot both win.
Moving an application out of `admitted` releases the slot. A release that
was lost (store error) leaves a stale claim, which the next admission takes
over once the holding application is no longer admitted.
"""

import logging
from collections import Counter
from datetime import timedelta
from typing import List, Optional

from app.core.config import get_settings
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.services.profile_service import calculate_gpa
from app.services.qualification_service import evaluate_course
from app.utils.helpers import to_datetime, utcnow

logger = logging.getLogger(__name__)

INSTITUTION_STATUSES = ("pending", "admitted", "rejected", "waiting-list")
DECISIONS = {"accept": "accepted", "decline": "declined"}


def course_application_id(student_id: str, course_id: str) -> str:
    return f"{student_id}_{course_id}"


class AdmissionsService:

    def __init__(self, store: DocumentStore):
        self.store = store
        self.settings = get_settings()

    # ============================================================
    # EXCLUSIVITY GUARD
    # ============================================================

    def _claim_offer(self, student_id: str, application_id: str) -> bool:
        """Take the student's admitted slot for this application."""
        claimed = self.store.update_if(
            COLLECTIONS["admission_offers"],
            student_id,
            expected={"applicationId": None},
            changes={"applicationId": application_id, "updatedAt": utcnow()},
            upsert=True
        )
        if claimed:
            return True

        slot = self.store.get(COLLECTIONS["admission_offers"], student_id)
        if slot is None:
            return False
        holder = slot.get("applicationId")
        # Re-admitting the application that already holds the slot
        if holder == application_id:
            return True
        if holder is None or not self._is_stale_claim(slot):
            return False

        logger.warning("Taking over stale admission slot of student %s from %s", student_id, holder)
        return self.store.update_if(
            COLLECTIONS["admission_offers"],
            student_id,
            expected={"applicationId": holder},
            changes={"applicationId": application_id, "updatedAt": utcnow()}
        )

    def _is_stale_claim(self, slot: dict) -> bool:
        """
        A claim is stale when its release was lost: the holding application is
        gone, or it left `admitted` after the claim was taken.

        A holder that is not yet `admitted` and has not changed since the claim
        may be an admission in flight; it only counts as stale once the claim
        is older than admission_claim_timeout_seconds.
        """
        holder = self.store.get(COLLECTIONS["applications"], slot["applicationId"])
        if holder is None:
            return True
        if holder.get("status") == "admitted":
            return False

        claimed_at = to_datetime(slot.get("updatedAt"))
        if claimed_at is None:
            return True
        changed_at = to_datetime(holder.get("updatedAt"))
        if changed_at is not None and changed_at >= claimed_at:
            return True
        timeout = timedelta(seconds=self.settings.admission_claim_timeout_seconds)
        return utcnow() - claimed_at > timeout

    def _release_offer(self, student_id: str, application_id: str) -> None:
        """Free the slot. A lost release is recovered by the next claim."""
        try:
            self.store.update_if(
                COLLECTIONS["admission_offers"],
                student_id,
                expected={"applicationId": application_id},
                changes={"applicationId": None, "updatedAt": utcnow()}
            )
        except Exception:
            logger.warning("Could not release admission slot of student %s", student_id, exc_info=True)

    def _other_admissions(self, student_id: str, application_id: str) -> List[dict]:
        admitted = self.store.query(COLLECTIONS["applications"], studentId=student_id, status="admitted")
        return [app for app in admitted if app["id"] != application_id]

    def update_application_status(self, institution_id: str, application_id: str, status: str) -> dict:
        """
        Set an application's status on behalf of its institution.

        Raises:
            ValidationError: status is not one an institution may set
            NotFoundError: application missing or owned by another institution
            ConflictError: admitting a student who already holds an admitted offer
        """
        if status not in INSTITUTION_STATUSES:
            raise ValidationError(
                "Invalid status. Must be: admitted, rejected, pending, or waiting-list"
            )

        application = self.store.get(COLLECTIONS["applications"], application_id)
        if not application or application.get("institutionId") != institution_id:
            raise NotFoundError("Application not found")

        student_id = application["studentId"]
        previous = application.get("status")

        if status == "admitted":
            if self._other_admissions(student_id, application_id) or not self._claim_offer(student_id, application_id):
                raise ConflictError(
                    "This student has already been admitted to another programme. "
                    "They must confirm or decline that offer before you can admit them here."
                )

        try:
            self.store.update(COLLECTIONS["applications"], application_id, {
                "status": status,
                "updatedAt": utcnow()
            })
        except Exception:
            if status == "admitted" and previous != "admitted":
                self._release_offer(student_id, application_id)
            raise

        if previous == "admitted" and status != "admitted":
            self._release_offer(student_id, application_id)

        logger.info("Application status updated: %s %s -> %s", application_id, previous, status)
        return {**application, "status": status}

    def decide_on_offer(self, student_id: str, application_id: str, decision: str) -> str:
        """
        Accept or decline an admitted offer. Returns the new status.
        """
        if decision not in DECISIONS:
            raise ValidationError("Decision must be accept or decline")

        application = self.store.get(COLLECTIONS["applications"], application_id)
        if not application or application.get("studentId") != student_id:
            raise NotFoundError("Application not found")

        if application.get("status") != "admitted":
            raise ValidationError("Only admitted offers can be accepted or declined")

        new_status = DECISIONS[decision]
        now = utcnow()
        self.store.update(COLLECTIONS["applications"], application_id, {
            "status": new_status,
            "updatedAt": now,
            "decisionAt": now,
            "decisionBy": student_id
        })
        self._release_offer(student_id, application_id)

        logger.info("Offer %s by student %s: %s", new_status, student_id, application_id)
        return new_status

    # ============================================================
    # STUDENT APPLICATIONS
    # ============================================================

    def apply_for_courses(self, student_id: str, applications: list) -> List[str]:
        """
        Submit course applications. Every entry is validated before anything
        is written.

        Rules:
        - each entry names institutionId and courseId
        - at most `max_course_applications_per_institution` per institution,
          counting applications already on file
        - one application per course
        - the course exists and its requirements are met

        Returns the new application ids.
        """
        if not isinstance(applications, list) or not applications:
            raise ValidationError("Applications array is required")

        for entry in applications:
            if not isinstance(entry, dict) or not entry.get("institutionId") or not entry.get("courseId"):
                raise ValidationError("Each application must have institutionId and courseId")

        existing = self.store.query(COLLECTIONS["applications"], studentId=student_id)
        existing_counts = Counter(app.get("institutionId") for app in existing)
        existing_courses = {app.get("courseId") for app in existing}
        new_counts = Counter(entry["institutionId"] for entry in applications)
        limit = self.settings.max_course_applications_per_institution

        grades = self.store.query(COLLECTIONS["grades"], studentId=student_id)
        requested = set()

        for entry in applications:
            institution_id = entry["institutionId"]
            course_id = entry["courseId"]

            current = existing_counts[institution_id]
            if current + new_counts[institution_id] > limit:
                raise ValidationError(
                    f"Cannot apply to more than {limit} courses per institution. "
                    f"You have {current} existing applications for this institution."
                )

            if course_id in existing_courses or course_id in requested:
                raise ConflictError("You have already applied to this course")
            requested.add(course_id)

            course = self.store.get(COLLECTIONS["courses"], course_id)
            if not course or course.get("institutionId") != institution_id:
                raise NotFoundError("Course not found")

            result = evaluate_course(course, grades)
            if not result["qualifies"]:
                raise ValidationError(
                    f"You do not meet the requirements for {course.get('name')}: "
                    + "; ".join(result["failedRequirements"])
                )

        created = []
        for entry in applications:
            now = utcnow()
            application_id = course_application_id(student_id, entry["courseId"])
            inserted = self.store.create(COLLECTIONS["applications"], application_id, {
                "studentId": student_id,
                "institutionId": entry["institutionId"],
                "courseId": entry["courseId"],
                "status": "pending",
                "appliedAt": now,
                "updatedAt": now
            })
            if not inserted:
                raise ConflictError("You have already applied to this course")
            created.append(application_id)

        logger.info("Course applications submitted by student %s: %d", student_id, len(created))
        return created

    def list_student_applications(self, student_id: str) -> List[dict]:
        """The student's course applications with course and institution attached."""
        applications = []
        for application in self.store.query(COLLECTIONS["applications"], studentId=student_id):
            course = self.store.get(COLLECTIONS["courses"], application.get("courseId") or "")
            if course:
                application["course"] = course
            institution = self.store.get(COLLECTIONS["institutions"], application.get("institutionId") or "")
            if institution:
                application["institution"] = institution
            applications.append(application)
        return applications

    def eligible_courses(self, student_id: str, institution_id: str) -> List[dict]:
        """Courses of an institution whose requirements the student meets."""
        if not institution_id:
            raise ValidationError("Institution ID is required")
        grades = self.store.query(COLLECTIONS["grades"], studentId=student_id)
        courses = self.store.query(COLLECTIONS["courses"], institutionId=institution_id)
        return [course for course in courses if evaluate_course(course, grades)["qualifies"]]

    # ============================================================
    # INSTITUTION VIEW
    # ============================================================

    def list_institution_applications(self, institution_id: str, status: Optional[str] = None) -> List[dict]:
        """
        Applications received by an institution, optionally filtered by status.

        The student's GPA shown here is derived from their grades.
        """
        filters = {"institutionId": institution_id}
        if status:
            filters["status"] = status

        applications = []
        for application in self.store.query(COLLECTIONS["applications"], **filters):
            student_id = application.get("studentId") or ""
            student = self.store.get(COLLECTIONS["students"], student_id)
            if student:
                grades = self.store.query(COLLECTIONS["grades"], studentId=student_id)
                if grades:
                    student["gpa"] = f"{calculate_gpa(grades):.2f}"
                    student["grades"] = grades
                application["student"] = student

            course = self.store.get(COLLECTIONS["courses"], application.get("courseId") or "")
            if course:
                application["course"] = course

            applications.append(application)
        return applications


def get_admissions_service(store: DocumentStore) -> AdmissionsService:
    return AdmissionsService(store)
