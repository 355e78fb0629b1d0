"""
Notification Service

Job-opportunity notifications for students.

- emit(): write one notification; store failures surface as DependencyError
- notify_students_of_job(): fan-out when a company posts an active job.
  Students below the job's minGPA (by their stored GPA) are skipped; a failed
  emission is logged and the fan-out moves on to the next student.
- list_for_student() / mark_read(): the student's inbox
"""

import logging
from typing import List, Optional

from app.core.config import get_settings
from app.core.errors import DependencyError, NotFoundError, UnauthorizedError
from app.db.mongodb import COLLECTIONS
from app.db.store import DocumentStore
from app.utils.helpers import timestamp_sort_key, utcnow
from app.utils.normalize import to_number

logger = logging.getLogger(__name__)

JOB_OPPORTUNITY = "job_opportunity"


class NotificationService:

    def __init__(self, store: DocumentStore):
        self.store = store

    def emit(self, student_id: str, job_id: str, title: str, message: str) -> str:
        """Create one job-opportunity notification and return its id."""
        now = utcnow()
        try:
            return self.store.add(COLLECTIONS["notifications"], {
                "studentId": student_id,
                "type": JOB_OPPORTUNITY,
                "title": title,
                "message": message,
                "jobId": job_id,
                "read": False,
                "createdAt": now,
                "updatedAt": now
            })
        except Exception as e:
            raise DependencyError(f"Could not create notification for student {student_id}: {e}") from e

    def notify_students_of_job(self, job_id: str, job: dict, company_name: str) -> int:
        """
        Notify every student whose stored GPA meets the job's minGPA.

        Returns the number of notifications created.
        """
        min_gpa = to_number(job.get("minGPA"))
        message = f'A new job "{job.get("title", "")}" at {company_name} matches your profile!'
        sent = 0

        for student in self.store.query(COLLECTIONS["students"]):
            if min_gpa and to_number(student.get("gpa")) < min_gpa:
                continue
            try:
                self.emit(student["id"], job_id, "New Job Opportunity", message)
                sent += 1
            except DependencyError as e:
                logger.warning("Skipping job notification: %s", e.message)

        logger.info("Job %s: notified %d students", job_id, sent)
        return sent

    def list_for_student(
        self,
        student_id: str,
        unread_only: bool = False,
        limit: Optional[int] = None
    ) -> List[dict]:
        """Newest first, capped at `limit` (settings.notification_list_limit by default)."""
        if limit is None:
            limit = get_settings().notification_list_limit

        notifications = self.store.query(COLLECTIONS["notifications"], studentId=student_id)
        if unread_only:
            notifications = [n for n in notifications if not n.get("read")]

        notifications.sort(key=lambda n: timestamp_sort_key(n.get("createdAt")), reverse=True)
        return notifications[:limit]

    def mark_read(self, student_id: str, notification_id: str) -> None:
        notification = self.store.get(COLLECTIONS["notifications"], notification_id)
        if not notification:
            raise NotFoundError("Notification not found")
        if notification.get("studentId") != student_id:
            raise UnauthorizedError("Unauthorized")

        now = utcnow()
        self.store.update(COLLECTIONS["notifications"], notification_id, {
            "read": True,
            "readAt": now,
            "updatedAt": now
        })


def get_notification_service(store: DocumentStore) -> NotificationService:
    return NotificationService(store)
