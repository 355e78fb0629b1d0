"""
Student Routes

GET  /students/profile                              - Profile with grades and applications
PUT  /students/profile                              - Update profile
PUT  /students/grades                               - Replace grades, recompute GPA
POST /students/apply                                - Apply for courses
GET  /students/applications                         - My course applications
PUT  /students/applications/{application_id}/decision - Accept or decline an offer
GET  /students/institutions/{institution_id}/courses - Courses I qualify for
GET  /students/jobs                                 - Jobs I qualify for
POST /students/jobs/{job_id}/apply                  - Apply for a job
POST /students/jobs/{job_id}/save                   - Save a job
GET  /students/jobs/applications/ids                - Ids of jobs I applied to
GET  /students/jobs/saved/ids                       - Ids of saved jobs
POST /students/documents                            - Upload document metadata
GET  /students/documents                            - List documents
DELETE /students/documents/{document_id}            - Delete a document
GET  /students/notifications                        - Notifications, newest first
PUT  /students/notifications/{notification_id}/read - Mark notification read
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.core.auth import get_current_student
from app.db.store import DocumentStore, get_store
from app.services.admissions_service import get_admissions_service
from app.services.job_service import get_job_service
from app.services.notification_service import get_notification_service
from app.services.student_service import get_student_service
from app.schemas.schemas import (
    CourseApplicationsRequest, DocumentType, DocumentUpload, GradesUpdate,
    MessageResponse, OfferDecisionRequest, StudentProfileUpdate, payload
)

router = APIRouter(prefix="/students", tags=["Students"])


# ============================================================
# PROFILE & GRADES
# ============================================================

@router.get("/profile")
async def get_profile(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    """Profile with GPA derived from grades, plus applications and grades."""
    return {"success": True, **get_student_service(store).get_profile(student["id"])}


@router.put("/profile", response_model=MessageResponse)
async def update_profile(
    data: StudentProfileUpdate,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    """Update profile. Only provided fields are updated."""
    get_student_service(store).update_profile(student["id"], payload(data))
    return MessageResponse(message="Profile updated successfully")


@router.put("/grades")
async def update_grades(
    data: GradesUpdate,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    """Replace all grades (0-100) and store the recomputed GPA."""
    gpa = get_student_service(store).update_grades(student["id"], payload(data)["grades"])
    return {"success": True, "message": "Grades updated successfully", "gpa": gpa}


# ============================================================
# COURSE APPLICATIONS
# ============================================================

@router.post("/apply", status_code=201)
async def apply_for_courses(
    data: CourseApplicationsRequest,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    """Apply for one or more courses (max 2 per institution)."""
    ids = get_admissions_service(store).apply_for_courses(student["id"], payload(data)["applications"])
    return {"success": True, "message": "Applications submitted successfully", "applicationIds": ids}


@router.get("/applications")
async def get_applications(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    applications = get_admissions_service(store).list_student_applications(student["id"])
    return {"success": True, "applications": applications}


@router.put("/applications/{application_id}/decision", response_model=MessageResponse)
async def decide_on_offer(
    application_id: str,
    data: OfferDecisionRequest,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    """Accept or decline an admitted offer."""
    status = get_admissions_service(store).decide_on_offer(student["id"], application_id, data.decision.value)
    return MessageResponse(message=f"Offer {status}.")


@router.get("/institutions/{institution_id}/courses")
async def get_eligible_courses(
    institution_id: str,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    """Courses of an institution whose requirements the student meets."""
    courses = get_admissions_service(store).eligible_courses(student["id"], institution_id)
    return {"success": True, "data": courses}


# ============================================================
# JOBS
# ============================================================

@router.get("/jobs")
async def get_available_jobs(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    jobs = get_job_service(store).available_jobs(student["id"])
    return {"success": True, "jobs": jobs, "totalCount": len(jobs)}


@router.get("/jobs/applications/ids")
async def get_applied_job_ids(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    return {"success": True, "jobIds": get_job_service(store).applied_job_ids(student["id"])}


@router.get("/jobs/saved/ids")
async def get_saved_job_ids(student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    return {"success": True, "jobIds": get_job_service(store).saved_job_ids(student["id"])}


@router.post("/jobs/{job_id}/apply", response_model=MessageResponse, status_code=201)
async def apply_for_job(job_id: str, student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    """Apply for a job. The student must meet every requirement."""
    get_job_service(store).apply_for_job(student["id"], job_id)
    return MessageResponse(message="Applied to job successfully")


@router.post("/jobs/{job_id}/save", response_model=MessageResponse, status_code=201)
async def save_job(job_id: str, student: dict = Depends(get_current_student), store: DocumentStore = Depends(get_store)):
    get_job_service(store).save_job(student["id"], job_id)
    return MessageResponse(message="Job saved")


# ============================================================
# DOCUMENTS
# ============================================================

@router.post("/documents", status_code=201)
async def upload_document(
    data: DocumentUpload,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    """Record an uploaded document (certificates and diplomas count for job matching)."""
    document_id = get_student_service(store).upload_document(student["id"], payload(data))
    return {"success": True, "message": "Document uploaded successfully", "documentId": document_id}


@router.get("/documents")
async def get_documents(
    document_type: Optional[DocumentType] = Query(None, alias="documentType"),
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    documents = get_student_service(store).list_documents(
        student["id"], document_type.value if document_type else None
    )
    return {"success": True, "documents": documents}


@router.delete("/documents/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: str,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    get_student_service(store).delete_document(student["id"], document_id)
    return MessageResponse(message="Document deleted successfully")


# ============================================================
# NOTIFICATIONS
# ============================================================

@router.get("/notifications")
async def get_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: Optional[int] = Query(None, ge=1, le=200),
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    notifications = get_notification_service(store).list_for_student(student["id"], unread_only, limit)
    return {"success": True, "notifications": notifications}


@router.put("/notifications/{notification_id}/read", response_model=MessageResponse)
async def mark_notification_read(
    notification_id: str,
    student: dict = Depends(get_current_student),
    store: DocumentStore = Depends(get_store)
):
    get_notification_service(store).mark_read(student["id"], notification_id)
    return MessageResponse(message="Notification marked as read")
