"""
Institution Routes

GET    /institutions/profile                            - Profile with course / application counts
PUT    /institutions/profile                            - Update profile
GET    /institutions/faculties                          - List faculties
POST   /institutions/faculties                          - Add faculty
PUT    /institutions/faculties/{faculty_id}             - Update faculty
DELETE /institutions/faculties/{faculty_id}             - Delete faculty
GET    /institutions/courses                            - List courses
POST   /institutions/courses                            - Add course
PUT    /institutions/courses/{course_id}                - Update course
DELETE /institutions/courses/{course_id}                - Delete course
GET    /institutions/applications                       - Applications received
PUT    /institutions/applications/{application_id}/status - Admit / reject / waitlist
PUT    /institutions/admissions/settings                - Admissions settings
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.core.auth import get_current_institution
from app.db.store import DocumentStore, get_store
from app.services.admissions_service import get_admissions_service
from app.services.institution_service import get_institution_service
from app.schemas.schemas import (
    AdmissionsSettingsUpdate, ApplicationStatus, ApplicationStatusUpdate, CourseCreate,
    CourseUpdate, FacultyCreate, FacultyUpdate, InstitutionProfileUpdate, MessageResponse, payload
)

router = APIRouter(prefix="/institutions", tags=["Institutions"])


# ============================================================
# PROFILE
# ============================================================

@router.get("/profile")
async def get_profile(institution: dict = Depends(get_current_institution), store: DocumentStore = Depends(get_store)):
    return {"success": True, "institution": get_institution_service(store).get_profile(institution["id"])}


@router.put("/profile", response_model=MessageResponse)
async def update_profile(
    data: InstitutionProfileUpdate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    get_institution_service(store).update_profile(institution["id"], payload(data))
    return MessageResponse(message="Profile updated successfully")


@router.put("/admissions/settings", response_model=MessageResponse)
async def update_admissions_settings(
    data: AdmissionsSettingsUpdate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    get_institution_service(store).update_admissions_settings(institution["id"], payload(data))
    return MessageResponse(message="Admissions settings updated successfully")


# ============================================================
# FACULTIES
# ============================================================

@router.get("/faculties")
async def get_faculties(institution: dict = Depends(get_current_institution), store: DocumentStore = Depends(get_store)):
    return {"success": True, "faculties": get_institution_service(store).list_faculties(institution["id"])}


@router.post("/faculties", status_code=201)
async def add_faculty(
    data: FacultyCreate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    faculty_id = get_institution_service(store).add_faculty(institution["id"], payload(data))
    return {"success": True, "message": "Faculty added successfully", "facultyId": faculty_id}


@router.put("/faculties/{faculty_id}", response_model=MessageResponse)
async def update_faculty(
    faculty_id: str,
    data: FacultyUpdate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    get_institution_service(store).update_faculty(institution["id"], faculty_id, payload(data))
    return MessageResponse(message="Faculty updated successfully")


@router.delete("/faculties/{faculty_id}", response_model=MessageResponse)
async def delete_faculty(
    faculty_id: str,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    get_institution_service(store).delete_faculty(institution["id"], faculty_id)
    return MessageResponse(message="Faculty deleted successfully")


# ============================================================
# COURSES
# ============================================================

@router.get("/courses")
async def get_courses(institution: dict = Depends(get_current_institution), store: DocumentStore = Depends(get_store)):
    return {"success": True, "courses": get_institution_service(store).list_courses(institution["id"])}


@router.post("/courses", status_code=201)
async def add_course(
    data: CourseCreate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    """Add a course. requiredSubjects accepts a list or a comma-separated string."""
    course_id = get_institution_service(store).add_course(institution["id"], payload(data))
    return {"success": True, "message": "Course added successfully", "courseId": course_id}


@router.put("/courses/{course_id}", response_model=MessageResponse)
async def update_course(
    course_id: str,
    data: CourseUpdate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    get_institution_service(store).update_course(institution["id"], course_id, payload(data))
    return MessageResponse(message="Course updated successfully")


@router.delete("/courses/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    get_institution_service(store).delete_course(institution["id"], course_id)
    return MessageResponse(message="Course deleted successfully")


# ============================================================
# APPLICATIONS
# ============================================================

@router.get("/applications")
async def get_applications(
    status: Optional[ApplicationStatus] = Query(None, description="Filter by status"),
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    applications = get_admissions_service(store).list_institution_applications(
        institution["id"], status.value if status else None
    )
    return {"success": True, "applications": applications}


@router.put("/applications/{application_id}/status", response_model=MessageResponse)
async def update_application_status(
    application_id: str,
    data: ApplicationStatusUpdate,
    institution: dict = Depends(get_current_institution),
    store: DocumentStore = Depends(get_store)
):
    """
    Set an application to pending, admitted, rejected or waiting-list.

    A student can hold only one admitted offer at a time; admitting a student
    who already holds one elsewhere is rejected.
    """
    get_admissions_service(store).update_application_status(institution["id"], application_id, data.status)
    return MessageResponse(message="Application status updated successfully")
