"""
Admin Routes

GET    /admin/stats                                  - System statistics
GET    /admin/institutions                           - List institutions (?status=)
POST   /admin/institutions                           - Create institution + account
PUT    /admin/institutions/{institution_id}          - Update institution
PUT    /admin/institutions/{institution_id}/status   - Approve / suspend / reject
DELETE /admin/institutions/{institution_id}          - Delete institution and its courses
GET    /admin/institutions/{institution_id}/courses  - Institution's courses
POST   /admin/institutions/{institution_id}/courses  - Add course to institution
PUT    /admin/courses/{course_id}                    - Update course
DELETE /admin/courses/{course_id}                    - Delete course
GET    /admin/companies                              - List companies (?status=)
PUT    /admin/companies/{company_id}/status          - Approve / suspend / reject
DELETE /admin/companies/{company_id}                 - Delete company and its jobs
GET    /admin/users                                  - List users (?role=)
POST   /admin/admissions/publish                     - Open / close admissions
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from app.core.auth import get_current_admin
from app.db.store import DocumentStore, get_store
from app.services.admin_service import get_admin_service
from app.schemas.schemas import (
    CourseCreate, CourseUpdate, InstitutionCreate, InstitutionUpdate, MessageResponse,
    OrganizationStatus, OrganizationStatusUpdate, PublishAdmissionsRequest, UserRole, payload
)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats")
async def get_system_stats(admin: dict = Depends(get_current_admin), store: DocumentStore = Depends(get_store)):
    return {"success": True, "stats": get_admin_service(store).system_stats()}


# ============================================================
# INSTITUTIONS
# ============================================================

@router.get("/institutions")
async def get_institutions(
    status: Optional[OrganizationStatus] = Query(None),
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    institutions = get_admin_service(store).list_institutions(status.value if status else None)
    return {"success": True, "institutions": institutions}


@router.post("/institutions", status_code=201)
async def create_institution(
    data: InstitutionCreate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    institution_id = get_admin_service(store).create_institution(payload(data))
    return {"success": True, "message": "Institution created successfully", "institutionId": institution_id}


@router.put("/institutions/{institution_id}", response_model=MessageResponse)
async def update_institution(
    institution_id: str,
    data: InstitutionUpdate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    get_admin_service(store).update_institution(institution_id, payload(data))
    return MessageResponse(message="Institution updated successfully")


@router.put("/institutions/{institution_id}/status", response_model=MessageResponse)
async def update_institution_status(
    institution_id: str,
    data: OrganizationStatusUpdate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    get_admin_service(store).update_institution_status(institution_id, data.status.value)
    return MessageResponse(message="Institution status updated successfully")


@router.delete("/institutions/{institution_id}", response_model=MessageResponse)
async def delete_institution(
    institution_id: str,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    get_admin_service(store).delete_institution(institution_id)
    return MessageResponse(message="Institution deleted successfully")


# ============================================================
# COURSES
# ============================================================

@router.get("/institutions/{institution_id}/courses")
async def get_institution_courses(
    institution_id: str,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    return {"success": True, "courses": get_admin_service(store).list_institution_courses(institution_id)}


@router.post("/institutions/{institution_id}/courses", status_code=201)
async def add_institution_course(
    institution_id: str,
    data: CourseCreate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    course_id = get_admin_service(store).add_institution_course(institution_id, payload(data))
    return {"success": True, "message": "Course added successfully", "courseId": course_id}


@router.put("/courses/{course_id}", response_model=MessageResponse)
async def update_course(
    course_id: str,
    data: CourseUpdate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    get_admin_service(store).update_course(course_id, payload(data))
    return MessageResponse(message="Course updated successfully")


@router.delete("/courses/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    get_admin_service(store).delete_course(course_id)
    return MessageResponse(message="Course deleted successfully")


# ============================================================
# COMPANIES
# ============================================================

@router.get("/companies")
async def get_companies(
    status: Optional[OrganizationStatus] = Query(None),
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    companies = get_admin_service(store).list_companies(status.value if status else None)
    return {"success": True, "companies": companies}


@router.put("/companies/{company_id}/status", response_model=MessageResponse)
async def update_company_status(
    company_id: str,
    data: OrganizationStatusUpdate,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    get_admin_service(store).update_company_status(company_id, data.status.value)
    return MessageResponse(message="Company status updated successfully")


@router.delete("/companies/{company_id}", response_model=MessageResponse)
async def delete_company(
    company_id: str,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    get_admin_service(store).delete_company(company_id)
    return MessageResponse(message="Company deleted successfully")


# ============================================================
# USERS & ADMISSIONS
# ============================================================

@router.get("/users")
async def get_users(
    role: Optional[UserRole] = Query(None),
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    return {"success": True, "users": get_admin_service(store).list_users(role.value if role else None)}


@router.post("/admissions/publish", response_model=MessageResponse)
async def publish_admissions(
    data: PublishAdmissionsRequest,
    admin: dict = Depends(get_current_admin),
    store: DocumentStore = Depends(get_store)
):
    """Open or close admissions for one institution, or all when institutionId is omitted."""
    get_admin_service(store).publish_admissions(data.action.value, data.institution_id)
    verb = "opened" if data.action.value == "open" else "closed"
    return MessageResponse(message=f"Admissions {verb} successfully")
