"""
Public Routes (no authentication)

GET /public/institutions                         - Approved institutions
GET /public/institutions/{institution_id}/courses - Active courses of an institution
GET /public/stats                                - Landing page statistics
"""

from fastapi import APIRouter, Depends

from app.db.store import DocumentStore, get_store
from app.services.public_service import get_public_service

router = APIRouter(prefix="/public", tags=["Public"])


@router.get("/institutions")
async def get_institutions(store: DocumentStore = Depends(get_store)):
    institutions = get_public_service(store).list_institutions()
    return {"success": True, "data": institutions, "count": len(institutions)}


@router.get("/institutions/{institution_id}/courses")
async def get_institution_courses(institution_id: str, store: DocumentStore = Depends(get_store)):
    courses = get_public_service(store).list_courses(institution_id)
    return {"success": True, "data": courses, "count": len(courses)}


@router.get("/stats")
async def get_stats(store: DocumentStore = Depends(get_store)):
    return {"success": True, "data": get_public_service(store).platform_stats()}
