"""
Company Routes

GET  /companies/profile                  - Get own profile (with jobs count)
PUT  /companies/profile                  - Update profile (created if missing)
GET  /companies/jobs                     - Get company's jobs
POST /companies/jobs                     - Post a job (notifies matching students)
PUT  /companies/jobs/{job_id}            - Update a job
GET  /companies/jobs/{job_id}/applicants - Qualified applicants, ranked
"""

from fastapi import APIRouter, Depends

from app.core.auth import get_current_company
from app.db.store import DocumentStore, get_store
from app.services.company_service import get_company_service
from app.services.job_service import get_job_service
from app.schemas.schemas import CompanyProfileUpdate, JobCreate, JobUpdate, MessageResponse, payload

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("/profile")
async def get_profile(company: dict = Depends(get_current_company), store: DocumentStore = Depends(get_store)):
    """Get current company's profile."""
    return {"success": True, "company": get_company_service(store).get_profile(company["id"])}


@router.put("/profile", response_model=MessageResponse)
async def update_profile(
    data: CompanyProfileUpdate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store)
):
    """Update company profile. Only provided fields are updated."""
    get_company_service(store).update_profile(company["id"], company, payload(data))
    return MessageResponse(message="Profile updated successfully")


@router.get("/jobs")
async def get_jobs(company: dict = Depends(get_current_company), store: DocumentStore = Depends(get_store)):
    """Get all jobs posted by current company."""
    return {"success": True, "jobs": get_job_service(store).list_company_jobs(company["id"])}


@router.post("/jobs", status_code=201)
async def post_job(
    data: JobCreate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store)
):
    """
    Post a new job.

    requiredCertificates and keywords accept a list or a comma-separated
    string. Students whose GPA meets minGPA are notified.
    """
    job_id = get_job_service(store).post_job(company["id"], payload(data))
    return {"success": True, "message": "Job posted successfully", "jobId": job_id}


@router.put("/jobs/{job_id}", response_model=MessageResponse)
async def update_job(
    job_id: str,
    data: JobUpdate,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store)
):
    """Update a job. Only the owning company can update."""
    get_job_service(store).update_job(company["id"], job_id, payload(data))
    return MessageResponse(message="Job updated successfully")


@router.get("/jobs/{job_id}/applicants")
async def get_job_applicants(
    job_id: str,
    company: dict = Depends(get_current_company),
    store: DocumentStore = Depends(get_store)
):
    """
    Applicants who meet every requirement of the job, best score first.

    score = 4 + max(0, gpa - minGPA) * 0.25 + experienceYears * 0.1
    """
    applicants = get_job_service(store).get_applicants(company["id"], job_id)
    return {"success": True, "applicants": applicants, "totalCount": len(applicants)}
