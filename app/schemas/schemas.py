"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Clients send camelCase JSON (minGPA, requiredCertificates, ...). Fields are
declared in snake_case with camelCase aliases; routes hand services
`payload(model)`, which is the camelCase dict of the fields actually sent.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from enum import Enum


# Requirement values arrive as numbers or numeric strings
Number = Union[float, str]
# Set-valued requirements arrive as a list or a comma-separated string
StringList = Union[List[str], str]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OpenCamelModel(CamelModel):
    """Profile documents accept fields beyond the declared ones."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


def payload(model: BaseModel) -> dict:
    """camelCase dict of the fields the client actually sent."""
    return model.model_dump(by_alias=True, exclude_unset=True, mode="json")


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    institution = "institution"
    company = "company"
    admin = "admin"


class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    internship = "internship"
    contract = "contract"


class JobStatus(str, Enum):
    active = "active"
    closed = "closed"


class ApplicationStatus(str, Enum):
    pending = "pending"
    admitted = "admitted"
    rejected = "rejected"
    waiting_list = "waiting-list"
    accepted = "accepted"
    declined = "declined"


class OfferDecision(str, Enum):
    accept = "accept"
    decline = "decline"


class DocumentType(str, Enum):
    additional = "additional"
    transcript = "transcript"
    certificate = "certificate"
    diploma = "diploma"
    other = "other"


class OrganizationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    suspended = "suspended"
    rejected = "rejected"


class AdmissionsAction(str, Enum):
    open = "open"
    close = "close"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=200)
    role: UserRole
    additional_data: Optional[dict] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=1)

class DevVerifyRequest(BaseModel):
    email: EmailStr


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class ExperienceEntry(CamelModel):
    company: Optional[str] = None
    role: Optional[str] = None
    years: Optional[Number] = None
    description: Optional[str] = None

class StudentProfileUpdate(OpenCamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[List[ExperienceEntry]] = None

class GradeEntry(BaseModel):
    subject: str = Field(..., min_length=1)
    grade: float = Field(..., ge=0, le=100)

class GradesUpdate(BaseModel):
    grades: List[GradeEntry]

class CourseApplicationEntry(CamelModel):
    institution_id: str
    course_id: str

class CourseApplicationsRequest(BaseModel):
    applications: List[CourseApplicationEntry]

class OfferDecisionRequest(BaseModel):
    decision: OfferDecision

class DocumentUpload(CamelModel):
    document_type: DocumentType
    file_name: str = Field(..., min_length=1)
    file_url: Optional[str] = None
    description: Optional[str] = None


# ============================================================
# INSTITUTION SCHEMAS
# ============================================================

class InstitutionProfileUpdate(OpenCamelModel):
    name: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None

class AdmissionsSettingsUpdate(CamelModel):
    admissions_open: Optional[bool] = None
    admissions_message: Optional[str] = None
    next_intake_date: Optional[str] = None
    contact_email: Optional[str] = None

class FacultyCreate(CamelModel):
    name: str = Field(..., min_length=1)
    code: Optional[str] = None
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    head_of_department: Optional[str] = None

class FacultyUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = None
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    head_of_department: Optional[str] = None

class CourseRequirements(CamelModel):
    min_gpa: Optional[Number] = Field(None, alias="minGPA")
    required_subjects: Optional[StringList] = None
    min_subject_grade: Optional[Number] = None

class CourseCreate(CamelModel):
    name: str = Field(..., min_length=1)
    faculty: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration: Optional[str] = None
    requirements: Optional[CourseRequirements] = None
    capacity: Optional[Number] = None
    status: Optional[str] = None

class CourseUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    faculty: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    duration: Optional[str] = None
    requirements: Optional[CourseRequirements] = None
    capacity: Optional[Number] = None
    status: Optional[str] = None

class ApplicationStatusUpdate(BaseModel):
    status: str


# ============================================================
# COMPANY / JOB SCHEMAS
# ============================================================

class CompanyProfileUpdate(OpenCamelModel):
    name: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None

class JobRequirements(CamelModel):
    education: Optional[str] = None
    experience: Optional[str] = None
    skills: Optional[str] = None
    required_certificates: Optional[StringList] = None
    keywords: Optional[StringList] = None

class JobCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    requirements: Optional[JobRequirements] = None
    min_gpa: Optional[Number] = Field(None, alias="minGPA")
    min_experience_years: Optional[Number] = None
    location: Optional[str] = None
    type: Optional[JobType] = None
    salary: Optional[str] = None
    application_deadline: Optional[str] = None

class JobUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    requirements: Optional[JobRequirements] = None
    min_gpa: Optional[Number] = Field(None, alias="minGPA")
    min_experience_years: Optional[Number] = None
    location: Optional[str] = None
    type: Optional[JobType] = None
    salary: Optional[str] = None
    application_deadline: Optional[str] = None
    status: Optional[JobStatus] = None


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class InstitutionCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: Optional[str] = Field(None, min_length=8)
    location: Optional[str] = None
    type: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None

class InstitutionUpdate(CamelModel):
    name: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None

class OrganizationStatusUpdate(BaseModel):
    status: OrganizationStatus

class PublishAdmissionsRequest(CamelModel):
    action: AdmissionsAction
    institution_id: Optional[str] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
