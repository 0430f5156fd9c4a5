"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Any, Union
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    institute = "institute"
    company = "company"
    admin = "admin"


class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    internship = "internship"
    contract = "contract"


class CourseApplicationAction(str, Enum):
    admitted = "admitted"
    rejected = "rejected"
    waitlisted = "waitlisted"


class JobApplicationStatus(str, Enum):
    shortlisted = "shortlisted"
    interview_scheduled = "interview_scheduled"
    rejected = "rejected"
    hired = "hired"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole
    full_name: Optional[str] = Field(None, max_length=200)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    user_id: int
    email: str
    role: str
    full_name: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


# ============================================================
# STUDENT PROFILE SCHEMAS
# ============================================================

class AcademicRecordCreate(BaseModel):
    institution_name: str = Field(..., min_length=1, max_length=200)
    year: str = Field(..., min_length=1, max_length=20)
    program: Optional[str] = None
    gpa: Optional[str] = None

class CertificateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    issuer: str = Field(..., min_length=1, max_length=200)
    date: Optional[str] = None
    description: Optional[str] = None

class WorkExperienceCreate(BaseModel):
    company: str = Field(..., min_length=1, max_length=200)
    position: str = Field(..., min_length=1, max_length=200)
    duration: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    reference_contact: Optional[str] = None

class SkillAdd(BaseModel):
    skill: str = Field(..., min_length=1, max_length=100)

class StudentProfileResponse(BaseModel):
    student_id: int
    academic_records: List[dict] = []
    certificates: List[dict] = []
    work_experience: List[dict] = []
    skills: List[str] = []
    completion: int
    can_generate_resume: bool
    can_apply_for_jobs: bool


# ============================================================
# INSTITUTION / COURSE SCHEMAS
# ============================================================

class InstitutionCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None

class CourseCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    requirements: Optional[str] = None
    duration: Optional[str] = None
    seats_available: int = Field(0, ge=0)

class CourseApplicationCreate(BaseModel):
    course_id: int

class CourseApplicationStatusUpdate(BaseModel):
    status: CourseApplicationAction

class CourseApplicationScoreUpdate(BaseModel):
    score: Optional[float] = Field(None, ge=0)

class CourseApplicationResponse(BaseModel):
    application_id: int
    student_id: int
    student_name: Optional[str] = None
    course_id: int
    course_name: Optional[str] = None
    institution_id: int
    institution_name: Optional[str] = None
    score: Optional[float] = None
    status: str
    applied_at: Optional[datetime] = None


# ============================================================
# ADMISSIONS SCHEMAS
# ============================================================

class AdmissionsRequest(BaseModel):
    institution_id: Optional[int] = None
    # Validated by the admissions service
    intake_limit: Optional[Any] = None

class AdmissionsResponse(BaseModel):
    admitted: int
    waiting: int


# ============================================================
# COMPANY / JOB SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    industry: Optional[str] = None
    description: Optional[str] = None

class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    requirements: str = ""
    qualifications: str = ""
    location: Optional[str] = None
    salary: Optional[str] = None
    job_type: JobType = JobType.full_time
    deadline: Optional[datetime] = None

class JobResponse(BaseModel):
    job_id: int
    company_id: int
    company_name: Optional[str] = None
    title: str
    description: Optional[str] = None
    requirements: str = ""
    qualifications: str = ""
    location: Optional[str] = None
    salary: Optional[str] = None
    job_type: str
    deadline: Optional[datetime] = None
    status: str
    created_at: Optional[datetime] = None

class JobApplicationCreate(BaseModel):
    cover_letter: Optional[str] = None

class JobApplicationStatusUpdate(BaseModel):
    status: JobApplicationStatus
    interview_date: Optional[datetime] = None
    interview_location: Optional[str] = None

class JobApplicationResponse(BaseModel):
    application_id: int
    student_id: int
    job_id: int
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    cover_letter: Optional[str] = None
    status: str
    applied_at: Optional[datetime] = None


# ============================================================
# MATCHING SCHEMAS
# ============================================================

class MatchResultResponse(BaseModel):
    candidate_id: Optional[Union[int, str]] = None
    score: int
    strengths: List[str] = []

class QualifiedCandidatesResponse(BaseModel):
    job_id: int
    threshold: int
    candidates: List[MatchResultResponse]
    total: int


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class OrganizationResponse(BaseModel):
    id: int
    name: str
    verified: bool
    status: str
    created_at: Optional[datetime] = None

class ReconcileResponse(BaseModel):
    updated: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class IdResponse(BaseModel):
    id: int
    message: str
