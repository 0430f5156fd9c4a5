"""
Student Routes

POST /students/profile - Create student profile
GET /students/profile - Get own profile with completion
POST /students/academic-records - Add academic record
POST /students/certificates - Add certificate
POST /students/work-experience - Add work experience
POST /students/skills - Add skill
DELETE /students/skills/{skill} - Remove skill
GET /students/resume - Get resume data (requires 50% completion)
POST /students/course-applications - Apply to a course
GET /students/course-applications - Get my course applications
GET /students/job-applications - Get my job applications
"""

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, HTTPException, Depends

from careerguide.core.config import get_settings
from careerguide.db.postgres import execute_raw_sql
from careerguide.core.auth import get_current_student
from careerguide.core.exceptions import ApplicationRejectedError, ProfileNotFoundError
from careerguide.services.application_service import get_application_service
from careerguide.services.completion_service import (
    profile_completion, can_generate_resume, can_apply_for_job
)
from careerguide.services.profile_service import get_profile_service
from careerguide.schemas.schemas import (
    AcademicRecordCreate, CertificateCreate, WorkExperienceCreate, SkillAdd,
    StudentProfileResponse, CourseApplicationCreate, CourseApplicationResponse,
    JobApplicationResponse, IdResponse, MessageResponse
)

router = APIRouter(prefix="/students", tags=["Students"])


def _load_profile(student_id: int):
    profile = get_profile_service().get_profile(student_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Student profile not found. Create profile first.")
    return profile


@router.post("/profile", response_model=MessageResponse, status_code=201)
async def create_profile(student: dict = Depends(get_current_student)):
    """Create an empty student profile document."""
    if not get_profile_service().create_profile(student["student_id"]):
        raise HTTPException(status_code=400, detail="Profile already exists")

    return MessageResponse(message="Student profile created successfully")


@router.get("/profile", response_model=StudentProfileResponse)
async def get_profile(student: dict = Depends(get_current_student)):
    """Get current student's profile with completion percentage and gates."""
    profile = _load_profile(student["student_id"])

    return StudentProfileResponse(
        student_id=student["student_id"],
        academic_records=[asdict(r) for r in profile.academic_records],
        certificates=[asdict(c) for c in profile.certificates],
        work_experience=[asdict(w) for w in profile.work_experience],
        skills=profile.skills,
        completion=profile_completion(profile),
        can_generate_resume=can_generate_resume(profile),
        can_apply_for_jobs=can_apply_for_job(profile)
    )


@router.post("/academic-records", response_model=MessageResponse, status_code=201)
async def add_academic_record(data: AcademicRecordCreate, student: dict = Depends(get_current_student)):
    try:
        get_profile_service().add_academic_record(
            student["student_id"], data.institution_name, data.year, gpa=data.gpa, program=data.program
        )
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return MessageResponse(message="Academic record added")


@router.post("/certificates", response_model=MessageResponse, status_code=201)
async def add_certificate(data: CertificateCreate, student: dict = Depends(get_current_student)):
    try:
        get_profile_service().add_certificate(
            student["student_id"], data.name, data.issuer, date=data.date, description=data.description
        )
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return MessageResponse(message="Certificate added")


@router.post("/work-experience", response_model=MessageResponse, status_code=201)
async def add_work_experience(data: WorkExperienceCreate, student: dict = Depends(get_current_student)):
    try:
        get_profile_service().add_work_experience(
            student["student_id"], data.company, data.position, data.duration,
            description=data.description, reference_contact=data.reference_contact
        )
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return MessageResponse(message="Work experience added")


@router.post("/skills", response_model=MessageResponse)
async def add_skill(data: SkillAdd, student: dict = Depends(get_current_student)):
    """Add a skill. Skills are unique ignoring case."""
    try:
        added = get_profile_service().add_skill(student["student_id"], data.skill)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not added:
        return MessageResponse(message=f"Skill '{data.skill}' already in profile", success=False)
    return MessageResponse(message=f"Skill '{data.skill}' added")


@router.delete("/skills/{skill}", response_model=MessageResponse)
async def remove_skill(skill: str, student: dict = Depends(get_current_student)):
    """Remove a skill from profile."""
    try:
        removed = get_profile_service().remove_skill(student["student_id"], skill)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not removed:
        raise HTTPException(status_code=404, detail="Skill not found in profile")
    return MessageResponse(message="Skill removed")


@router.get("/resume")
async def get_resume_data(student: dict = Depends(get_current_student)):
    """
    Get the data a resume is generated from.

    Rendering happens client side; this only enforces the completion gate.
    """
    profile = _load_profile(student["student_id"])
    completion = profile_completion(profile)

    if not can_generate_resume(profile):
        raise HTTPException(
            status_code=400,
            detail=(
                f"Complete at least {get_settings().resume_completion_threshold}% of your profile "
                f"to generate a resume (currently {completion}%)"
            )
        )

    return {
        "full_name": student.get("full_name"),
        "email": student["email"],
        "completion": completion,
        "academic_records": [asdict(r) for r in profile.academic_records],
        "certificates": [asdict(c) for c in profile.certificates],
        "work_experience": [asdict(w) for w in profile.work_experience],
        "skills": profile.skills,
    }


@router.post("/course-applications", response_model=IdResponse, status_code=201)
async def apply_for_course(data: CourseApplicationCreate, student: dict = Depends(get_current_student)):
    """Apply to a course. At most 2 applications per institution."""
    try:
        application_id = get_application_service().apply_for_course(
            student["student_id"], data.course_id
        )
    except ApplicationRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return IdResponse(id=application_id, message="Course application submitted")


@router.get("/course-applications", response_model=List[CourseApplicationResponse])
async def get_my_course_applications(student: dict = Depends(get_current_student)):
    """Get all course applications, names joined at read time."""
    results = execute_raw_sql("""
        SELECT a.id, a.student_id, u.full_name, a.course_id, c.name AS course_name,
               a.institution_id, i.name AS institution_name, a.score, a.status, a.applied_at
        FROM applications a
        JOIN users u ON a.student_id = u.id
        JOIN courses c ON a.course_id = c.id
        JOIN institutions i ON a.institution_id = i.id
        WHERE a.student_id = :id ORDER BY a.applied_at DESC
    """, {"id": student["student_id"]})

    return [
        CourseApplicationResponse(
            application_id=r["id"], student_id=r["student_id"], student_name=r["full_name"],
            course_id=r["course_id"], course_name=r["course_name"],
            institution_id=r["institution_id"], institution_name=r["institution_name"],
            score=r["score"], status=r["status"], applied_at=r["applied_at"]
        ) for r in results
    ]


@router.get("/job-applications", response_model=List[JobApplicationResponse])
async def get_my_job_applications(student: dict = Depends(get_current_student)):
    """Get all job applications, most recent first."""
    results = execute_raw_sql("""
        SELECT id, student_id, job_id, job_title, company_name, cover_letter, status, applied_at
        FROM job_applications
        WHERE student_id = :id ORDER BY applied_at DESC
    """, {"id": student["student_id"]})

    return [
        JobApplicationResponse(
            application_id=r["id"], student_id=r["student_id"], job_id=r["job_id"],
            job_title=r["job_title"], company_name=r["company_name"],
            cover_letter=r["cover_letter"], status=r["status"], applied_at=r["applied_at"]
        ) for r in results
    ]
