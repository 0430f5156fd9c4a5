"""
Job Routes

POST /jobs - Create job posting (company only)
GET /jobs - List active jobs
GET /jobs/{job_id} - Get job details
POST /jobs/{job_id}/apply - Apply to job (student only)
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import insert

from careerguide.db.postgres import get_db_session, execute_raw_sql
from careerguide.db.tables import job_postings
from careerguide.core.auth import get_current_student, get_current_company
from careerguide.core.exceptions import ApplicationRejectedError
from careerguide.services.application_service import get_application_service
from careerguide.services.profile_service import get_profile_service
from careerguide.schemas.schemas import (
    JobCreate, JobResponse, JobApplicationCreate, IdResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

JOB_COLUMNS = """
    id, company_id, company_name, title, description, requirements, qualifications,
    location, salary, job_type, deadline, status, created_at
"""


def _job_response(r: dict) -> JobResponse:
    return JobResponse(
        job_id=r["id"], company_id=r["company_id"], company_name=r["company_name"],
        title=r["title"], description=r["description"],
        requirements=r["requirements"] or "", qualifications=r["qualifications"] or "",
        location=r["location"], salary=r["salary"], job_type=r["job_type"],
        deadline=r["deadline"], status=r["status"], created_at=r["created_at"]
    )


@router.post("", response_model=IdResponse, status_code=201)
async def create_job(job: JobCreate, company: dict = Depends(get_current_company)):
    """Create a new job posting. Only companies can create jobs."""
    with get_db_session() as db:
        result = db.execute(
            insert(job_postings).values(
                company_id=company["company_id"],
                company_name=company["company_name"],
                title=job.title,
                description=job.description,
                requirements=job.requirements,
                qualifications=job.qualifications,
                location=job.location,
                salary=job.salary,
                job_type=job.job_type.value,
                deadline=job.deadline,
                status="active"
            )
        )
        job_id = result.inserted_primary_key[0]

    return IdResponse(id=job_id, message="Job posted successfully")


@router.get("", response_model=List[JobResponse])
async def list_jobs(job_type: Optional[str] = Query(None)):
    """List all active job postings."""
    sql = f"SELECT {JOB_COLUMNS} FROM job_postings WHERE status = 'active'"
    params = {}

    if job_type:
        sql += " AND job_type = :job_type"
        params["job_type"] = job_type

    sql += " ORDER BY created_at DESC"
    return [_job_response(r) for r in execute_raw_sql(sql, params)]


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int):
    """Get details of a specific job."""
    results = execute_raw_sql(f"SELECT {JOB_COLUMNS} FROM job_postings WHERE id = :jid", {"jid": job_id})

    if not results:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_response(results[0])


@router.post("/{job_id}/apply", response_model=IdResponse, status_code=201)
async def apply_to_job(
    job_id: int,
    application: JobApplicationCreate,
    student: dict = Depends(get_current_student)
):
    """
    Apply to a job.

    Requires at least one academic record in the student's profile.
    """
    profile = get_profile_service().get_profile(student["student_id"])

    try:
        application_id = get_application_service().apply_for_job(
            profile, student["student_id"], job_id, cover_letter=application.cover_letter or ""
        )
    except ApplicationRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return IdResponse(id=application_id, message="Job application submitted successfully")
