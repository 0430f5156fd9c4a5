"""
Company Routes

POST /companies/profile - Create company profile
GET /companies/jobs - Get company's jobs
GET /companies/jobs/{job_id}/qualified-candidates - Rank students for a job
GET /companies/applications - Get job applications received
PUT /companies/applications/{id}/status - Update job application status
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text

from careerguide.db.postgres import get_db_session, execute_raw_sql
from careerguide.core.auth import get_current_user, get_current_company
from careerguide.core.config import get_settings
from careerguide.core.exceptions import ApplicationRejectedError
from careerguide.services.application_service import get_application_service
from careerguide.services.matching_service import get_matching_service
from careerguide.schemas.schemas import (
    CompanyCreate, JobResponse, JobApplicationResponse, JobApplicationStatusUpdate,
    MatchResultResponse, QualifiedCandidatesResponse, MessageResponse
)
from careerguide.api.routes.job_routes import JOB_COLUMNS, _job_response

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.post("/profile", response_model=MessageResponse, status_code=201)
async def create_profile(data: CompanyCreate, user: dict = Depends(get_current_user)):
    """Create company profile. User must be registered as company."""
    if user["role"] != "company":
        raise HTTPException(status_code=403, detail="Only company accounts can create company profiles")

    with get_db_session() as db:
        result = db.execute(
            text("SELECT id FROM companies WHERE user_id = :id"),
            {"id": user["user_id"]}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Profile already exists")

        db.execute(
            text("""
                INSERT INTO companies (user_id, name, industry, description, verified, status)
                VALUES (:user_id, :name, :industry, :description, FALSE, 'pending')
            """),
            {
                "user_id": user["user_id"],
                "name": data.name,
                "industry": data.industry,
                "description": data.description
            }
        )

    return MessageResponse(message="Company profile created successfully")


@router.get("/jobs", response_model=List[JobResponse])
async def get_company_jobs(
    status: Optional[str] = Query(None),
    company: dict = Depends(get_current_company)
):
    """Get all jobs posted by this company."""
    sql = f"SELECT {JOB_COLUMNS} FROM job_postings WHERE company_id = :cid"
    params = {"cid": company["company_id"]}

    if status:
        sql += " AND status = :status"
        params["status"] = status

    sql += " ORDER BY created_at DESC"
    return [_job_response(r) for r in execute_raw_sql(sql, params)]


@router.get("/jobs/{job_id}/qualified-candidates", response_model=QualifiedCandidatesResponse)
async def qualified_candidates(
    job_id: int,
    threshold: Optional[int] = Query(None, ge=0, le=100, description="Minimum match score"),
    company: dict = Depends(get_current_company)
):
    """
    Rank every student profile against one of this company's jobs.

    Score breakdown: academic record 30, certificates 25, work experience 25,
    skills named in the requirements 20. Default minimum is 60.
    """
    if threshold is None:
        threshold = get_settings().match_threshold

    ranked = get_matching_service().find_qualified_candidates(
        job_id, company_id=company["company_id"], threshold=threshold
    )
    if ranked is None:
        raise HTTPException(status_code=404, detail="Job not found")

    # Profiles without a student_id fall back to their Mongo ObjectId
    candidates = [
        MatchResultResponse(
            candidate_id=m.candidate_id if m.candidate_id is None or isinstance(m.candidate_id, int)
            else str(m.candidate_id),
            score=m.score,
            strengths=m.strengths
        )
        for m in ranked
    ]
    return QualifiedCandidatesResponse(
        job_id=job_id, threshold=threshold, candidates=candidates, total=len(candidates)
    )


@router.get("/applications", response_model=List[JobApplicationResponse])
async def get_applications(
    job_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    company: dict = Depends(get_current_company)
):
    """Get all applications for company's job postings."""
    sql = """
        SELECT id, student_id, job_id, job_title, company_name, cover_letter, status, applied_at
        FROM job_applications
        WHERE company_id = :cid
    """
    params = {"cid": company["company_id"]}

    if job_id:
        sql += " AND job_id = :jid"
        params["jid"] = job_id
    if status:
        sql += " AND status = :status"
        params["status"] = status

    sql += " ORDER BY applied_at DESC"
    results = execute_raw_sql(sql, params)

    return [
        JobApplicationResponse(
            application_id=r["id"], student_id=r["student_id"], job_id=r["job_id"],
            job_title=r["job_title"], company_name=r["company_name"],
            cover_letter=r["cover_letter"], status=r["status"], applied_at=r["applied_at"]
        ) for r in results
    ]


@router.put("/applications/{application_id}/status", response_model=MessageResponse)
async def update_application_status(
    application_id: int,
    update: JobApplicationStatusUpdate,
    company: dict = Depends(get_current_company)
):
    """Shortlist, schedule an interview, reject or hire an applicant."""
    try:
        updated = get_application_service().update_job_application_status(
            application_id, company["company_id"], update.status.value,
            interview_date=update.interview_date, interview_location=update.interview_location
        )
    except ApplicationRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not updated:
        raise HTTPException(status_code=404, detail="Application not found")

    return MessageResponse(message=f"Status updated to '{update.status.value}'")
