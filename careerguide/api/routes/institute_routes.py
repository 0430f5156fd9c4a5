"""
Institute Routes

POST /institutes/profile - Create institution profile
POST /institutes/courses - Add course
GET /institutes/courses - Get own courses
GET /institutes/courses/available - List active courses (any user)
GET /institutes/applications - Get course applications received
PUT /institutes/applications/{id}/status - Admit / reject / waitlist one application
PUT /institutes/applications/{id}/score - Set an application's ranking score
POST /institutes/applications/reconcile-names - Fill missing display names
POST /institutes/admissions/process - Run batch admissions (admin or institute)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text

from careerguide.db.postgres import get_db_session, execute_raw_sql
from careerguide.core.auth import get_current_user, get_current_institute, require_roles
from careerguide.core.exceptions import (
    AdmissionsCommitError, AdmissionsValidationError, AuthorizationError, UnauthenticatedError
)
from careerguide.services.admissions_service import get_admissions_processor
from careerguide.services.application_service import get_application_service
from careerguide.services.reconciliation_service import get_reconciliation_service
from careerguide.schemas.schemas import (
    InstitutionCreate, CourseCreate, CourseApplicationResponse, CourseApplicationStatusUpdate,
    CourseApplicationScoreUpdate, AdmissionsRequest, AdmissionsResponse, ReconcileResponse, MessageResponse
)

router = APIRouter(prefix="/institutes", tags=["Institutes"])
logger = logging.getLogger(__name__)


@router.post("/profile", response_model=MessageResponse, status_code=201)
async def create_profile(data: InstitutionCreate, user: dict = Depends(get_current_user)):
    """Create institution profile. User must be registered as institute."""
    if user["role"] != "institute":
        raise HTTPException(status_code=403, detail="Only institute accounts can create institution profiles")

    with get_db_session() as db:
        result = db.execute(
            text("SELECT id FROM institutions WHERE user_id = :id"),
            {"id": user["user_id"]}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Profile already exists")

        db.execute(
            text("""
                INSERT INTO institutions (user_id, name, description, location, verified, status)
                VALUES (:user_id, :name, :description, :location, FALSE, 'pending')
            """),
            {
                "user_id": user["user_id"],
                "name": data.name,
                "description": data.description,
                "location": data.location
            }
        )

    return MessageResponse(message="Institution profile created successfully")


@router.post("/courses", response_model=MessageResponse, status_code=201)
async def add_course(data: CourseCreate, institute: dict = Depends(get_current_institute)):
    with get_db_session() as db:
        db.execute(
            text("""
                INSERT INTO courses (institution_id, name, description, requirements, duration,
                    seats_available, status)
                VALUES (:iid, :name, :description, :requirements, :duration, :seats, 'active')
            """),
            {
                "iid": institute["institution_id"], "name": data.name, "description": data.description,
                "requirements": data.requirements, "duration": data.duration,
                "seats": data.seats_available
            }
        )

    return MessageResponse(message=f"Course '{data.name}' added")


@router.get("/courses")
async def get_courses(institute: dict = Depends(get_current_institute)):
    """Get this institution's courses."""
    return execute_raw_sql("""
        SELECT id, name, description, requirements, duration, seats_available, status, created_at
        FROM courses WHERE institution_id = :iid ORDER BY created_at DESC
    """, {"iid": institute["institution_id"]})


@router.get("/courses/available")
async def get_available_courses(user: dict = Depends(get_current_user)):
    """List active courses across institutions."""
    return execute_raw_sql("""
        SELECT c.id, c.name, c.description, c.requirements, c.duration, c.seats_available,
               c.institution_id, i.name AS institution_name
        FROM courses c JOIN institutions i ON c.institution_id = i.id
        WHERE c.status = 'active' ORDER BY i.name, c.name
    """)


@router.get("/applications", response_model=List[CourseApplicationResponse])
async def get_applications(
    status: Optional[str] = Query(None),
    institute: dict = Depends(get_current_institute)
):
    """Get course applications, with display names joined at read time."""
    sql = """
        SELECT a.id, a.student_id, COALESCE(u.full_name, a.student_name) AS student_name,
               a.course_id, COALESCE(c.name, a.course_name) AS course_name,
               a.institution_id, COALESCE(i.name, a.institution_name) AS institution_name,
               a.score, a.status, a.applied_at
        FROM applications a
        LEFT JOIN users u ON a.student_id = u.id
        LEFT JOIN courses c ON a.course_id = c.id
        LEFT JOIN institutions i ON a.institution_id = i.id
        WHERE a.institution_id = :iid
    """
    params = {"iid": institute["institution_id"]}

    if status:
        sql += " AND a.status = :status"
        params["status"] = status

    sql += " ORDER BY a.applied_at, a.id"
    results = execute_raw_sql(sql, params)

    return [
        CourseApplicationResponse(
            application_id=r["id"], student_id=r["student_id"], student_name=r["student_name"],
            course_id=r["course_id"], course_name=r["course_name"],
            institution_id=r["institution_id"], institution_name=r["institution_name"],
            score=r["score"], status=r["status"], applied_at=r["applied_at"]
        ) for r in results
    ]


@router.put("/applications/{application_id}/status", response_model=MessageResponse)
async def update_application_status(
    application_id: int,
    update: CourseApplicationStatusUpdate,
    institute: dict = Depends(get_current_institute)
):
    updated = get_application_service().update_course_application_status(
        application_id, institute["institution_id"], update.status.value
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Application not found")

    return MessageResponse(message=f"Status updated to '{update.status.value}'")


@router.put("/applications/{application_id}/score", response_model=MessageResponse)
async def update_application_score(
    application_id: int,
    update: CourseApplicationScoreUpdate,
    institute: dict = Depends(get_current_institute)
):
    """Set the stored score batch admissions ranks by."""
    updated = get_application_service().set_course_application_score(
        application_id, institute["institution_id"], update.score
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Application not found")

    return MessageResponse(message="Score updated")


@router.post("/applications/reconcile-names", response_model=ReconcileResponse)
async def reconcile_names(institute: dict = Depends(get_current_institute)):
    """Fill missing student/course/institution names on this institution's applications."""
    updated = get_reconciliation_service().reconcile(institution_id=institute["institution_id"])
    return ReconcileResponse(updated=updated)


def _owned_institution_id(user_id: int) -> Optional[int]:
    results = execute_raw_sql("SELECT id FROM institutions WHERE user_id = :uid", {"uid": user_id})
    return results[0]["id"] if results else None


@router.post("/admissions/process", response_model=AdmissionsResponse)
async def process_admissions(
    request: AdmissionsRequest,
    user: dict = Depends(require_roles("admin", "institute"))
):
    """
    Run batch admissions for one institution.

    Pending applications are ranked by score; the top `intake_limit`
    (default 30) are admitted and the rest go on the waiting list. All status
    changes are committed together. A 409 means nothing changed and the
    request can be retried.
    """
    # Institute accounts may only run their own intake
    if user["role"] == "institute" and request.institution_id is not None:
        if _owned_institution_id(user["user_id"]) != request.institution_id:
            raise HTTPException(status_code=403, detail="Institutes can only run their own admissions")

    processor = get_admissions_processor()
    try:
        result = processor.run(user, request.institution_id, request.intake_limit)
    except UnauthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except AdmissionsValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AdmissionsCommitError as e:
        logger.warning("Admissions commit failed for institution %s: %s", e.institution_id, e.reason)
        raise HTTPException(status_code=409, detail=f"{e}. Please retry.")

    return AdmissionsResponse(admitted=result.admitted, waiting=result.waiting)
