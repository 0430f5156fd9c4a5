"""
Application Service - course and job applications.

Course applications (institution side):
- A student may apply to at most 2 courses per institution
- New applications start as 'pending' and wait for an intake run
- Institutes can admit/reject/waitlist one application by hand and set its score

Job applications (company side):
- The student's profile must hold at least one academic record
- One application per student per job
- Companies move them through shortlisted / interview_scheduled / rejected / hired
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, insert, select, update

from careerguide.core.config import get_settings
from careerguide.core.exceptions import ApplicationRejectedError
from careerguide.db.postgres import get_db_session
from careerguide.db.tables import applications, courses, job_applications, job_postings, users
from careerguide.models.admissions import ApplicationStatus
from careerguide.models.profile import CandidateProfile
from careerguide.services.completion_service import can_apply_for_job

logger = logging.getLogger(__name__)

JOB_APPLICATION_STATUSES = {"pending", "shortlisted", "interview_scheduled", "rejected", "hired"}


class ApplicationService:
    """
    Creates and updates course and job applications in PostgreSQL.
    """

    def __init__(self, session_factory=None):
        self.session_factory = session_factory

    # ============================================================
    # COURSE APPLICATIONS
    # ============================================================

    def apply_for_course(self, student_id: int, course_id: int) -> int:
        """
        Submit a course application.

        The score starts empty; only the institution sets it.

        Returns:
            New application id
        """
        limit = get_settings().max_course_applications_per_institution

        with get_db_session(self.session_factory) as db:
            course = db.execute(
                select(courses.c.id, courses.c.institution_id, courses.c.status)
                .where(courses.c.id == course_id)
            ).mappings().first()
            if not course or course["status"] != "active":
                raise ApplicationRejectedError("Course not found or not accepting applications")

            # Serializes concurrent applications by the same student until commit
            db.execute(select(users.c.id).where(users.c.id == student_id).with_for_update())

            existing = db.execute(
                select(func.count())
                .select_from(applications)
                .where(applications.c.student_id == student_id)
                .where(applications.c.institution_id == course["institution_id"])
            ).scalar_one()
            if existing >= limit:
                raise ApplicationRejectedError(
                    f"Maximum {limit} applications per institution allowed"
                )

            result = db.execute(
                insert(applications).values(
                    student_id=student_id,
                    course_id=course_id,
                    institution_id=course["institution_id"],
                    status=ApplicationStatus.pending.value,
                )
            )
            application_id = result.inserted_primary_key[0]

        logger.info("Student %s applied to course %s (application %s)", student_id, course_id, application_id)
        return application_id

    def update_course_application_status(
        self, application_id: int, institution_id: int, status: ApplicationStatus
    ) -> bool:
        """Manually set one application's status. False if not found."""
        with get_db_session(self.session_factory) as db:
            result = db.execute(
                update(applications)
                .where(applications.c.id == application_id)
                .where(applications.c.institution_id == institution_id)
                .values(status=ApplicationStatus(status).value, updated_at=func.now())
            )
            return result.rowcount > 0

    def set_course_application_score(self, application_id: int, institution_id: int, score: Optional[float]) -> bool:
        with get_db_session(self.session_factory) as db:
            result = db.execute(
                update(applications)
                .where(applications.c.id == application_id)
                .where(applications.c.institution_id == institution_id)
                .values(score=score, updated_at=func.now())
            )
            return result.rowcount > 0

    # ============================================================
    # JOB APPLICATIONS
    # ============================================================

    def apply_for_job(
        self,
        profile: Optional[CandidateProfile],
        student_id: int,
        job_id: int,
        cover_letter: str = ""
    ) -> int:
        """
        Submit a job application.

        Returns:
            New job application id
        """
        if not can_apply_for_job(profile):
            raise ApplicationRejectedError("Add at least one academic record before applying for jobs")

        with get_db_session(self.session_factory) as db:
            job = db.execute(
                select(
                    job_postings.c.id, job_postings.c.company_id, job_postings.c.title,
                    job_postings.c.company_name, job_postings.c.status
                ).where(job_postings.c.id == job_id)
            ).mappings().first()
            if not job or job["status"] != "active":
                raise ApplicationRejectedError("Job posting not found")

            duplicate = db.execute(
                select(job_applications.c.id)
                .where(job_applications.c.student_id == student_id)
                .where(job_applications.c.job_id == job_id)
            ).first()
            if duplicate:
                raise ApplicationRejectedError("You have already applied for this job")

            result = db.execute(
                insert(job_applications).values(
                    student_id=student_id,
                    job_id=job_id,
                    company_id=job["company_id"],
                    job_title=job["title"],
                    company_name=job["company_name"],
                    cover_letter=cover_letter or "",
                    status="pending",
                )
            )
            application_id = result.inserted_primary_key[0]

        logger.info("Student %s applied to job %s (application %s)", student_id, job_id, application_id)
        return application_id

    def update_job_application_status(
        self,
        application_id: int,
        company_id: int,
        status: str,
        interview_date: Optional[datetime] = None,
        interview_location: Optional[str] = None
    ) -> bool:
        """Move a job application along. False if not found for this company."""
        if status not in JOB_APPLICATION_STATUSES:
            raise ApplicationRejectedError(f"Unknown job application status '{status}'")
        if status == "interview_scheduled" and not (interview_date and interview_location):
            raise ApplicationRejectedError("Interview date and location are required")

        values = {"status": status, "updated_at": func.now()}
        if status == "interview_scheduled":
            values["interview_date"] = interview_date
            values["interview_location"] = interview_location

        with get_db_session(self.session_factory) as db:
            result = db.execute(
                update(job_applications)
                .where(job_applications.c.id == application_id)
                .where(job_applications.c.company_id == company_id)
                .values(**values)
            )
            return result.rowcount > 0


def get_application_service() -> ApplicationService:
    """Get application service instance."""
    return ApplicationService()
