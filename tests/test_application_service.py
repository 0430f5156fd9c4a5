"""
Tests for course and job application rules.
"""
import pytest
from datetime import datetime
from unittest.mock import MagicMock
from sqlalchemy import select

from careerguide.core.exceptions import ApplicationRejectedError
from careerguide.db.tables import (
    applications, companies, courses, job_applications, job_postings, users
)
from careerguide.models.profile import AcademicRecord, CandidateProfile
from careerguide.schemas.schemas import CourseApplicationCreate
from careerguide.services.admissions_service import AdmissionsBatchProcessor
from careerguide.services.application_service import ApplicationService


@pytest.fixture
def service(session_factory):
    return ApplicationService(session_factory)


@pytest.fixture
def student(seed):
    return seed(users, email="thabo@mail.test", password_hash="x", role="student", full_name="Thabo M")


@pytest.fixture
def job(seed):
    user_id = seed(users, email="hr@acme.test", password_hash="x", role="company")
    company_id = seed(companies, user_id=user_id, name="Acme")
    job_id = seed(
        job_postings, company_id=company_id, company_name="Acme",
        title="Junior Developer", requirements="Python"
    )
    return {"company_id": company_id, "job_id": job_id}


GRADUATE = CandidateProfile(id=1, academic_records=[AcademicRecord(gpa="3.1")])


# ============================================================
# COURSE APPLICATIONS
# ============================================================

def test_apply_for_course_creates_unscored_pending_application(engine, service, student, institution):
    application_id = service.apply_for_course(student, institution["course_id"])

    with engine.connect() as conn:
        row = conn.execute(select(applications).where(applications.c.id == application_id)).mappings().one()
    assert row["status"] == "pending"
    assert row["institution_id"] == institution["institution_id"]
    assert row["score"] is None


def test_student_cannot_choose_own_score(service, student, institution):
    with pytest.raises(TypeError):
        service.apply_for_course(student, institution["course_id"], score=1e9)
    assert "score" not in CourseApplicationCreate.model_fields


def test_only_institute_score_affects_intake(seed, session_factory, service, institution, add_application):
    scored = add_application(score=95)
    newcomer = seed(users, email="late@mail.test", password_hash="x", role="student")
    unscored = service.apply_for_course(newcomer, institution["course_id"])

    result = AdmissionsBatchProcessor(session_factory).process_intake(institution["institution_id"], 1)

    assert result.admitted_ids == {scored}
    assert result.waiting_ids == {unscored}


def test_at_most_two_applications_per_institution(seed, service, student, institution):
    second_course = seed(courses, institution_id=institution["institution_id"], name="BA Design")
    third_course = seed(courses, institution_id=institution["institution_id"], name="BSc Tourism")

    service.apply_for_course(student, institution["course_id"])
    service.apply_for_course(student, second_course)

    with pytest.raises(ApplicationRejectedError):
        service.apply_for_course(student, third_course)


def test_application_limit_check_locks_the_student_row():
    db = MagicMock()
    db.execute.return_value.mappings.return_value.first.return_value = {
        "id": 3, "institution_id": 1, "status": "active"
    }
    db.execute.return_value.scalar_one.return_value = 0
    db.execute.return_value.inserted_primary_key = [11]

    assert ApplicationService(session_factory=lambda: db).apply_for_course(5, 3) == 11

    statements = [c.args[0] for c in db.execute.call_args_list]
    locked = [s for s in statements if getattr(s, "_for_update_arg", None) is not None]
    assert len(locked) == 1
    assert locked[0].get_final_froms()[0] is users
    # Lock is taken before counting existing applications
    assert statements.index(locked[0]) < 2


def test_inactive_or_unknown_course_is_rejected(seed, service, student, institution):
    closed = seed(courses, institution_id=institution["institution_id"], name="Old", status="closed")

    with pytest.raises(ApplicationRejectedError):
        service.apply_for_course(student, closed)
    with pytest.raises(ApplicationRejectedError):
        service.apply_for_course(student, 9999)


def test_manual_status_and_score_updates(engine, service, student, institution):
    application_id = service.apply_for_course(student, institution["course_id"])

    assert service.update_course_application_status(application_id, institution["institution_id"], "waitlisted")
    assert service.set_course_application_score(application_id, institution["institution_id"], 88)
    # Another institution cannot touch it
    assert not service.update_course_application_status(application_id, 9999, "admitted")

    with engine.connect() as conn:
        row = conn.execute(select(applications).where(applications.c.id == application_id)).mappings().one()
    assert row["status"] == "waitlisted"
    assert row["score"] == 88


# ============================================================
# JOB APPLICATIONS
# ============================================================

def test_job_application_requires_academic_record(service, student, job):
    with pytest.raises(ApplicationRejectedError):
        service.apply_for_job(CandidateProfile(id=1, skills=["Python"]), student, job["job_id"])
    with pytest.raises(ApplicationRejectedError):
        service.apply_for_job(None, student, job["job_id"])


def test_job_application_copies_job_details(engine, service, student, job):
    application_id = service.apply_for_job(GRADUATE, student, job["job_id"], cover_letter="Hello")

    with engine.connect() as conn:
        row = conn.execute(
            select(job_applications).where(job_applications.c.id == application_id)
        ).mappings().one()
    assert row["company_id"] == job["company_id"]
    assert row["job_title"] == "Junior Developer"
    assert row["status"] == "pending"


def test_duplicate_job_application_is_rejected(service, student, job):
    service.apply_for_job(GRADUATE, student, job["job_id"])

    with pytest.raises(ApplicationRejectedError):
        service.apply_for_job(GRADUATE, student, job["job_id"])


def test_interview_needs_date_and_location(service, student, job):
    application_id = service.apply_for_job(GRADUATE, student, job["job_id"])

    with pytest.raises(ApplicationRejectedError):
        service.update_job_application_status(application_id, job["company_id"], "interview_scheduled")

    assert service.update_job_application_status(
        application_id, job["company_id"], "interview_scheduled",
        interview_date=datetime(2025, 3, 1, 10, 0), interview_location="Maseru office"
    )


def test_unknown_job_status_is_rejected(service, student, job):
    application_id = service.apply_for_job(GRADUATE, student, job["job_id"])

    with pytest.raises(ApplicationRejectedError):
        service.update_job_application_status(application_id, job["company_id"], "ghosted")
    assert not service.update_job_application_status(application_id, job["company_id"] + 1, "hired")
