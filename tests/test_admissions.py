"""
Tests for batch admissions: planning, the atomic intake and request checks.
"""
import logging

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from careerguide.core.exceptions import (
    AdmissionsCommitError, AdmissionsValidationError, PermissionDeniedError, UnauthenticatedError
)
from careerguide.db.tables import applications
from careerguide.models.admissions import Application, ApplicationStatus, IntakeTarget
from careerguide.services.admissions_service import (
    AdmissionsBatchProcessor, coerce_intake_limit, plan_intake, validate_intake_request
)

ADMIN = {"user_id": 1, "role": "admin"}


def statuses(engine):
    with engine.connect() as conn:
        rows = conn.execute(select(applications.c.id, applications.c.status).order_by(applications.c.id))
        return {row.id: row.status for row in rows}


# ============================================================
# PLANNING
# ============================================================

def test_plan_admits_top_scores():
    result = plan_intake(2, [
        Application(id="a90", institution_id="inst1", score=90),
        Application(id="a50", institution_id="inst1", score=50),
        Application(id="a70", institution_id="inst1", score=70),
    ])

    assert result.admitted_ids == {"a90", "a70"}
    assert result.waiting_ids == {"a50"}


def test_plan_with_zero_capacity_waits_everyone():
    result = plan_intake(0, [Application(id="a", institution_id="inst1", score=10)])

    assert result.admitted_ids == frozenset()
    assert result.waiting_ids == {"a"}


def test_plan_negative_capacity_is_zero_seats():
    result = plan_intake(-3, [Application(id="a", institution_id="inst1", score=10)])
    assert result.admitted == 0 and result.waiting == 1


def test_plan_ignores_non_pending_and_duplicates():
    result = plan_intake(5, [
        Application(id="a", institution_id="i", score=80),
        Application(id="a", institution_id="i", score=80),
        Application(id="b", institution_id="i", score=99, status=ApplicationStatus.admitted),
        Application(id="c", institution_id="i", score=99, status=ApplicationStatus.rejected),
    ])

    assert result.admitted_ids == {"a"}
    assert result.transitions == [("a", ApplicationStatus.admitted)]


def test_plan_missing_score_ranks_as_zero_and_ties_keep_order():
    result = plan_intake(2, [
        Application(id="none", institution_id="i", score=None),
        Application(id="first0", institution_id="i", score=0),
        Application(id="ten", institution_id="i", score=10),
    ])

    assert [t[0] for t in result.transitions] == ["ten", "none", "first0"]
    assert result.admitted_ids == {"ten", "none"}


def test_plan_partitions_candidates():
    candidates = [Application(id=i, institution_id="i", score=i % 7) for i in range(20)]

    result = plan_intake(6, candidates)

    assert result.admitted == 6
    assert result.admitted_ids.isdisjoint(result.waiting_ids)
    assert result.admitted_ids | result.waiting_ids == set(range(20))
    assert min(a.score for a in candidates if a.id in result.admitted_ids) >= \
        max(a.score for a in candidates if a.id in result.waiting_ids)


def test_plan_empty_input():
    result = plan_intake(30, [])
    assert result.is_empty and result.admitted == 0 and result.waiting == 0


# ============================================================
# BATCH PROCESSOR
# ============================================================

def test_process_intake_updates_statuses(engine, session_factory, institution, add_application):
    a90 = add_application(score=90)
    a50 = add_application(score=50)
    a70 = add_application(score=70)

    result = AdmissionsBatchProcessor(session_factory).process_intake(institution["institution_id"], 2)

    assert result.admitted_ids == {a90, a70}
    assert result.waiting_ids == {a50}
    assert statuses(engine) == {a90: "admitted", a50: "waiting", a70: "admitted"}


def test_rerun_is_a_no_op(engine, session_factory, institution, add_application):
    for score in (90, 50, 70):
        add_application(score=score)
    processor = AdmissionsBatchProcessor(session_factory)
    processor.process_intake(institution["institution_id"], 2)
    before = statuses(engine)

    second = processor.process_intake(institution["institution_id"], 2)

    assert second.admitted == 0 and second.waiting == 0
    assert statuses(engine) == before


def test_only_pending_applications_of_the_institution_change(
    engine, seed, session_factory, institution, add_application
):
    from careerguide.db.tables import courses, institutions

    other_inst = seed(institutions, name="Other College")
    other_course = seed(courses, institution_id=other_inst, name="Diploma")
    rejected = add_application(score=100, status="rejected")
    foreign = add_application(score=100, course_id=other_course, institution_id=other_inst)
    pending = add_application(score=40)

    result = AdmissionsBatchProcessor(session_factory).process_intake(institution["institution_id"], 5)

    assert result.admitted_ids == {pending}
    after = statuses(engine)
    assert after[rejected] == "rejected"
    assert after[foreign] == "pending"


def test_score_ties_break_by_submission_order(engine, session_factory, institution, add_application):
    first = add_application(score=75)
    second = add_application(score=75)

    result = AdmissionsBatchProcessor(session_factory).process_intake(institution["institution_id"], 1)

    assert result.admitted_ids == {first}
    assert result.waiting_ids == {second}


def test_unknown_institution_is_empty(session_factory, institution):
    result = AdmissionsBatchProcessor(session_factory).process_intake(9999, 30)
    assert result.is_empty


class FailingCommitSession(Session):
    def commit(self):
        raise OperationalError("COMMIT", {}, Exception("connection lost"))


def test_failed_commit_leaves_everything_pending(engine, institution, add_application):
    ids = [add_application(score=s) for s in (90, 50, 70)]
    failing = sessionmaker(bind=engine, class_=FailingCommitSession)

    with pytest.raises(AdmissionsCommitError) as excinfo:
        AdmissionsBatchProcessor(failing).process_intake(institution["institution_id"], 2)

    assert excinfo.value.retryable
    assert statuses(engine) == {i: "pending" for i in ids}


def test_row_leaving_pending_mid_run_rolls_back_everything(
    engine, session_factory, institution, add_application, caplog
):
    still_pending = add_application(score=50)
    now_rejected = add_application(score=90, status="rejected")
    processor = AdmissionsBatchProcessor(session_factory)
    # The rejected row is served as pending, as if it changed after being read
    processor._fetch_pending = lambda db, institution_id: [
        Application(id=still_pending, institution_id=institution_id, score=50),
        Application(id=now_rejected, institution_id=institution_id, score=90),
    ]

    with caplog.at_level(logging.ERROR, logger="careerguide.services.admissions_service"):
        with pytest.raises(AdmissionsCommitError):
            processor.process_intake(institution["institution_id"], 1)

    assert statuses(engine) == {still_pending: "pending", now_rejected: "rejected"}
    assert any("rolled back" in r.getMessage() for r in caplog.records)


# ============================================================
# REQUEST CHECKS
# ============================================================

def test_run_requires_auth(session_factory):
    with pytest.raises(UnauthenticatedError):
        AdmissionsBatchProcessor(session_factory).run(None, 1, 2)


@pytest.mark.parametrize("role", ["student", "company", None])
def test_run_rejects_other_roles(session_factory, role):
    with pytest.raises(PermissionDeniedError):
        AdmissionsBatchProcessor(session_factory).run({"user_id": 5, "role": role}, 1, 2)


def test_run_checks_role_before_validating(session_factory):
    # Missing institution id would be a validation error, but auth comes first
    with pytest.raises(PermissionDeniedError):
        AdmissionsBatchProcessor(session_factory).run({"user_id": 5, "role": "student"}, None, "abc")


def test_run_default_intake_limit(engine, session_factory, institution, add_application):
    for score in range(35):
        add_application(score=score)

    result = AdmissionsBatchProcessor(session_factory).run(ADMIN, institution["institution_id"])

    assert result.admitted == 30
    assert result.waiting == 5


@pytest.mark.parametrize("institution_id", [None, "", "   "])
def test_missing_institution_id(institution_id):
    with pytest.raises(AdmissionsValidationError):
        validate_intake_request(institution_id, 5)


@pytest.mark.parametrize("value,expected", [(None, 30), (5, 5), (5.0, 5), ("12", 12), (0, 0), (-1, -1)])
def test_coerce_intake_limit(value, expected):
    assert coerce_intake_limit(value) == expected


@pytest.mark.parametrize("value", ["abc", 2.5, True, [3], {}])
def test_coerce_intake_limit_rejects_non_integers(value):
    with pytest.raises(AdmissionsValidationError):
        coerce_intake_limit(value)


def test_valid_request_becomes_intake_target():
    target = validate_intake_request(7, "12")

    assert target == IntakeTarget(institution_id=7, capacity=12)
