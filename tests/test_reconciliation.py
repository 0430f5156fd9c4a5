"""
Tests for the application name reconciliation pass.
"""
from sqlalchemy import select

from careerguide.db.tables import applications
from careerguide.services.reconciliation_service import NameReconciliationService


def names(engine, application_id):
    with engine.connect() as conn:
        return conn.execute(
            select(applications.c.student_name, applications.c.course_name, applications.c.institution_name)
            .where(applications.c.id == application_id)
        ).one()


def test_fills_missing_names_from_source_tables(engine, session_factory, add_application):
    application_id = add_application(score=50)

    updated = NameReconciliationService(session_factory).reconcile()

    assert updated == 1
    assert tuple(names(engine, application_id)) == ("Student 1", "BSc Computing", "Limkokwing")


def test_keeps_existing_names(engine, session_factory, add_application):
    application_id = add_application(student_name="Custom Name")

    NameReconciliationService(session_factory).reconcile()

    assert names(engine, application_id).student_name == "Custom Name"


def test_second_run_changes_nothing(engine, session_factory, add_application):
    ids = [add_application() for _ in range(3)]
    service = NameReconciliationService(session_factory)

    assert service.reconcile() == 3
    before = [tuple(names(engine, i)) for i in ids]

    assert service.reconcile() == 0
    assert [tuple(names(engine, i)) for i in ids] == before


def test_limited_to_one_institution(session_factory, institution, add_application):
    add_application()

    assert NameReconciliationService(session_factory).reconcile(institution_id=9999) == 0
    assert NameReconciliationService(session_factory).reconcile(institution_id=institution["institution_id"]) == 1
