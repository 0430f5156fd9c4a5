"""
Pytest configuration for the career guidance portal tests.

PostgreSQL is replaced by an in-memory SQLite database built from the same
table definitions; MongoDB collections are MagicMocks.
"""
import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine, insert
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from careerguide.db.tables import metadata, users, institutions, courses, applications


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def mock_collection():
    """Fixture to create a mock student_profiles collection"""
    return MagicMock()


@pytest.fixture
def seed(engine):
    """Insert rows directly and return their primary keys."""

    def _insert(table, **values):
        with engine.begin() as conn:
            return conn.execute(insert(table).values(**values)).inserted_primary_key[0]

    return _insert


@pytest.fixture
def institution(seed):
    """An institute user owning one institution with one active course."""
    user_id = seed(users, email="admin@uni.test", password_hash="x", role="institute", full_name="Uni Admin")
    institution_id = seed(institutions, user_id=user_id, name="Limkokwing", verified=True, status="active")
    course_id = seed(courses, institution_id=institution_id, name="BSc Computing", seats_available=30)
    return {"user_id": user_id, "institution_id": institution_id, "course_id": course_id}


@pytest.fixture
def add_application(seed, institution):
    """Insert a course application for `institution`, one new student each time."""
    counter = {"n": 0}

    def _add(score=None, status="pending", **extra):
        counter["n"] += 1
        student_id = seed(
            users, email=f"student{counter['n']}@mail.test", password_hash="x",
            role="student", full_name=f"Student {counter['n']}"
        )
        values = dict(
            student_id=student_id,
            course_id=institution["course_id"],
            institution_id=institution["institution_id"],
            score=score,
            status=status,
        )
        values.update(extra)
        return seed(applications, **values)

    return _add
