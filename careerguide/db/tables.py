"""
PostgreSQL table definitions (SQLAlchemy Core).

Relational records live here:
- users           - accounts with a role (student/institute/company/admin)
- institutions    - learning institutions, owned by an institute user
- companies       - employers, owned by a company user
- courses         - programmes an institution offers
- applications    - course admission applications (batch admissions target)
- job_postings    - jobs posted by companies
- job_applications - student applications to jobs

Student profiles are documents and live in MongoDB (see db/mongodb.py).
"""

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, MetaData,
    String, Table, Text, func
)

metadata = MetaData()

users = Table(
    "users", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("full_name", String(200)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, server_default=func.now()),
)

institutions = Table(
    "institutions", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id")),
    Column("name", String(200), nullable=False),
    Column("description", Text),
    Column("location", String(200)),
    Column("verified", Boolean, nullable=False, default=False),
    Column("status", String(20), nullable=False, default="pending"),
    Column("created_at", DateTime, server_default=func.now()),
)

companies = Table(
    "companies", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id")),
    Column("name", String(200), nullable=False),
    Column("industry", String(100)),
    Column("description", Text),
    Column("verified", Boolean, nullable=False, default=False),
    Column("status", String(20), nullable=False, default="pending"),
    Column("created_at", DateTime, server_default=func.now()),
)

courses = Table(
    "courses", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("institution_id", Integer, ForeignKey("institutions.id"), nullable=False),
    Column("name", String(200), nullable=False),
    Column("description", Text),
    Column("requirements", Text),
    Column("duration", String(50)),
    Column("seats_available", Integer, nullable=False, default=0),
    Column("status", String(20), nullable=False, default="active"),
    Column("created_at", DateTime, server_default=func.now()),
)

applications = Table(
    "applications", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("student_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("course_id", Integer, ForeignKey("courses.id"), nullable=False),
    Column("institution_id", Integer, ForeignKey("institutions.id"), nullable=False),
    Column("score", Float),
    Column("status", String(20), nullable=False, default="pending"),
    # Denormalized display names, filled by the reconciliation pass
    Column("student_name", String(200)),
    Column("course_name", String(200)),
    Column("institution_name", String(200)),
    Column("applied_at", DateTime, server_default=func.now()),
    Column("updated_at", DateTime, server_default=func.now()),
    Index("ix_applications_institution_status", "institution_id", "status"),
)

job_postings = Table(
    "job_postings", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("company_id", Integer, ForeignKey("companies.id"), nullable=False),
    Column("company_name", String(200)),
    Column("title", String(200), nullable=False),
    Column("description", Text),
    Column("requirements", Text, nullable=False, default=""),
    Column("qualifications", Text, nullable=False, default=""),
    Column("location", String(200)),
    Column("salary", String(100)),
    Column("job_type", String(20), nullable=False, default="full-time"),
    Column("deadline", DateTime),
    Column("status", String(20), nullable=False, default="active"),
    Column("created_at", DateTime, server_default=func.now()),
    Column("updated_at", DateTime, server_default=func.now()),
)

job_applications = Table(
    "job_applications", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("student_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("job_id", Integer, ForeignKey("job_postings.id"), nullable=False),
    Column("company_id", Integer, ForeignKey("companies.id"), nullable=False),
    Column("job_title", String(200)),
    Column("company_name", String(200)),
    Column("cover_letter", Text),
    Column("status", String(30), nullable=False, default="pending"),
    Column("interview_date", DateTime),
    Column("interview_location", String(200)),
    Column("applied_at", DateTime, server_default=func.now()),
    Column("updated_at", DateTime, server_default=func.now()),
)
