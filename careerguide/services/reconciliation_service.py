"""
Application name reconciliation.

Course applications carry denormalized display names (student, course,
institution). Older rows can be missing them. This pass fills every missing
name from the source tables in one transaction. Rows that are already
complete are left alone, so running it twice changes nothing the second time.
"""

import logging
from typing import Optional

from sqlalchemy import or_, select, update

from careerguide.db.postgres import get_db_session
from careerguide.db.tables import applications, courses, institutions, users

logger = logging.getLogger(__name__)


def _fallback(label: str, entity_id) -> str:
    return f"{label} {str(entity_id)[:8] if entity_id is not None else 'N/A'}"


class NameReconciliationService:

    def __init__(self, session_factory=None):
        self.session_factory = session_factory

    def reconcile(self, institution_id: Optional[int] = None) -> int:
        """
        Fill missing names on course applications.

        Args:
            institution_id: Limit the pass to one institution

        Returns:
            Number of applications updated
        """
        stmt = (
            select(
                applications.c.id,
                applications.c.student_id,
                applications.c.course_id,
                applications.c.institution_id,
                applications.c.student_name,
                applications.c.course_name,
                applications.c.institution_name,
                users.c.full_name.label("source_student_name"),
                courses.c.name.label("source_course_name"),
                institutions.c.name.label("source_institution_name"),
            )
            .select_from(
                applications
                .outerjoin(users, applications.c.student_id == users.c.id)
                .outerjoin(courses, applications.c.course_id == courses.c.id)
                .outerjoin(institutions, applications.c.institution_id == institutions.c.id)
            )
            .where(or_(
                applications.c.student_name.is_(None),
                applications.c.course_name.is_(None),
                applications.c.institution_name.is_(None),
            ))
        )
        if institution_id is not None:
            stmt = stmt.where(applications.c.institution_id == institution_id)

        updated = 0
        with get_db_session(self.session_factory) as db:
            for row in db.execute(stmt).mappings().all():
                db.execute(
                    update(applications)
                    .where(applications.c.id == row["id"])
                    .values(
                        student_name=row["student_name"] or row["source_student_name"]
                        or _fallback("Student", row["student_id"]),
                        course_name=row["course_name"] or row["source_course_name"]
                        or _fallback("Course", row["course_id"]),
                        institution_name=row["institution_name"] or row["source_institution_name"]
                        or _fallback("Institution", row["institution_id"]),
                    )
                )
                updated += 1

        logger.info("Reconciled names on %d applications", updated)
        return updated


def get_reconciliation_service() -> NameReconciliationService:
    return NameReconciliationService()
