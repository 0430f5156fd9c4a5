"""
Admissions Batch Service

PURPOSE:
Run an intake for one institution: rank its pending course applications by
their stored score, admit up to the intake limit and put the rest on the
waiting list.

HOW IT WORKS:
1. Check the caller is an admin or institute user (before any read)
2. Validate institution id and intake limit
3. In ONE transaction:
   a. Lock the institution's pending applications (SELECT ... FOR UPDATE)
   b. Sort by score, highest first (missing score = 0)
   c. First `capacity` -> admitted, rest -> waiting
   d. Update statuses
4. Commit, or roll back everything

WHY ONE TRANSACTION?
- Readers never see a half-admitted intake
- A failed run leaves every application pending, so a retry is safe
- A second run for the same institution waits on the row locks, then finds
  nothing pending. Runs for different institutions lock different rows.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from careerguide.core.config import get_settings
from careerguide.core.exceptions import (
    AdmissionsCommitError, AdmissionsValidationError,
    PermissionDeniedError, UnauthenticatedError
)
from careerguide.db.postgres import get_db_session
from careerguide.db.tables import applications
from careerguide.models.admissions import Application, ApplicationStatus, IntakeResult, IntakeTarget

logger = logging.getLogger(__name__)

ADMISSIONS_ROLES = {"admin", "institute"}


# ============================================================
# REQUEST CHECKS
# ============================================================

def authorize_admissions(principal: Optional[dict]) -> None:
    """Fail closed unless the principal is an admin or institute user."""
    if not principal:
        raise UnauthenticatedError("Request had no auth")
    if principal.get("role") not in ADMISSIONS_ROLES:
        raise PermissionDeniedError("Only admins or institutes can run admissions")


def coerce_intake_limit(value: Any) -> int:
    """
    Turn an intake limit into an int.

    Integral numbers and numeric strings are accepted. Negative values are
    kept; the planner treats them as zero seats.
    """
    if value is None:
        return get_settings().default_intake_limit
    if isinstance(value, bool):
        raise AdmissionsValidationError("intakeLimit must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise AdmissionsValidationError(f"intakeLimit must be a whole number, got {value!r}")


def validate_intake_request(institution_id: Any, intake_limit: Any = None) -> IntakeTarget:
    if institution_id is None or (isinstance(institution_id, str) and not institution_id.strip()):
        raise AdmissionsValidationError("institutionId required")
    return IntakeTarget(institution_id=institution_id, capacity=coerce_intake_limit(intake_limit))


# ============================================================
# PLANNING (pure)
# ============================================================

def plan_intake(capacity: int, candidates: Iterable[Application]) -> IntakeResult:
    """
    Partition pending applications into admitted and waiting.

    Non-pending entries are ignored and each id is used once. Ties on score
    keep input order, so a deterministic fetch order gives a deterministic
    intake.
    """
    seats = max(capacity, 0)

    pending = []
    seen = set()
    for application in candidates:
        if application.status != ApplicationStatus.pending or application.id in seen:
            continue
        seen.add(application.id)
        pending.append(application)

    ranked = sorted(pending, key=lambda a: a.rank_score, reverse=True)
    admitted, waiting = ranked[:seats], ranked[seats:]

    transitions = [(a.id, ApplicationStatus.admitted) for a in admitted]
    transitions += [(a.id, ApplicationStatus.waiting) for a in waiting]

    return IntakeResult(
        admitted_ids=frozenset(a.id for a in admitted),
        waiting_ids=frozenset(a.id for a in waiting),
        transitions=transitions,
    )


# ============================================================
# BATCH PROCESSOR
# ============================================================

class AdmissionsBatchProcessor:
    """
    Applies intake decisions to the applications table atomically.
    """

    def __init__(self, session_factory=None):
        self.session_factory = session_factory

    def run(self, principal: Optional[dict], institution_id: Any, intake_limit: Any = None) -> IntakeResult:
        """
        Entry point for the remote admissions call.

        Authorization first, then validation, then the intake itself.
        """
        authorize_admissions(principal)
        target = validate_intake_request(institution_id, intake_limit)
        logger.info(
            "User %s running admissions for institution %s (intake limit %d)",
            principal.get("user_id"), target.institution_id, target.capacity
        )
        return self.process_intake(target.institution_id, target.capacity)

    def process_intake(self, institution_id: Any, capacity: int) -> IntakeResult:
        """
        Admit up to `capacity` pending applications of one institution.

        Raises:
            AdmissionsCommitError: the transaction was rejected; nothing changed
        """
        try:
            with get_db_session(self.session_factory) as db:
                pending = self._fetch_pending(db, institution_id)
                result = plan_intake(capacity, pending)
                if not result.is_empty:
                    self._apply_transitions(db, institution_id, result)
        except AdmissionsCommitError:
            logger.exception("Admissions rolled back for institution %s", institution_id)
            raise
        except SQLAlchemyError as exc:
            logger.exception("Admissions commit failed for institution %s", institution_id)
            raise AdmissionsCommitError(institution_id, str(exc.__class__.__name__)) from exc

        logger.info(
            "Institution %s: %d admitted, %d waiting",
            institution_id, result.admitted, result.waiting
        )
        return result

    def _fetch_pending(self, db, institution_id) -> list:
        # Ordered fetch so score ties resolve the same way on every run
        stmt = (
            select(
                applications.c.id, applications.c.institution_id,
                applications.c.score, applications.c.status
            )
            .where(applications.c.institution_id == institution_id)
            .where(applications.c.status == ApplicationStatus.pending.value)
            .order_by(applications.c.applied_at, applications.c.id)
            .with_for_update()
        )
        rows = db.execute(stmt).mappings().all()
        return [Application.from_row(row) for row in rows]

    def _apply_transitions(self, db, institution_id, result: IntakeResult) -> None:
        for status, ids in (
            (ApplicationStatus.admitted, result.admitted_ids),
            (ApplicationStatus.waiting, result.waiting_ids),
        ):
            if not ids:
                continue
            updated = db.execute(
                update(applications)
                .where(applications.c.id.in_(sorted(ids)))
                .where(applications.c.status == ApplicationStatus.pending.value)
                .values(status=status.value)
            )
            if updated.rowcount != len(ids):
                # Raised inside the session block, so the whole run rolls back
                raise AdmissionsCommitError(
                    institution_id,
                    f"expected {len(ids)} {status.value} updates, applied {updated.rowcount}"
                )


def get_admissions_processor() -> AdmissionsBatchProcessor:
    """Get admissions processor instance."""
    return AdmissionsBatchProcessor()
