"""Course admission application records and intake run results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Tuple


class ApplicationStatus(str, Enum):
    pending = "pending"
    admitted = "admitted"
    waiting = "waiting"
    rejected = "rejected"
    waitlisted = "waitlisted"


@dataclass
class Application:
    id: Any
    institution_id: Any
    score: Optional[float] = None
    status: ApplicationStatus = ApplicationStatus.pending

    @property
    def rank_score(self) -> float:
        """Stored score, with a missing score counted as 0."""
        return self.score if self.score is not None else 0

    @classmethod
    def from_row(cls, row) -> "Application":
        score = row["score"]
        return cls(
            id=row["id"],
            institution_id=row["institution_id"],
            score=float(score) if score is not None else None,
            status=ApplicationStatus(row["status"]),
        )


@dataclass
class IntakeTarget:
    """One validated intake request: whose pending applications, how many seats."""
    institution_id: Any
    capacity: int


@dataclass
class IntakeResult:
    admitted_ids: FrozenSet[Any] = frozenset()
    waiting_ids: FrozenSet[Any] = frozenset()
    # (application id, new status) in rank order
    transitions: List[Tuple[Any, ApplicationStatus]] = field(default_factory=list)

    @property
    def admitted(self) -> int:
        return len(self.admitted_ids)

    @property
    def waiting(self) -> int:
        return len(self.waiting_ids)

    @property
    def is_empty(self) -> bool:
        return not self.transitions
