"""
Candidate Matching Service

PURPOSE:
Rank stored student profiles against a company's job posting.

HOW IT WORKS:
1. Load the job posting (PostgreSQL) and build a JobTarget
2. Load every student profile (MongoDB)
3. Score each profile (scoring_service.score_candidate)
4. Drop candidates below the threshold (default 60)
5. Sort by score, highest first; equal scores keep their load order
6. Attach up to 3 strengths per candidate

Rankings are computed on demand and never stored.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select

from careerguide.core.config import get_settings
from careerguide.db.postgres import get_db_session
from careerguide.db.tables import job_postings
from careerguide.models.profile import CandidateProfile, JobTarget, MatchResult
from careerguide.services.profile_service import StudentProfileService
from careerguide.services.scoring_service import candidate_strengths, score_candidate

logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 60


# ============================================================
# RANKING
# ============================================================

def rank_candidates(
    target: JobTarget,
    candidates: Iterable[CandidateProfile],
    threshold: int = DEFAULT_MATCH_THRESHOLD
) -> List[MatchResult]:
    """
    Score, filter and sort candidates for one job.

    Args:
        target: Job requirements to match against
        candidates: Fully loaded candidate population
        threshold: Minimum score (inclusive) to keep a candidate

    Returns:
        MatchResults, highest score first. Ties keep input order.
    """
    qualified = []
    for profile in candidates:
        score = score_candidate(profile, target)
        if score >= threshold:
            qualified.append((profile, score))

    # sorted() is stable, reverse=True included
    qualified = sorted(qualified, key=lambda pair: pair[1], reverse=True)

    return [
        MatchResult(
            candidate_id=profile.id,
            score=score,
            strengths=candidate_strengths(profile, target)
        )
        for profile, score in qualified
    ]


# ============================================================
# MATCHING SERVICE
# ============================================================

class CandidateMatchingService:
    """
    Finds qualified applicants for a job posting.

    Pulls the whole student population into memory; there is no paging.
    """

    def __init__(self, profile_service: StudentProfileService = None, session_factory=None):
        self.profile_service = profile_service or StudentProfileService()
        self.session_factory = session_factory

    def get_job_target(self, job_id: int, company_id: Optional[int] = None) -> Optional[JobTarget]:
        """Load a job posting as a JobTarget. None if missing or not owned."""
        stmt = select(
            job_postings.c.requirements, job_postings.c.qualifications
        ).where(job_postings.c.id == job_id)
        if company_id is not None:
            stmt = stmt.where(job_postings.c.company_id == company_id)

        with get_db_session(self.session_factory) as db:
            row = db.execute(stmt).mappings().first()

        return JobTarget.from_row(row) if row else None

    def find_qualified_candidates(
        self,
        job_id: int,
        company_id: Optional[int] = None,
        threshold: Optional[int] = None
    ) -> Optional[List[MatchResult]]:
        """
        Rank all students for a job.

        Returns:
            Ranked MatchResults, or None if the job does not exist
        """
        target = self.get_job_target(job_id, company_id)
        if target is None:
            return None

        if threshold is None:
            threshold = get_settings().match_threshold

        candidates = self.profile_service.list_profiles()
        ranked = rank_candidates(target, candidates, threshold)

        logger.info(
            "Job %s: %d of %d candidates at or above %d",
            job_id, len(ranked), len(candidates), threshold
        )
        return ranked


def get_matching_service() -> CandidateMatchingService:
    """Get matching service instance."""
    return CandidateMatchingService()
