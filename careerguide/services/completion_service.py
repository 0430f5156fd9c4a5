"""
Profile completion gate.

Completion is a weighted sum over four independent buckets; a bucket counts
when its collection is non-empty (presence, not quality):

    academic records  30
    certificates      20
    work experience   25
    skills            25
"""

from typing import Optional

from careerguide.core.config import get_settings
from careerguide.models.profile import CandidateProfile

COMPLETION_WEIGHTS = {
    "academic_records": 30,
    "certificates": 20,
    "work_experience": 25,
    "skills": 25,
}


def profile_completion(profile: Optional[CandidateProfile]) -> int:
    """Completion percentage, 0 when there is no profile."""
    if profile is None:
        return 0
    return sum(
        weight for field, weight in COMPLETION_WEIGHTS.items()
        if getattr(profile, field)
    )


def can_generate_resume(profile: Optional[CandidateProfile], threshold: Optional[int] = None) -> bool:
    if threshold is None:
        threshold = get_settings().resume_completion_threshold
    return profile_completion(profile) >= threshold


def can_apply_for_job(profile: Optional[CandidateProfile]) -> bool:
    # Independent of the percentage: an academic record is mandatory
    return profile is not None and bool(profile.academic_records)
