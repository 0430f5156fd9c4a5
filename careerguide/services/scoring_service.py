"""
Candidate Scoring Service

PURPOSE:
Compute a 0-100 match score between a student profile and a job posting,
plus a short list of human-readable strengths for the company dashboard.

HOW THE SCORE IS BUILT (additive, each part capped):
- Academic record   max 30  (GPA of the latest record)
- Certificates      max 25  (5 per certificate)
- Work experience   max 25  (8 per experience)
- Skills            max 20  (4 per skill mentioned in the job requirements)

The functions here are pure: same inputs, same score. No I/O.
"""

import math
import re
from typing import Any, List, Optional

from careerguide.models.profile import CandidateProfile, JobTarget


MAX_SCORE = 100
ACADEMIC_MAX = 30
CERTIFICATE_POINTS, CERTIFICATE_MAX = 5, 25
EXPERIENCE_POINTS, EXPERIENCE_MAX = 8, 25
SKILL_POINTS, SKILL_MAX = 4, 20

# Flat credit for having an academic record without a usable GPA
UNGRADED_RECORD_POINTS = 15

# (minimum GPA, points), checked top-down
GPA_BANDS = [(3.5, 30), (3.0, 25), (2.5, 20)]
GPA_FLOOR_POINTS = 10

STRONG_GPA = 3.0
MAX_STRENGTHS = 3
MAX_LISTED_SKILLS = 3

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


# ============================================================
# COMPONENT HELPERS
# ============================================================

def parse_gpa(value: Any) -> Optional[float]:
    """
    Parse a stored GPA value.

    Accepts numbers and strings with a leading number ("3.6", "3.6/4.0").
    Returns None for missing or unparseable values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        gpa = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return None
        gpa = float(match.group(1))
    else:
        return None
    return None if math.isnan(gpa) else gpa


def academic_points(profile: CandidateProfile) -> int:
    record = profile.latest_academic_record
    if record is None:
        return 0

    gpa = parse_gpa(record.gpa)
    if gpa is None:
        return UNGRADED_RECORD_POINTS

    for minimum, points in GPA_BANDS:
        if gpa >= minimum:
            return points
    return GPA_FLOOR_POINTS


def certificate_points(profile: CandidateProfile) -> int:
    return min(len(profile.certificates) * CERTIFICATE_POINTS, CERTIFICATE_MAX)


def experience_points(profile: CandidateProfile) -> int:
    return min(len(profile.work_experience) * EXPERIENCE_POINTS, EXPERIENCE_MAX)


def matching_skills(profile: CandidateProfile, target: JobTarget) -> List[str]:
    """
    Skills mentioned in the job requirements, in profile order.

    Case-insensitive substring match against the requirements text.
    """
    requirements = (target.requirements or "").lower()
    return [
        skill for skill in profile.skills
        if skill.strip() and skill.lower() in requirements
    ]


def skill_points(profile: CandidateProfile, target: JobTarget) -> int:
    return min(len(matching_skills(profile, target)) * SKILL_POINTS, SKILL_MAX)


# ============================================================
# SCORE & STRENGTHS
# ============================================================

def score_candidate(profile: CandidateProfile, target: JobTarget) -> int:
    """
    Compute the match score of a profile against a job.

    Returns:
        Integer between 0 and 100
    """
    total = (
        academic_points(profile)
        + certificate_points(profile)
        + experience_points(profile)
        + skill_points(profile, target)
    )
    return max(0, min(total, MAX_SCORE))


def candidate_strengths(profile: CandidateProfile, target: JobTarget) -> List[str]:
    """
    Up to three reasons a candidate stands out, most important first.

    Order: academic record, certificates, work experience, relevant skills.
    Empty categories are skipped.
    """
    strengths = []

    record = profile.latest_academic_record
    if record is not None:
        gpa = parse_gpa(record.gpa)
        if gpa is not None and gpa >= STRONG_GPA:
            strengths.append(f"Strong academic record (GPA: {record.gpa})")

    if profile.certificates:
        strengths.append(f"{len(profile.certificates)} professional certificates")

    if profile.work_experience:
        strengths.append(f"{len(profile.work_experience)} work experiences")

    relevant = matching_skills(profile, target)
    if relevant:
        strengths.append(f"Relevant skills: {', '.join(relevant[:MAX_LISTED_SKILLS])}")

    return strengths[:MAX_STRENGTHS]
