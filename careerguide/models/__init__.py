"""
Models module - internal data structures for the matching core.

Difference from schemas:
- Models: typed records the scoring/admissions code works on
- Schemas: API contract (what client sends/receives)
"""

from careerguide.models.profile import (
    AcademicRecord, Certificate, WorkExperience, CandidateProfile,
    JobTarget, MatchResult
)
from careerguide.models.admissions import Application, ApplicationStatus, IntakeResult, IntakeTarget

__all__ = [
    "AcademicRecord", "Certificate", "WorkExperience", "CandidateProfile",
    "JobTarget", "MatchResult",
    "Application", "ApplicationStatus", "IntakeResult", "IntakeTarget",
]
