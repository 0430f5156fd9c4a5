"""
Candidate profile and matching target records.

Stored profile documents are loosely shaped (fields go missing, lists come
back as None). `CandidateProfile.from_document` is the one place that turns
such a document into a typed record; everything downstream can rely on the
lists being lists.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class AcademicRecord:
    institution_name: str = ""
    year: str = ""
    gpa: Optional[Any] = None  # raw stored value; parsed by the score model
    program: str = ""

    @classmethod
    def from_document(cls, doc: dict) -> "AcademicRecord":
        return cls(
            institution_name=_as_text(doc.get("institution_name", doc.get("schoolName"))),
            year=_as_text(doc.get("year")),
            gpa=doc.get("gpa"),
            program=_as_text(doc.get("program")),
        )


@dataclass
class Certificate:
    name: str = ""
    issuer: str = ""
    date: str = ""
    description: str = ""

    @classmethod
    def from_document(cls, doc: dict) -> "Certificate":
        return cls(
            name=_as_text(doc.get("name")),
            issuer=_as_text(doc.get("issuer")),
            date=_as_text(doc.get("date")),
            description=_as_text(doc.get("description")),
        )


@dataclass
class WorkExperience:
    company: str = ""
    position: str = ""
    duration: str = ""
    description: str = ""
    reference_contact: str = ""

    @classmethod
    def from_document(cls, doc: dict) -> "WorkExperience":
        return cls(
            company=_as_text(doc.get("company")),
            position=_as_text(doc.get("position")),
            duration=_as_text(doc.get("duration")),
            description=_as_text(doc.get("description")),
            reference_contact=_as_text(doc.get("reference_contact", doc.get("referenceContact"))),
        )


@dataclass
class CandidateProfile:
    id: Any = None
    academic_records: List[AcademicRecord] = field(default_factory=list)
    certificates: List[Certificate] = field(default_factory=list)
    work_experience: List[WorkExperience] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)

    @property
    def latest_academic_record(self) -> Optional[AcademicRecord]:
        """Last record by insertion order (no date comparison)."""
        return self.academic_records[-1] if self.academic_records else None

    @classmethod
    def from_document(cls, doc: Optional[dict]) -> "CandidateProfile":
        """
        Build a profile from a stored document.

        Accepts both snake_case and the legacy camelCase field names.
        Entries that are not mappings are skipped, never raised on.
        """
        doc = doc or {}
        records = _as_list(doc.get("academic_records", doc.get("academicRecords")))
        certificates = _as_list(doc.get("certificates"))
        experience = _as_list(doc.get("work_experience", doc.get("workExperience")))
        skills = _as_list(doc.get("skills"))

        return cls(
            id=doc.get("student_id", doc.get("_id")),
            academic_records=[AcademicRecord.from_document(r) for r in records if isinstance(r, dict)],
            certificates=[Certificate.from_document(c) for c in certificates if isinstance(c, dict)],
            work_experience=[WorkExperience.from_document(w) for w in experience if isinstance(w, dict)],
            skills=[s for s in skills if isinstance(s, str)],
        )


@dataclass
class JobTarget:
    requirements: str = ""
    qualifications: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "JobTarget":
        return cls(
            requirements=_as_text(row.get("requirements")),
            qualifications=_as_text(row.get("qualifications")),
        )


@dataclass
class MatchResult:
    candidate_id: Any
    score: int
    strengths: List[str] = field(default_factory=list)
