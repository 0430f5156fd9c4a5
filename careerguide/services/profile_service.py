"""
Student Profile Service - CRUD operations for profile documents.

Collection: student_profiles (one document per student)
{
    "student_id": 42,
    "academic_records": [{"institution_name", "year", "program", "gpa", "added_at"}],
    "certificates": [{"name", "issuer", "date", "description", "added_at"}],
    "work_experience": [{"company", "position", "duration", "description",
                         "reference_contact", "added_at"}],
    "skills": ["Python", "SQL"],
    "created_at": ..., "updated_at": ...
}

Record lists are append-only. Skills are the only entries that can be removed.
"""

import logging
import re
from datetime import datetime
from typing import List, Optional

from pymongo.collection import Collection

from careerguide.core.exceptions import ProfileNotFoundError
from careerguide.db.mongodb import get_collection, COLLECTIONS
from careerguide.models.profile import CandidateProfile

logger = logging.getLogger(__name__)


class StudentProfileService:
    """
    Handles student profile documents.
    """

    def __init__(self, collection: Collection = None):
        # pymongo collections don't support truth testing
        if collection is None:
            collection = get_collection(COLLECTIONS["student_profiles"])
        self.collection = collection

    def create_profile(self, student_id: int) -> bool:
        """
        Create an empty profile for a student.

        Returns:
            False if the student already has one
        """
        now = datetime.utcnow()
        result = self.collection.update_one(
            {"student_id": student_id},
            {"$setOnInsert": {
                "student_id": student_id,
                "academic_records": [],
                "certificates": [],
                "work_experience": [],
                "skills": [],
                "created_at": now,
                "updated_at": now,
            }},
            upsert=True
        )
        return result.upserted_id is not None

    def get_document(self, student_id: int) -> Optional[dict]:
        return self.collection.find_one({"student_id": student_id})

    def get_profile(self, student_id: int) -> Optional[CandidateProfile]:
        doc = self.get_document(student_id)
        return CandidateProfile.from_document(doc) if doc else None

    def list_profiles(self) -> List[CandidateProfile]:
        """All student profiles, in store order."""
        return [CandidateProfile.from_document(doc) for doc in self.collection.find({})]

    def _append(self, student_id: int, field: str, entry: dict) -> None:
        entry = {**entry, "added_at": datetime.utcnow()}
        result = self.collection.update_one(
            {"student_id": student_id},
            {
                "$push": {field: entry},
                "$set": {"updated_at": datetime.utcnow()}
            }
        )
        if result.matched_count == 0:
            raise ProfileNotFoundError(student_id)
        logger.debug("Appended %s entry for student %s", field, student_id)

    def add_academic_record(self, student_id: int, institution_name: str, year: str,
                            gpa: Optional[str] = None, program: str = "") -> None:
        self._append(student_id, "academic_records", {
            "institution_name": institution_name,
            "year": year,
            "program": program or "",
            "gpa": gpa or "",
        })

    def add_certificate(self, student_id: int, name: str, issuer: str,
                        date: str = "", description: str = "") -> None:
        self._append(student_id, "certificates", {
            "name": name,
            "issuer": issuer,
            "date": date or "",
            "description": description or "",
        })

    def add_work_experience(self, student_id: int, company: str, position: str, duration: str,
                            description: str = "", reference_contact: str = "") -> None:
        self._append(student_id, "work_experience", {
            "company": company,
            "position": position,
            "duration": duration,
            "description": description or "",
            "reference_contact": reference_contact or "",
        })

    def add_skill(self, student_id: int, skill: str) -> bool:
        """
        Add a skill unless the profile already has it (case-insensitive).

        Returns:
            True if the skill was added
        """
        skill = skill.strip()
        doc = self.get_document(student_id)
        if not doc:
            raise ProfileNotFoundError(student_id)

        existing = {s.lower() for s in doc.get("skills") or [] if isinstance(s, str)}
        if not skill or skill.lower() in existing:
            return False

        # Filter re-checks at write time so a concurrent add of the same skill is a no-op
        result = self.collection.update_one(
            {
                "student_id": student_id,
                "skills": {"$not": re.compile(f"^{re.escape(skill)}$", re.IGNORECASE)}
            },
            {
                "$push": {"skills": skill},
                "$set": {"updated_at": datetime.utcnow()}
            }
        )
        return result.modified_count > 0

    def remove_skill(self, student_id: int, skill: str) -> bool:
        """Remove a skill exactly as stored."""
        result = self.collection.update_one(
            {"student_id": student_id},
            {
                "$pull": {"skills": skill},
                "$set": {"updated_at": datetime.utcnow()}
            }
        )
        if result.matched_count == 0:
            raise ProfileNotFoundError(student_id)
        return result.modified_count > 0


def get_profile_service() -> StudentProfileService:
    """Get profile service instance."""
    return StudentProfileService()
