"""
Tests for the student profile document service (MongoDB mocked).
"""
import pytest
from unittest.mock import MagicMock

from careerguide.core.exceptions import ProfileNotFoundError
from careerguide.services.profile_service import StudentProfileService


@pytest.fixture
def service(mock_collection):
    return StudentProfileService(collection=mock_collection)


def test_create_profile_upserts_empty_document(service, mock_collection):
    mock_collection.update_one.return_value = MagicMock(upserted_id="oid")

    assert service.create_profile(42) is True

    query, update = mock_collection.update_one.call_args[0]
    assert query == {"student_id": 42}
    assert update["$setOnInsert"]["skills"] == []
    assert mock_collection.update_one.call_args[1] == {"upsert": True}


def test_create_profile_reports_existing(service, mock_collection):
    mock_collection.update_one.return_value = MagicMock(upserted_id=None)
    assert service.create_profile(42) is False


def test_get_profile_none_when_missing(service, mock_collection):
    mock_collection.find_one.return_value = None
    assert service.get_profile(1) is None


def test_list_profiles_builds_records(service, mock_collection):
    mock_collection.find.return_value = [
        {"student_id": 1, "skills": ["Python"]},
        {"student_id": 2, "academic_records": [{"gpa": "3.1"}]},
    ]

    profiles = service.list_profiles()

    assert [p.id for p in profiles] == [1, 2]
    assert profiles[0].skills == ["Python"]
    assert profiles[1].academic_records[0].gpa == "3.1"


def test_add_certificate_pushes_entry(service, mock_collection):
    mock_collection.update_one.return_value = MagicMock(matched_count=1)

    service.add_certificate(7, "AWS Practitioner", "Amazon", date="2024-01")

    update = mock_collection.update_one.call_args[0][1]
    entry = update["$push"]["certificates"]
    assert entry["name"] == "AWS Practitioner"
    assert entry["issuer"] == "Amazon"
    assert "added_at" in entry


def test_append_to_missing_profile_raises(service, mock_collection):
    mock_collection.update_one.return_value = MagicMock(matched_count=0)

    with pytest.raises(ProfileNotFoundError):
        service.add_academic_record(7, "NUL", "2023", gpa="3.4")


def test_add_skill_is_case_insensitive(service, mock_collection):
    mock_collection.find_one.return_value = {"student_id": 7, "skills": ["Python"]}

    assert service.add_skill(7, "python") is False
    mock_collection.update_one.assert_not_called()

    mock_collection.update_one.return_value = MagicMock(matched_count=1, modified_count=1)
    assert service.add_skill(7, "  SQL ") is True
    assert mock_collection.update_one.call_args[0][1]["$push"] == {"skills": "SQL"}


def test_add_skill_write_is_guarded_against_concurrent_duplicate(service, mock_collection):
    mock_collection.find_one.return_value = {"student_id": 7, "skills": []}
    # Another request pushed "c++" between the read and the write
    mock_collection.update_one.return_value = MagicMock(matched_count=0, modified_count=0)

    assert service.add_skill(7, "C++") is False

    query = mock_collection.update_one.call_args[0][0]
    pattern = query["skills"]["$not"]
    assert pattern.match("c++")
    assert pattern.match("C++")
    assert not pattern.match("C")


def test_add_skill_requires_profile(service, mock_collection):
    mock_collection.find_one.return_value = None

    with pytest.raises(ProfileNotFoundError):
        service.add_skill(7, "Go")


def test_remove_skill(service, mock_collection):
    mock_collection.update_one.return_value = MagicMock(matched_count=1, modified_count=1)
    assert service.remove_skill(7, "Go") is True

    mock_collection.update_one.return_value = MagicMock(matched_count=1, modified_count=0)
    assert service.remove_skill(7, "Rust") is False
