from __future__ import annotations

import pytest

from hiretrack.models import (
    CandidateLevel,
    CandidateStatus,
    Invalid,
    Valid,
    candidate_from_csv_row,
    validate_candidate_payload,
    validate_csv_row,
    validate_note_payload,
    validate_role,
)


def _row(**overrides):
    values = {"name": "Ada Lovelace", "email": "ada@example.com", "role": "Backend"}
    values.update(overrides)
    return values


def test_csv_row_requires_name_email_role():
    result = validate_csv_row({"name": "", "email": "", "role": ""})
    assert isinstance(result, Invalid)
    assert set(result.errors) == {"name", "email", "role"}
    assert "email: Valid email is required" in result.message


def test_csv_row_rejects_malformed_email():
    result = validate_csv_row(_row(email="not-an-email"))
    assert isinstance(result, Invalid)
    assert list(result.errors) == ["email"]


def test_csv_row_ignores_unknown_columns():
    result = validate_csv_row(_row(favourite_colour="blue"))
    assert isinstance(result, Valid)
    assert result.value.name == "Ada Lovelace"


def test_csv_transform_defaults_and_lists():
    row = validate_csv_row(
        _row(another_tech=" Docker; ;Kubernetes;", status="hired", level="Principal", project="")
    ).value
    candidate = candidate_from_csv_row(row)

    assert candidate.anotherTech == ["Docker", "Kubernetes"]
    assert candidate.status is CandidateStatus.APPLIED
    assert candidate.level is None
    assert candidate.project is None
    assert candidate.interviewSchedule is None


def test_csv_transform_keeps_known_enums_case_sensitive():
    row = validate_csv_row(_row(status="OFFER", level="Senior")).value
    candidate = candidate_from_csv_row(row)
    assert candidate.status is CandidateStatus.OFFER
    assert candidate.level is CandidateLevel.SENIOR

    lower = candidate_from_csv_row(validate_csv_row(_row(status="offer", level="senior")).value)
    assert lower.status is CandidateStatus.APPLIED
    assert lower.level is None


def test_csv_transform_normalizes_schedule():
    row = validate_csv_row(_row(interview_schedule="2024-01-15T10:00:00", interviewer="u-7")).value
    candidate = candidate_from_csv_row(row, app_timezone="UTC")
    assert candidate.interviewSchedule == "2024-01-15T10:00:00.000Z"
    assert candidate.interviewerId == "u-7"


def test_csv_transform_schedule_uses_app_timezone():
    row = validate_csv_row(_row(interview_schedule="2024-01-15T10:00:00")).value
    candidate = candidate_from_csv_row(row, app_timezone="Europe/Berlin")
    assert candidate.interviewSchedule == "2024-01-15T09:00:00.000Z"


def test_csv_transform_drops_unparseable_schedule():
    row = validate_csv_row(_row(interview_schedule="next tuesday-ish")).value
    assert candidate_from_csv_row(row).interviewSchedule is None


def test_candidate_document_shape():
    doc = candidate_from_csv_row(validate_csv_row(_row()).value).to_document()
    assert doc["status"] == "APPLIED"
    assert doc["anotherTech"] == []
    assert doc["level"] is None
    assert "project" in doc and doc["project"] is None


def test_payload_full_defaults():
    result = validate_candidate_payload({"name": "A", "email": "a@example.com", "role": "QA"})
    assert isinstance(result, Valid)
    assert result.value["status"] == "APPLIED"
    assert result.value["anotherTech"] == []
    assert result.value["interviewSchedule"] is None


def test_payload_full_rejects_bad_enums_and_lists():
    result = validate_candidate_payload(
        {"name": "A", "email": "a@example.com", "role": "QA", "status": "NOPE", "anotherTech": "Go", "level": "Guru"}
    )
    assert isinstance(result, Invalid)
    assert set(result.errors) == {"status", "anotherTech", "level"}


def test_payload_partial_only_touches_given_keys():
    result = validate_candidate_payload({"status": "INTERVIEW", "_id": "x", "createdAt": "y"}, partial=True)
    assert isinstance(result, Valid)
    assert result.value == {"status": "INTERVIEW"}


def test_payload_partial_rejects_null_status_and_tech():
    result = validate_candidate_payload({"status": None, "anotherTech": None}, partial=True)
    assert isinstance(result, Invalid)
    assert set(result.errors) == {"status", "anotherTech"}


def test_payload_schedule_normalized():
    result = validate_candidate_payload({"interviewSchedule": "2024-03-01T08:30:00+02:00"}, partial=True)
    assert result.value["interviewSchedule"] == "2024-03-01T06:30:00.000Z"


def test_note_and_role_validation():
    assert isinstance(validate_note_payload({"body": "   "}), Invalid)
    assert validate_note_payload({"body": " ok "}).value == "ok"
    assert isinstance(validate_role("ADMIN"), Invalid)
    assert validate_role("viewer").value.value == "VIEWER"


@pytest.mark.parametrize("raw", ["May", "Monday", "10", "3pm", "tomorrow 10:00"])
def test_csv_transform_drops_non_iso_schedule(raw):
    row = validate_csv_row(_row(interview_schedule=raw)).value
    assert candidate_from_csv_row(row).interviewSchedule is None


@pytest.mark.parametrize("raw", ["May", "10"])
def test_payload_rejects_non_iso_schedule(raw):
    result = validate_candidate_payload({"interviewSchedule": raw}, partial=True)
    assert isinstance(result, Invalid)
    assert result.errors == {"interviewSchedule": "Invalid datetime"}


def test_csv_transform_accepts_space_separated_iso():
    row = validate_csv_row(_row(interview_schedule="2024-01-15 10:00")).value
    assert candidate_from_csv_row(row).interviewSchedule == "2024-01-15T10:00:00.000Z"
