from __future__ import annotations

import pytest
from pymongo.errors import BulkWriteError

from hiretrack.audit import AuditRecorder
from hiretrack.candidates.exporter import build_csv
from hiretrack.candidates.importer import CandidateImporter, ImportOutcome, is_csv_upload
from hiretrack.utils.errors import EmptyInput, ImportPersistenceError, InvalidFileKind

HEADER = "name,email,role"
ACTOR = {"id": "u1", "name": "Rita Recruiter"}


class FakeStore:
    def __init__(self, existing=(), fail_insert=False, fail_audit=False):
        self.candidates = [{"email": e} for e in existing]
        self.inserts = []
        self.audit = []
        self.fail_insert = fail_insert
        self.fail_audit = fail_audit

    def find_candidate_by_email(self, email):
        return next((c for c in self.candidates if c["email"] == email), None)

    def bulk_create_candidates(self, docs):
        if self.fail_insert:
            raise BulkWriteError({"writeErrors": [], "nInserted": 0})
        self.inserts.append(list(docs))
        self.candidates.extend(docs)
        return list(range(len(docs)))

    def insert_audit(self, entry):
        if self.fail_audit:
            raise RuntimeError("audit collection unavailable")
        self.audit.append(entry)


def _importer(store, actor=ACTOR):
    return CandidateImporter(store, AuditRecorder(store, actor_resolver=lambda: actor))


def _run(store, text, filename="candidates.csv", content_type="text/csv", actor=ACTOR):
    return _importer(store, actor).run(filename=filename, content_type=content_type, data=text.encode("utf-8"))


def test_all_valid_rows_import_in_one_batch():
    store = FakeStore()
    report = _run(store, f"{HEADER}\nAda,ada@example.com,Backend\nLin,lin@example.com,Frontend\n")

    assert report.outcome is ImportOutcome.SUCCESS
    assert report.summary() == {"total": 2, "success": 2, "errors": 0, "duplicates": 0}
    assert report.message == "Import completed successfully: 2 candidates imported"
    assert [r.row for r in report.success] == [2, 3]
    assert len(store.inserts) == 1
    assert [d["email"] for d in store.inserts[0]] == ["ada@example.com", "lin@example.com"]


def test_quoted_comma_in_name():
    store = FakeStore()
    report = _run(store, 'name,email,role\n"Jo,Doe",jo@x.com,Dev')

    assert report.outcome is ImportOutcome.SUCCESS
    assert report.success[0].data["name"] == "Jo,Doe"
    assert report.success[0].data["status"] == "APPLIED"


def test_partial_import_reports_bad_row():
    store = FakeStore()
    report = _run(store, f"{HEADER}\nA,a@example.com,QA\nB,,QA\nC,c@example.com,QA")

    assert report.outcome is ImportOutcome.PARTIAL
    assert report.summary() == {"total": 3, "success": 2, "errors": 1, "duplicates": 0}
    assert report.errors[0].row == 3
    assert "email" in report.errors[0].error
    assert report.message == "Partial import completed: 2 candidates imported with 1 errors and 0 duplicates"


def test_column_count_mismatch():
    store = FakeStore()
    report = _run(store, f"{HEADER}\nOnly,two")

    assert report.outcome is ImportOutcome.FAILED
    assert report.errors[0].row == 2
    assert report.errors[0].error == 'Column count mismatch. Expected 3, got 2. Row data: "Only,two..."'
    assert report.message == "Import failed: No candidates imported due to validation errors"
    assert store.inserts == []


def test_mismatch_preview_truncated():
    store = FakeStore()
    long_line = "x" * 150
    report = _run(store, f"{HEADER}\n{long_line}")
    assert f'Row data: "{"x" * 100}..."' in report.errors[0].error


def test_existing_email_is_duplicate():
    store = FakeStore(existing=["dup@x.com"])
    report = _run(store, f"{HEADER}\nDup,dup@x.com,QA")

    assert report.outcome is ImportOutcome.FAILED
    assert report.summary() == {"total": 1, "success": 0, "errors": 0, "duplicates": 1}
    assert report.duplicates[0].to_dict() == {"row": 2, "email": "dup@x.com", "error": "Email already exists"}
    assert store.inserts == []
    assert store.audit == []


def test_repeated_email_within_file_is_duplicate():
    store = FakeStore()
    report = _run(store, f"{HEADER}\nA,same@x.com,QA\nA again,same@x.com,QA")

    assert report.outcome is ImportOutcome.PARTIAL
    assert len(report.success) == 1
    assert report.duplicates[0].row == 3
    assert report.duplicates[0].error == "Email appears earlier in this file"
    assert len(store.inserts[0]) == 1


def test_header_only_file_is_success_with_no_writes():
    store = FakeStore()
    report = _run(store, HEADER + "\n")

    assert report.outcome is ImportOutcome.SUCCESS
    assert report.summary() == {"total": 0, "success": 0, "errors": 0, "duplicates": 0}
    assert report.message == "Import completed successfully"
    assert store.inserts == []
    assert store.audit == []


def test_not_csv_rejected_before_reading_rows():
    store = FakeStore()
    with pytest.raises(InvalidFileKind) as exc:
        _run(store, f"{HEADER}\nA,a@x.com,QA", filename="people.xlsx", content_type="application/vnd.ms-excel")
    assert exc.value.status == 400
    assert exc.value.code == "INVALID_FILE_KIND"
    assert store.inserts == []


def test_non_utf8_rejected():
    store = FakeStore()
    with pytest.raises(InvalidFileKind):
        _importer(store).run(filename="c.csv", content_type="text/csv", data=b"name\n\xff\xfe\xfa")


@pytest.mark.parametrize("text", ["", "   \n\n  "])
def test_empty_file_rejected(text):
    with pytest.raises(EmptyInput) as exc:
        _run(FakeStore(), text)
    assert exc.value.code == "EMPTY_INPUT"
    assert exc.value.message == "Empty CSV file"


def test_csv_detection():
    assert is_csv_upload("a.CSV", None)
    assert is_csv_upload("upload", "text/csv; charset=utf-8")
    assert not is_csv_upload("a.txt", "text/plain")


def test_imported_audit_event():
    store = FakeStore()
    _run(store, f"{HEADER}\nA,a@x.com,QA\nB,b@x.com,QA", filename="batch.csv")

    assert store.audit == [
        {
            "entityType": "candidate",
            "entityId": "bulk",
            "action": "imported",
            "actorId": "u1",
            "actorName": "Rita Recruiter",
            "diff": {"count": 2, "fileName": "batch.csv"},
        }
    ]


def test_import_without_actor_skips_audit():
    store = FakeStore()
    report = _run(store, f"{HEADER}\nA,a@x.com,QA", actor=None)
    assert report.outcome is ImportOutcome.SUCCESS
    assert len(store.inserts) == 1
    assert store.audit == []


def test_audit_failure_does_not_change_outcome():
    store = FakeStore(fail_audit=True)
    report = _run(store, f"{HEADER}\nA,a@x.com,QA")
    assert report.outcome is ImportOutcome.SUCCESS
    assert len(store.inserts) == 1


def test_bulk_insert_failure_is_fatal():
    store = FakeStore(fail_insert=True)
    with pytest.raises(ImportPersistenceError) as exc:
        _run(store, f"{HEADER}\nA,a@x.com,QA\nB,,QA")

    assert exc.value.status == 500
    assert exc.value.details["validated"] == 1
    assert exc.value.details["errors"] == 1
    assert store.audit == []


def test_report_dict_shape():
    report = _run(FakeStore(), f"{HEADER}\nA,a@x.com,QA\nB,b,QA")
    body = report.to_dict()

    assert body["outcome"] == "partial"
    assert set(body["results"]) == {"success", "errors", "duplicates"}
    assert body["results"]["success"][0]["row"] == 2
    assert body["results"]["errors"][0] == {"row": 3, "error": "email: Valid email is required"}


def test_exported_file_imports_back():
    source = {
        "name": "Grace, H.",
        "email": "grace@example.com",
        "role": "Backend",
        "project": 'Project "Cobol"',
        "interviewerId": "u-9",
        "interviewSchedule": "2024-05-01T09:30:00.000Z",
        "professionalExperience": "10 years",
        "mainLanguage": "Python",
        "database": "PostgreSQL",
        "cloud": "AWS",
        "anotherTech": ["Docker", "Kubernetes"],
        "liveCodeResult": "Excellent",
        "status": "INTERVIEW",
        "level": "Senior",
        "mirror": "yes",
    }
    store = FakeStore()
    report = _run(store, build_csv([source]), filename="candidates_export_2024-05-02.csv")

    assert report.outcome is ImportOutcome.SUCCESS
    imported = report.success[0].data
    for key, value in source.items():
        assert imported[key] == value, key
