"""CSV import of candidates.

``CandidateImporter.run`` takes the uploaded file as bytes and returns an
``ImportReport``. Only two problems abort the whole call before any row is
looked at: a file that is not CSV (``InvalidFileKind``) and a file with no
content (``EmptyInput``). Every per-row problem (wrong column count, failed
validation, email already present) is collected in the report and the next row
is processed.

Rows are handled one after another. The accepted rows are written with a single
bulk insert at the end, and one ``imported`` audit event covers the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol

from pymongo.errors import PyMongoError

from hiretrack.audit import AuditRecorder
from hiretrack.candidates.csv_format import parse_csv_line, split_lines
from hiretrack.models import Invalid, candidate_from_csv_row, validate_csv_row
from hiretrack.utils.errors import EmptyInput, ImportPersistenceError, InvalidFileKind
from hiretrack.utils.logging import log_event

logger = logging.getLogger("hiretrack.importer")

CSV_MEDIA_TYPE = "text/csv"
ROW_PREVIEW_CHARS = 100


class CandidateImportStore(Protocol):
    def find_candidate_by_email(self, email: str) -> Optional[dict[str, Any]]: ...

    def bulk_create_candidates(self, docs: list[dict[str, Any]]) -> list[Any]: ...


class ImportOutcome(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class RowSuccess:
    row: int
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "data": self.data}


@dataclass(frozen=True)
class RowError:
    row: int
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "error": self.error}


@dataclass(frozen=True)
class RowDuplicate:
    row: int
    email: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "email": self.email, "error": self.error}


@dataclass
class ImportReport:
    total: int = 0
    success: list[RowSuccess] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    duplicates: list[RowDuplicate] = field(default_factory=list)

    @property
    def outcome(self) -> ImportOutcome:
        if not self.errors and not self.duplicates:
            return ImportOutcome.SUCCESS
        if self.success:
            return ImportOutcome.PARTIAL
        return ImportOutcome.FAILED

    @property
    def message(self) -> str:
        outcome = self.outcome
        if outcome is ImportOutcome.PARTIAL:
            return (
                f"Partial import completed: {len(self.success)} candidates imported with "
                f"{len(self.errors)} errors and {len(self.duplicates)} duplicates"
            )
        if outcome is ImportOutcome.FAILED:
            return "Import failed: No candidates imported due to validation errors"
        if self.success:
            return f"Import completed successfully: {len(self.success)} candidates imported"
        return "Import completed successfully"

    def summary(self) -> dict[str, int]:
        return {
            "total": self.total,
            "success": len(self.success),
            "errors": len(self.errors),
            "duplicates": len(self.duplicates),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "outcome": self.outcome.value,
            "results": {
                "success": [r.to_dict() for r in self.success],
                "errors": [r.to_dict() for r in self.errors],
                "duplicates": [r.to_dict() for r in self.duplicates],
            },
            "summary": self.summary(),
        }


def is_csv_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
    media_type = str(content_type or "").split(";", 1)[0].strip().lower()
    return media_type == CSV_MEDIA_TYPE or str(filename or "").lower().endswith(".csv")


def decode_upload(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidFileKind(message="File must be UTF-8 encoded CSV") from e


class CandidateImporter:
    def __init__(self, store: CandidateImportStore, recorder: AuditRecorder, *, app_timezone: str = "UTC") -> None:
        self._store = store
        self._recorder = recorder
        self._app_timezone = app_timezone

    def run(self, *, filename: Optional[str], content_type: Optional[str], data: bytes) -> ImportReport:
        if not is_csv_upload(filename, content_type):
            raise InvalidFileKind()

        lines = split_lines(decode_upload(data))
        if not lines:
            raise EmptyInput()

        header = parse_csv_line(lines[0])
        data_lines = lines[1:]
        report = ImportReport(total=len(data_lines))
        seen_emails: set[str] = set()

        for index, line in enumerate(data_lines):
            # Row numbers count the header as row 1.
            self._process_row(index + 2, line, header, report, seen_emails)

        if report.success:
            self._persist(report)
            self._recorder.record(
                "candidate",
                "bulk",
                "imported",
                {"count": len(report.success), "fileName": filename or ""},
            )

        log_event(logger, "import", file=filename or "", outcome=report.outcome.value, **report.summary())
        return report

    def _process_row(
        self, row_number: int, line: str, header: list[str], report: ImportReport, seen_emails: set[str]
    ) -> None:
        values = parse_csv_line(line)
        if len(values) != len(header):
            report.errors.append(
                RowError(
                    row=row_number,
                    error=(
                        f"Column count mismatch. Expected {len(header)}, got {len(values)}. "
                        f'Row data: "{line[:ROW_PREVIEW_CHARS]}..."'
                    ),
                )
            )
            return

        result = validate_csv_row(dict(zip(header, values)))
        if isinstance(result, Invalid):
            report.errors.append(RowError(row=row_number, error=result.message))
            return

        row = result.value
        if row.email in seen_emails:
            report.duplicates.append(
                RowDuplicate(row=row_number, email=row.email, error="Email appears earlier in this file")
            )
            return
        if self._store.find_candidate_by_email(row.email) is not None:
            report.duplicates.append(RowDuplicate(row=row_number, email=row.email, error="Email already exists"))
            return

        candidate = candidate_from_csv_row(row, app_timezone=self._app_timezone)
        seen_emails.add(row.email)
        report.success.append(RowSuccess(row=row_number, data=candidate.to_document()))

    def _persist(self, report: ImportReport) -> None:
        docs = [dict(r.data) for r in report.success]
        try:
            self._store.bulk_create_candidates(docs)
        except PyMongoError as e:
            logger.exception("Bulk insert failed for %d validated rows", len(docs))
            raise ImportPersistenceError(details={"validated": len(docs), **report.summary()}) from e
