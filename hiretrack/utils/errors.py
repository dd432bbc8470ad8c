from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ApiError(Exception):
    code: str
    message: str
    status: int = 400
    details: Any | None = None


@dataclass(frozen=True)
class InvalidFileKind(ApiError):
    code: str = "INVALID_FILE_KIND"
    message: str = "File must be a CSV"
    status: int = 400


@dataclass(frozen=True)
class EmptyInput(ApiError):
    code: str = "EMPTY_INPUT"
    message: str = "Empty CSV file"
    status: int = 400


@dataclass(frozen=True)
class ImportPersistenceError(ApiError):
    """Bulk insert of validated rows failed; nothing from the batch was stored."""

    code: str = "IMPORT_PERSISTENCE_FAILED"
    message: str = "Failed to save imported candidates"
    status: int = 500


def not_found(what: str) -> ApiError:
    return ApiError("NOT_FOUND", f"{what} not found", status=404)
