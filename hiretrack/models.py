"""Domain types for the hiring tracker and the validation functions that build them.

Validation never raises for bad input: each ``validate_*`` function returns either
``Valid(record)`` or ``Invalid(errors)``, where ``errors`` maps a field name to a
human-readable message. Callers decide whether an ``Invalid`` is a row error
(CSV import) or a 400 response (JSON API).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Mapping, Optional, TypeVar, Union

from hiretrack.utils.datetime import normalize_instant
from hiretrack.utils.validators import is_valid_email

T = TypeVar("T")


class CandidateStatus(str, Enum):
    APPLIED = "APPLIED"
    SCREENING = "SCREENING"
    INTERVIEW = "INTERVIEW"
    PASSED = "PASSED"
    REJECTED = "REJECTED"
    OFFER = "OFFER"


class CandidateLevel(str, Enum):
    JUNIOR = "Junior"
    MID = "Mid"
    SENIOR = "Senior"


class LiveCodeVerdict(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    ON_HOLD = "ON_HOLD"


class UserRole(str, Enum):
    RECRUITER = "RECRUITER"
    HIRING_MANAGER = "HIRING_MANAGER"
    INTERVIEWER = "INTERVIEWER"
    VIEWER = "VIEWER"


STATUS_VALUES = frozenset(s.value for s in CandidateStatus)
LEVEL_VALUES = frozenset(lv.value for lv in CandidateLevel)
VERDICT_VALUES = frozenset(v.value for v in LiveCodeVerdict)
ROLE_VALUES = frozenset(r.value for r in UserRole)


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    errors: dict[str, str]

    @property
    def message(self) -> str:
        return "; ".join(f"{name}: {msg}" for name, msg in self.errors.items())


ValidationResult = Union[Valid[T], Invalid]


# Optional free-text candidate attributes, camelCase as stored.
OPTIONAL_TEXT_FIELDS = (
    "project",
    "interviewerId",
    "professionalExperience",
    "mainLanguage",
    "database",
    "cloud",
    "liveCodeResult",
    "mirror",
)


@dataclass
class Candidate:
    name: str
    email: str
    role: str
    status: CandidateStatus = CandidateStatus.APPLIED
    project: Optional[str] = None
    interviewerId: Optional[str] = None
    interviewSchedule: Optional[str] = None
    professionalExperience: Optional[str] = None
    mainLanguage: Optional[str] = None
    database: Optional[str] = None
    cloud: Optional[str] = None
    anotherTech: list[str] = field(default_factory=list)
    liveCodeResult: Optional[str] = None
    liveCodeVerdict: Optional[LiveCodeVerdict] = None
    level: Optional[CandidateLevel] = None
    mirror: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "status": self.status.value,
            "interviewSchedule": self.interviewSchedule,
            "anotherTech": list(self.anotherTech),
            "liveCodeVerdict": self.liveCodeVerdict.value if self.liveCodeVerdict else None,
            "level": self.level.value if self.level else None,
        }
        for name in OPTIONAL_TEXT_FIELDS:
            doc[name] = getattr(self, name)
        return doc


@dataclass(frozen=True)
class CandidateCsvRow:
    """One CSV data row after header mapping, in the flat import shape."""

    name: str
    email: str
    role: str
    project: str = ""
    interviewer: str = ""
    interview_schedule: str = ""
    professional_experience: str = ""
    main_language: str = ""
    database: str = ""
    cloud: str = ""
    another_tech: str = ""
    live_code_result: str = ""
    status: str = ""
    level: str = ""
    mirror: str = ""


CSV_IMPORT_COLUMNS = (
    "name",
    "email",
    "role",
    "project",
    "interviewer",
    "interview_schedule",
    "professional_experience",
    "main_language",
    "database",
    "cloud",
    "another_tech",
    "live_code_result",
    "status",
    "level",
    "mirror",
)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _check_identity(name: str, email: str, role: str, errors: dict[str, str]) -> None:
    if not name:
        errors["name"] = "Name is required"
    if not email or not is_valid_email(email):
        errors["email"] = "Valid email is required"
    if not role:
        errors["role"] = "Role is required"


def validate_csv_row(values: Mapping[str, Any]) -> ValidationResult[CandidateCsvRow]:
    """Validate a header-name -> value mapping from one CSV row.

    Unrecognized columns are ignored. Only name, email and role are checked here;
    status, level and the schedule are lenient and resolved when the row is
    turned into a candidate.
    """
    row = {col: _text(values.get(col)) for col in CSV_IMPORT_COLUMNS}
    errors: dict[str, str] = {}
    _check_identity(row["name"], row["email"], row["role"], errors)
    if errors:
        return Invalid(errors)
    return Valid(CandidateCsvRow(**row))


def split_tech_list(raw: str) -> list[str]:
    return [t.strip() for t in (raw or "").split(";") if t.strip()]


def candidate_from_csv_row(row: CandidateCsvRow, *, app_timezone: str = "UTC") -> Candidate:
    status = CandidateStatus(row.status) if row.status in STATUS_VALUES else CandidateStatus.APPLIED
    level = CandidateLevel(row.level) if row.level in LEVEL_VALUES else None

    return Candidate(
        name=row.name,
        email=row.email,
        role=row.role,
        status=status,
        level=level,
        project=row.project or None,
        interviewerId=row.interviewer or None,
        interviewSchedule=normalize_instant(row.interview_schedule, app_timezone=app_timezone),
        professionalExperience=row.professional_experience or None,
        mainLanguage=row.main_language or None,
        database=row.database or None,
        cloud=row.cloud or None,
        anotherTech=split_tech_list(row.another_tech),
        liveCodeResult=row.live_code_result or None,
        mirror=row.mirror or None,
    )


def _enum_field(
    body: Mapping[str, Any], name: str, allowed: frozenset[str], errors: dict[str, str], *, nullable: bool
) -> Optional[str]:
    raw = body.get(name)
    if raw is None or raw == "":
        if not nullable:
            errors[name] = f"Must be one of {', '.join(sorted(allowed))}"
        return None
    value = str(raw).strip()
    if value not in allowed:
        errors[name] = f"Must be one of {', '.join(sorted(allowed))}"
        return None
    return value


def validate_candidate_payload(
    body: Mapping[str, Any], *, partial: bool = False, app_timezone: str = "UTC"
) -> ValidationResult[dict[str, Any]]:
    """Validate a camelCase JSON candidate body.

    With ``partial=False`` the result is a full document ready for insertion.
    With ``partial=True`` only the keys present in ``body`` are validated and
    returned, which is the shape of a ``$set`` update. Unknown keys and system
    fields (``_id``, timestamps) are dropped.
    """
    errors: dict[str, str] = {}
    out: dict[str, Any] = {}

    def present(key: str) -> bool:
        return not partial or key in body

    for key in ("name", "email", "role"):
        if present(key):
            out[key] = _text(body.get(key))
    if partial:
        if "name" in out and not out["name"]:
            errors["name"] = "Name is required"
        if "email" in out and (not out["email"] or not is_valid_email(out["email"])):
            errors["email"] = "Valid email is required"
        if "role" in out and not out["role"]:
            errors["role"] = "Role is required"
    else:
        _check_identity(out["name"], out["email"], out["role"], errors)

    for key in OPTIONAL_TEXT_FIELDS:
        if present(key):
            raw = body.get(key)
            if raw is not None and not isinstance(raw, (str, int, float)):
                errors[key] = "Must be a string"
                continue
            out[key] = _text(raw) or None

    if present("status"):
        if partial:
            status = _enum_field(body, "status", STATUS_VALUES, errors, nullable=False)
        else:
            status = _enum_field(body, "status", STATUS_VALUES, errors, nullable=True) or CandidateStatus.APPLIED.value
        out["status"] = status
    if present("level"):
        out["level"] = _enum_field(body, "level", LEVEL_VALUES, errors, nullable=True)
    if present("liveCodeVerdict"):
        out["liveCodeVerdict"] = _enum_field(body, "liveCodeVerdict", VERDICT_VALUES, errors, nullable=True)

    if present("anotherTech"):
        raw_tech = body.get("anotherTech")
        if raw_tech is None and not partial:
            out["anotherTech"] = []
        elif not isinstance(raw_tech, list) or not all(isinstance(t, str) for t in raw_tech):
            errors["anotherTech"] = "Must be a list of strings"
        else:
            out["anotherTech"] = [t.strip() for t in raw_tech if t.strip()]

    if present("interviewSchedule"):
        raw_schedule = body.get("interviewSchedule")
        if raw_schedule in (None, ""):
            out["interviewSchedule"] = None
        else:
            schedule = normalize_instant(raw_schedule, app_timezone=app_timezone)
            if schedule is None:
                errors["interviewSchedule"] = "Invalid datetime"
            else:
                out["interviewSchedule"] = schedule

    if errors:
        return Invalid(errors)
    return Valid(out)


def validate_note_payload(body: Mapping[str, Any]) -> ValidationResult[str]:
    text = _text(body.get("body"))
    if not text:
        return Invalid({"body": "Note body is required"})
    return Valid(text)


def validate_role(value: Any) -> ValidationResult[UserRole]:
    role = _text(value).upper()
    if role not in ROLE_VALUES:
        return Invalid({"role": f"Must be one of {', '.join(sorted(ROLE_VALUES))}"})
    return Valid(UserRole(role))
