"""Input Validation: field-level checks for company, job and contact creation records.

Invariants:
    - All functions are PURE: no IO, no DB, never raise on bad input
    - Every violation is collected; validation never stops at the first error
    - Field names in FieldError match the persisted snake_case column names
    - Optional fields are only checked when present (not None, not empty string)

Design Decisions:
    - URLs are parse-validated through pydantic's AnyUrl rather than a regex
    - Dates must match YYYY-MM-DD *and* be a real calendar date
    - `today` is a required argument: the year-founded bound never reads the clock
"""

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping

from pydantic import AnyUrl, TypeAdapter, ValidationError

from tracker.core.domain_types import (
    CompanySize, CompanyType,
    ContactGoal, ContactRelationship, ContactStatus,
    JobSource, JobStatus, JobType, SeniorityLevel,
    MIN_EXCITEMENT, MAX_EXCITEMENT,
    MIN_GLASSDOOR_RATING, MAX_GLASSDOOR_RATING, MIN_YEAR_FOUNDED,
)

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_URL_ADAPTER = TypeAdapter(AnyUrl)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of a validate_* call. is_valid is True iff errors is empty."""
    is_valid: bool
    errors: list[FieldError] = field(default_factory=list)

    def fields(self) -> set[str]:
        return {e.field for e in self.errors}

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [{"field": e.field, "message": e.message} for e in self.errors],
        }


# --- Entity validators ---------------------------------------------------------

def validate_job(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a job creation record (or a fully merged update)."""
    errors: list[FieldError] = []

    _require_text(errors, data, "job_title", "Job title is required")
    _require_text(errors, data, "company_id", "Company is required")
    _require_text(errors, data, "location", "Location is required")

    _require_member(errors, data, "job_type", JobType, "Invalid job type")
    _require_member(errors, data, "seniority_level", SeniorityLevel, "Invalid seniority level")
    _require_member(errors, data, "status", JobStatus, "Invalid job status")
    _require_member(errors, data, "source", JobSource, "Invalid job source")

    _check_excitement(errors, data.get("excitement_level"))
    _check_salary_range(errors, data.get("salary_min"), data.get("salary_max"))

    _check_url(errors, data, "job_url", "Invalid job URL format")
    _check_url(errors, data, "application_url", "Invalid application URL format")

    for name in ("date_posted", "date_applied", "deadline", "follow_up_date"):
        _check_date(errors, data, name)

    return _result(errors)


def validate_company(
    data: Mapping[str, Any], today: date,
) -> ValidationResult:
    """Validate a company creation record (or a fully merged update)."""
    errors: list[FieldError] = []

    _require_text(errors, data, "name", "Company name is required")

    _optional_member(errors, data, "size", CompanySize, "Invalid company size")
    _optional_member(errors, data, "type", CompanyType, "Invalid company type")

    _check_excitement(errors, data.get("excitement_level"))

    year = data.get("year_founded")
    if year is not None:
        if not _is_int(year):
            errors.append(FieldError("year_founded", "Year founded must be a whole number"))
        elif year < MIN_YEAR_FOUNDED:
            errors.append(FieldError("year_founded", "Year founded seems too early"))
        elif year > today.year:
            errors.append(FieldError("year_founded", "Year founded cannot be in the future"))

    rating = data.get("glassdoor_rating")
    if rating is not None and not (
        _is_number(rating) and MIN_GLASSDOOR_RATING <= rating <= MAX_GLASSDOOR_RATING
    ):
        errors.append(FieldError("glassdoor_rating", "Glassdoor rating must be between 1 and 5"))

    _check_url(errors, data, "website", "Invalid website URL format")
    _check_url(errors, data, "linkedin_url", "Invalid LinkedIn URL format")

    return _result(errors)


def validate_contact(data: Mapping[str, Any]) -> ValidationResult:
    """Validate a contact creation record (or a fully merged update)."""
    errors: list[FieldError] = []

    _require_text(errors, data, "full_name", "Full name is required")

    _require_member(errors, data, "relationship", ContactRelationship, "Invalid contact relationship")
    _require_member(errors, data, "goal", ContactGoal, "Invalid contact goal")
    _require_member(errors, data, "status", ContactStatus, "Invalid contact status")

    email = data.get("email")
    if email and not is_valid_email(email):
        errors.append(FieldError("email", "Invalid email format"))

    _check_url(errors, data, "linkedin_url", "Invalid LinkedIn URL format")
    _check_date(errors, data, "follow_up_date")

    return _result(errors)


# --- Primitive checks ----------------------------------------------------------

def is_valid_url(value: Any) -> bool:
    if not isinstance(value, str) or any(ch.isspace() for ch in value):
        return False
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and _EMAIL_RE.fullmatch(value) is not None


def is_valid_date(value: Any) -> bool:
    """True for a real calendar date written exactly as YYYY-MM-DD."""
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _require_text(errors: list[FieldError], data: Mapping, name: str, message: str) -> None:
    value = data.get(name)
    if not isinstance(value, str) or not value.strip():
        errors.append(FieldError(name, message))


def _require_member(
    errors: list[FieldError], data: Mapping, name: str, enum: type[Enum], message: str,
) -> None:
    if not _is_member(data.get(name), enum):
        errors.append(FieldError(name, message))


def _optional_member(
    errors: list[FieldError], data: Mapping, name: str, enum: type[Enum], message: str,
) -> None:
    value = data.get(name)
    if value is not None and value != "" and not _is_member(value, enum):
        errors.append(FieldError(name, message))


def _check_excitement(errors: list[FieldError], value: Any) -> None:
    if not (_is_int(value) and MIN_EXCITEMENT <= value <= MAX_EXCITEMENT):
        errors.append(FieldError(
            "excitement_level", "Excitement level must be between 1 and 5",
        ))


def _check_salary_range(errors: list[FieldError], low: Any, high: Any) -> None:
    low_ok = low is None or _is_int(low)
    high_ok = high is None or _is_int(high)
    if not low_ok:
        errors.append(FieldError("salary_min", "Minimum salary must be a whole number"))
    elif low is not None and low < 0:
        errors.append(FieldError("salary_min", "Minimum salary cannot be negative"))
    if not high_ok:
        errors.append(FieldError("salary_max", "Maximum salary must be a whole number"))
    elif high is not None and high < 0:
        errors.append(FieldError("salary_max", "Maximum salary cannot be negative"))
    if low_ok and high_ok and low is not None and high is not None and low > high:
        errors.append(FieldError(
            "salary_max", "Maximum salary must be greater than minimum salary",
        ))


def _check_url(errors: list[FieldError], data: Mapping, name: str, message: str) -> None:
    value = data.get(name)
    if value and not is_valid_url(value):
        errors.append(FieldError(name, message))


def _check_date(errors: list[FieldError], data: Mapping, name: str) -> None:
    value = data.get(name)
    if value and not is_valid_date(value):
        errors.append(FieldError(name, "Invalid date format"))


def _is_member(value: Any, enum: type[Enum]) -> bool:
    if isinstance(value, enum):
        return True
    return isinstance(value, str) and value in {m.value for m in enum}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _result(errors: list[FieldError]) -> ValidationResult:
    return ValidationResult(is_valid=not errors, errors=errors)
