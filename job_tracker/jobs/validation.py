"""Validation of job form submissions at the system boundary."""

from collections.abc import Mapping

from job_tracker.errors import ValidationError
from job_tracker.jobs.models import EDITABLE_FIELDS, JOB_TYPES, PRIORITIES, Status
from job_tracker.utils.dates import parse_datetime
from job_tracker.utils.sanitize import (
    is_valid_url,
    parse_number,
    sanitize_company_name,
    sanitize_job_title,
    sanitize_notes,
    sanitize_text,
)

MAX_NAME_LENGTH = 100
MAX_NOTES_LENGTH = 1000
MAX_SHORT_TEXT_LENGTH = 200
MAX_TAG_LENGTH = 50

DATE_FIELDS = ("application_date", "interview_date", "follow_up_date", "response_date")
BOOL_FIELDS = ("is_remote", "is_favorite")
SHORT_TEXT_FIELDS = ("location", "industry", "company_size")

TRUTHY = {"on", "true", "1", "yes"}


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in TRUTHY


def parse_tags(value) -> list[str]:
    """Accept a comma-separated string or a list; trim and de-duplicate."""
    if not value:
        return []
    raw = value.split(",") if isinstance(value, str) else list(value)

    tags: list[str] = []
    for item in raw:
        tag = sanitize_text(str(item))[:MAX_TAG_LENGTH]
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def validate_job_form(data: Mapping, partial: bool = False) -> dict:
    """Return cleaned values for the editable fields present in data.

    With partial=False company and role are required and every editable
    field gets a value. Raises ValidationError listing every bad field.
    """
    errors: dict[str, str] = {}
    cleaned: dict = {}

    def present(name: str) -> bool:
        return not partial or name in data

    for name, sanitizer in (("company", sanitize_company_name), ("role", sanitize_job_title)):
        if not present(name):
            continue
        value = sanitizer(str(data.get(name) or ""))
        if not value:
            errors[name] = "This field is required."
        elif len(value) > MAX_NAME_LENGTH:
            errors[name] = f"Must be at most {MAX_NAME_LENGTH} characters."
        else:
            cleaned[name] = value

    if present("status"):
        raw = data.get("status")
        if raw in (None, "") and not partial:
            cleaned["status"] = Status.APPLIED
        else:
            try:
                cleaned["status"] = Status.parse(raw)
            except ValueError:
                errors["status"] = "Unknown status."

    if present("link"):
        link = str(data.get("link") or "").strip()
        if link and not is_valid_url(link):
            errors["link"] = "Must be a valid http or https URL."
        else:
            cleaned["link"] = link

    if present("notes"):
        notes = sanitize_notes(str(data.get("notes") or ""))
        if len(notes) > MAX_NOTES_LENGTH:
            errors["notes"] = f"Must be at most {MAX_NOTES_LENGTH} characters."
        else:
            cleaned["notes"] = notes

    if present("salary"):
        salary = str(data.get("salary") or "").strip().replace(",", "")
        if salary and parse_number(salary) is None:
            errors["salary"] = "Must be a number."
        else:
            cleaned["salary"] = salary

    for name in SHORT_TEXT_FIELDS:
        if present(name):
            value = sanitize_text(str(data.get(name) or ""))
            if len(value) > MAX_SHORT_TEXT_LENGTH:
                errors[name] = f"Must be at most {MAX_SHORT_TEXT_LENGTH} characters."
            else:
                cleaned[name] = value

    if present("job_type"):
        job_type = str(data.get("job_type") or "").strip().lower()
        if job_type and job_type not in JOB_TYPES:
            errors["job_type"] = f"Must be one of: {', '.join(JOB_TYPES)}."
        else:
            cleaned["job_type"] = job_type

    if present("priority"):
        priority = str(data.get("priority") or "").strip().lower()
        if priority and priority not in PRIORITIES:
            errors["priority"] = f"Must be one of: {', '.join(PRIORITIES)}."
        else:
            cleaned["priority"] = priority

    if present("tags"):
        cleaned["tags"] = parse_tags(data.get("tags"))

    for name in BOOL_FIELDS:
        if present(name):
            cleaned[name] = parse_bool(data.get(name))

    for name in DATE_FIELDS:
        if not present(name):
            continue
        value = str(data.get(name) or "").strip()
        if value and parse_datetime(value) is None:
            errors[name] = "Must be an ISO date (YYYY-MM-DD)."
        else:
            cleaned[name] = value

    if errors:
        raise ValidationError(errors)

    return {k: v for k, v in cleaned.items() if k in EDITABLE_FIELDS}
