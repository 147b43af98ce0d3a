"""CSV export of job applications and feedback."""

import csv
from collections.abc import Iterable
from datetime import datetime
from typing import TextIO

from job_tracker.jobs.models import JobRecord

CSV_COLUMNS = [
    ("id", "ID"),
    ("company", "Company"),
    ("role", "Role"),
    ("status", "Status"),
    ("priority", "Priority"),
    ("salary", "Salary"),
    ("location", "Location"),
    ("is_remote", "Remote"),
    ("is_favorite", "Favorite"),
    ("job_type", "Job Type"),
    ("industry", "Industry"),
    ("company_size", "Company Size"),
    ("tags", "Tags"),
    ("application_date", "Application Date"),
    ("interview_date", "Interview Date"),
    ("follow_up_date", "Follow-up Date"),
    ("response_date", "Response Date"),
    ("link", "Link"),
    ("notes", "Notes"),
    ("created_at", "Created At"),
]


def _cell(value) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, list):
        return "; ".join(value)
    if value is None:
        return ""
    return str(value)


def write_jobs_csv(jobs: Iterable[JobRecord], fh: TextIO) -> int:
    """Write jobs as CSV with a header row. Returns the number of data rows."""
    writer = csv.writer(fh)
    writer.writerow([header for _, header in CSV_COLUMNS])
    count = 0
    for job in jobs:
        data = job.to_dict()
        writer.writerow([_cell(data.get(key)) for key, _ in CSV_COLUMNS])
        count += 1
    return count


FEEDBACK_CSV_COLUMNS = [
    ("id", "ID"),
    ("type", "Type"),
    ("title", "Title"),
    ("description", "Description"),
    ("email", "Email"),
    ("status", "Status"),
    ("priority", "Priority"),
    ("assigned_to", "Assigned To"),
    ("created_at", "Timestamp"),
    ("url", "URL"),
    ("user_agent", "User Agent"),
]


def write_feedback_csv(items: Iterable, fh: TextIO) -> int:
    """Write feedback rows as CSV with a header row. Returns the number of data rows."""
    writer = csv.writer(fh)
    writer.writerow([header for _, header in FEEDBACK_CSV_COLUMNS])
    count = 0
    for item in items:
        row = []
        for key, _ in FEEDBACK_CSV_COLUMNS:
            value = getattr(item, key, None)
            row.append(value.isoformat() if isinstance(value, datetime) else _cell(value))
        writer.writerow(row)
        count += 1
    return count
