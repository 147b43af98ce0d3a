"""Aggregate statistics over a user's job list."""

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from job_tracker.jobs.models import STATUSES, JobRecord, Status
from job_tracker.utils.dates import parse_datetime, within_trailing_days
from job_tracker.utils.sanitize import parse_number

DEFAULT_WEEKLY_GOAL = 10
WEEK_DAYS = 7
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class Stats:
    total: int = 0
    applied: int = 0
    interviewing: int = 0
    offers: int = 0
    rejected: int = 0
    avg_salary: float = 0.0
    response_rate: float = 0.0
    avg_days_to_response: float = 0.0
    weekly_goal: int = DEFAULT_WEEKLY_GOAL
    weekly_progress: int = 0
    success_rate: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _percent(part: int, total: int) -> float:
    return part / total * 100 if total else 0.0


def _days_to_response(job: JobRecord) -> float | None:
    applied = parse_datetime(job.application_date)
    responded = parse_datetime(job.response_date)
    if applied is None or responded is None:
        return None
    if (applied.tzinfo is None) != (responded.tzinfo is None):
        applied = applied.replace(tzinfo=None)
        responded = responded.replace(tzinfo=None)
    return abs((responded - applied).total_seconds()) / SECONDS_PER_DAY


def week_jobs(jobs: Iterable[JobRecord], now: datetime) -> list[JobRecord]:
    """Jobs created in the rolling last seven days."""
    return [job for job in jobs if within_trailing_days(job.created_at, now, WEEK_DAYS)]


def jobs_in_range(jobs: Iterable[JobRecord], start: datetime, end: datetime) -> list[JobRecord]:
    """Jobs whose created_at lies in [start, end]."""
    found = []
    for job in jobs:
        created = job.created_at
        if created is None:
            continue
        if (created.tzinfo is None) != (start.tzinfo is None):
            created = created.replace(tzinfo=start.tzinfo)
        if start <= created <= end:
            found.append(job)
    return found


def compute_stats(
    jobs: Iterable[JobRecord],
    now: datetime | None = None,
    weekly_goal: int = DEFAULT_WEEKLY_GOAL,
) -> Stats:
    """Reduce jobs into counters and rates. Empty input gives all zeros."""
    jobs = list(jobs)
    now = now or datetime.now(timezone.utc)
    total = len(jobs)

    counts = {status: 0 for status in STATUSES}
    for job in jobs:
        counts[job.status] += 1

    salaries = [n for n in (parse_number(job.salary) for job in jobs if job.salary) if n is not None]
    response_days = [d for d in (_days_to_response(job) for job in jobs) if d is not None]

    return Stats(
        total=total,
        applied=counts[Status.APPLIED],
        interviewing=counts[Status.INTERVIEWING],
        offers=counts[Status.OFFER],
        rejected=counts[Status.REJECTED],
        avg_salary=_mean(salaries),
        response_rate=_percent(total - counts[Status.APPLIED], total),
        avg_days_to_response=_mean(response_days),
        weekly_goal=weekly_goal,
        weekly_progress=len(week_jobs(jobs, now)),
        success_rate=_percent(counts[Status.OFFER], total),
    )


def status_breakdown(stats: Stats) -> list[tuple[str, int, float]]:
    """(status, count, percent of total) rows for the analytics view."""
    rows = [
        (Status.APPLIED.value, stats.applied),
        (Status.INTERVIEWING.value, stats.interviewing),
        (Status.OFFER.value, stats.offers),
        (Status.REJECTED.value, stats.rejected),
    ]
    return [(name, count, _percent(count, stats.total)) for name, count in rows]
