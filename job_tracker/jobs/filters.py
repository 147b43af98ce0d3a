"""Search and filter predicate over job records."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone

from job_tracker.jobs.models import JobRecord, Status
from job_tracker.utils.dates import within_trailing_days

DATE_RANGES = {"all": None, "week": 7, "month": 30, "quarter": 90}


def _optional_bool(value) -> bool | None:
    text = str(value or "").strip().lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off"):
        return False
    return None


@dataclass
class JobQuery:
    """Filter configuration. None or "all" means the dimension is unset."""

    search_query: str = ""
    status: str = "all"
    tags: list[str] = field(default_factory=list)
    priority: str | None = None
    is_remote: bool | None = None
    is_favorite: bool | None = None
    job_type: str | None = None
    date_range: str = "all"

    @classmethod
    def from_params(cls, params: Mapping) -> "JobQuery":
        """Build a query from HTTP query parameters."""
        if hasattr(params, "getlist"):
            raw_tags = params.getlist("tag")
        else:
            raw_tags = params.get("tag") or []
            if isinstance(raw_tags, str):
                raw_tags = [raw_tags]

        status = (params.get("status") or "all").strip()
        if status != "all":
            try:
                status = Status.parse(status).value
            except ValueError:
                status = "all"

        date_range = (params.get("date_range") or "all").strip()
        if date_range not in DATE_RANGES:
            date_range = "all"

        return cls(
            search_query=(params.get("q") or "").strip(),
            status=status,
            tags=[t for t in raw_tags if t],
            priority=(params.get("priority") or None),
            is_remote=_optional_bool(params.get("remote")),
            is_favorite=_optional_bool(params.get("favorite")),
            job_type=(params.get("job_type") or None),
            date_range=date_range,
        )

    @property
    def is_active(self) -> bool:
        return self != JobQuery()


def _matches_search(job: JobRecord, search_query: str) -> bool:
    if not search_query:
        return True
    needle = search_query.lower()
    haystacks = (job.company, job.role, job.notes, job.location, job.industry)
    return any(needle in (text or "").lower() for text in haystacks)


def matches(job: JobRecord, query: JobQuery, now: datetime | None = None) -> bool:
    """True if job satisfies every active dimension of query."""
    if not _matches_search(job, query.search_query):
        return False
    if query.status != "all" and job.status != Status.parse(query.status):
        return False
    if query.tags and not any(tag in job.tags for tag in query.tags):
        return False
    if query.priority and job.priority != query.priority:
        return False
    if query.is_remote is not None and job.is_remote != query.is_remote:
        return False
    if query.is_favorite is not None and job.is_favorite != query.is_favorite:
        return False
    if query.job_type and job.job_type != query.job_type:
        return False

    days = DATE_RANGES.get(query.date_range)
    if days is not None:
        now = now or datetime.now(timezone.utc)
        if not within_trailing_days(job.created_at, now, days):
            return False

    return True


def filter_jobs(jobs: Iterable[JobRecord], query: JobQuery, now: datetime | None = None) -> list[JobRecord]:
    return [job for job in jobs if matches(job, query, now)]


def collect_tags(jobs: Iterable[JobRecord]) -> list[str]:
    """Distinct tags across jobs, sorted."""
    return sorted({tag for job in jobs for tag in job.tags})
