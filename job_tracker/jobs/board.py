"""JobBoard: owns one user's in-memory job list and every mutation of it.

Writes always reach the store before the local list changes, so a failed
write leaves the list matching the last known-good stored state.
"""

import logging
import random
from dataclasses import replace
from datetime import datetime, timezone

from job_tracker.errors import NotFoundError, StoreError, ValidationError
from job_tracker.jobs.filters import JobQuery, filter_jobs
from job_tracker.jobs.models import JobRecord, Notification
from job_tracker.jobs.notifications import derive_notifications
from job_tracker.jobs.rate_limit import ActionRateLimiter
from job_tracker.jobs.stats import DEFAULT_WEEKLY_GOAL, Stats, compute_stats
from job_tracker.jobs.validation import parse_bool, parse_tags, validate_job_form
from job_tracker.jobs.workflow import Toast, TransitionResult, plan_transition

logger = logging.getLogger("job_tracker.board")

CALENDAR_DATE_FIELDS = ("application_date", "interview_date", "follow_up_date")
BULK_FIELDS = ("status", "priority", "is_favorite", "is_remote")


class JobBoard:
    def __init__(
        self,
        store,
        owner_id: int,
        limiter: ActionRateLimiter | None = None,
        calendar=None,
        rng: random.Random | None = None,
        weekly_goal: int = DEFAULT_WEEKLY_GOAL,
    ):
        self.store = store
        self.owner_id = owner_id
        self.limiter = limiter or ActionRateLimiter()
        self.calendar = calendar
        self.rng = rng
        self.weekly_goal = weekly_goal
        self.jobs: list[JobRecord] = []

    def load(self) -> list[JobRecord]:
        self.jobs = self.store.list_for_owner(self.owner_id)
        return self.jobs

    def get(self, job_id: str) -> JobRecord:
        for job in self.jobs:
            if job.id == job_id:
                return job
        raise NotFoundError(f"Job not found: {job_id}")

    def _replace_local(self, job: JobRecord) -> None:
        self.jobs = [job if j.id == job.id else j for j in self.jobs]

    # --- mutations -------------------------------------------------------

    def add(self, form) -> tuple[JobRecord, Toast]:
        self.limiter.check()
        fields = validate_job_form(form)

        job = self.store.add(self.owner_id, fields)
        job = self._sync_calendar(job)
        self.jobs = [job] + self.jobs
        logger.info("User %d added job %s (%s)", self.owner_id, job.id, job.company)
        return job, Toast("success", f"Successfully added application for {job.company}!")

    def update(self, job_id: str, form) -> tuple[JobRecord, Toast]:
        self.limiter.check()
        current = self.get(job_id)
        fields = validate_job_form(form)

        self.store.update(self.owner_id, job_id, fields)
        job = replace(current, **fields)
        if any(getattr(job, f) != getattr(current, f) for f in CALENDAR_DATE_FIELDS):
            job = self._resync_calendar(job)
        self._replace_local(job)
        return job, Toast("success", f"Successfully updated {job.company}!")

    def delete(self, job_id: str) -> Toast:
        self.limiter.check()
        job = self.get(job_id)

        self.store.delete(self.owner_id, job_id)
        self.jobs = [j for j in self.jobs if j.id != job_id]
        if self.calendar is not None and job.google_calendar_events:
            if not self.calendar.remove_events(job.google_calendar_events.values()):
                logger.warning("Some calendar events for deleted job %s could not be removed", job_id)
        return Toast("info", f"Deleted application for {job.company or 'job'}")

    def move(self, job_id: str, new_status) -> TransitionResult:
        """Drag-and-drop status change. Moving to the current status does nothing."""
        job = self.get(job_id)
        result = plan_transition(job, new_status, self.rng)
        if not result.changed:
            return result

        self.store.update(self.owner_id, job_id, {"status": result.job.status})
        self._replace_local(result.job)
        logger.info(
            "User %d moved job %s: %s -> %s",
            self.owner_id, job_id, job.status.value, result.job.status.value,
        )
        return result

    def bulk_update(self, job_ids: list[str], updates: dict) -> Toast:
        """Apply the same field updates to several jobs as one unit."""
        self.limiter.check()
        unknown = [k for k in updates if k not in BULK_FIELDS]
        if unknown:
            raise ValidationError({k: "Cannot be changed in bulk." for k in unknown})
        if not job_ids:
            raise ValidationError({"job_ids": "Select at least one job."})

        fields = validate_job_form(updates, partial=True)
        for job_id in job_ids:
            self.get(job_id)

        self._commit_bulk({job_id: fields for job_id in job_ids})
        count = len(job_ids)
        return Toast("success", f"Successfully updated {count} job{'s' if count > 1 else ''}!")

    def bulk_add_tag(self, job_ids: list[str], tag: str) -> Toast:
        self.limiter.check()
        tags = parse_tags(tag)
        if not tags:
            raise ValidationError({"tag": "Tag cannot be empty."})
        tag = tags[0]

        updates = {}
        for job_id in job_ids:
            job = self.get(job_id)
            if tag not in job.tags:
                updates[job_id] = {"tags": job.tags + [tag]}
        if updates:
            self._commit_bulk(updates)
        return Toast("success", f"Tagged {len(updates)} job{'s' if len(updates) != 1 else ''} with '{tag}'")

    def _commit_bulk(self, updates: dict[str, dict]) -> None:
        # Store applies everything in one transaction; local state follows only on success
        self.store.bulk_update(self.owner_id, updates)
        for job_id, fields in updates.items():
            self._replace_local(replace(self.get(job_id), **fields))

    # --- calendar --------------------------------------------------------

    def _sync_calendar(self, job: JobRecord) -> JobRecord:
        if self.calendar is None or not any(getattr(job, f) for f in CALENDAR_DATE_FIELDS):
            return job
        events = self.calendar.sync_job(job)
        if not events:
            return job
        try:
            self.store.update(self.owner_id, job.id, {"google_calendar_events": events})
        except StoreError:
            logger.warning("Could not record calendar events for job %s", job.id)
            return job
        return replace(job, google_calendar_events=events)

    def _resync_calendar(self, job: JobRecord) -> JobRecord:
        if self.calendar is None:
            return job
        if job.google_calendar_events:
            self.calendar.remove_events(job.google_calendar_events.values())
            job = replace(job, google_calendar_events={})
            try:
                self.store.update(self.owner_id, job.id, {"google_calendar_events": {}})
            except StoreError:
                logger.warning("Could not clear calendar events for job %s", job.id)
        return self._sync_calendar(job)

    # --- views -----------------------------------------------------------

    def filtered(self, query: JobQuery, now: datetime | None = None) -> list[JobRecord]:
        return filter_jobs(self.jobs, query, now)

    def stats(self, now: datetime | None = None) -> Stats:
        return compute_stats(self.jobs, now, self.weekly_goal)

    def notifications(self, now: datetime | None = None) -> list[Notification]:
        return derive_notifications(self.jobs, now or datetime.now(timezone.utc))


def bulk_updates_from_action(action: str, value) -> dict:
    """Translate a bulk action from the board UI into field updates."""
    if action == "status":
        return {"status": value}
    if action == "priority":
        return {"priority": value}
    if action == "favorite":
        return {"is_favorite": parse_bool(value)}
    if action == "remote":
        return {"is_remote": parse_bool(value)}
    raise ValidationError({"action": f"Unknown bulk action: {action}"})
