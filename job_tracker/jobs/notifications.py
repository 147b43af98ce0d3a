"""Reminder and achievement notifications derived from the job list.

Notifications are recomputed from scratch whenever the job set changes. Their
ids depend only on the job id (or count) and the rule that fired, so read and
dismissed state kept by ``NotificationInbox`` survives recomputation.
"""

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from job_tracker.jobs.models import JobRecord, Notification, Status
from job_tracker.utils.dates import day_delta, within_trailing_days

STALE_AFTER_DAYS = 14
UPCOMING_INTERVIEW_DAYS = 3
MILESTONE_EVERY = 10
WEEKLY_GOAL_THRESHOLD = 5
WEEK_DAYS = 7


def _interview_notification(job: JobRecord, now: datetime) -> Notification | None:
    days = day_delta(job.interview_date, now)
    if days is None:
        return None

    if days == 0:
        return Notification(
            id=f"interview-today-{job.id}",
            type="interview",
            title="Interview Today!",
            message=f"You have an interview with {job.company} today for the {job.role} position.",
            date=now,
            job_id=job.id,
        )
    if days == 1:
        return Notification(
            id=f"interview-tomorrow-{job.id}",
            type="interview",
            title="Interview Tomorrow",
            message=(
                f"Don't forget about your interview with {job.company} tomorrow "
                f"for the {job.role} position."
            ),
            date=now,
            job_id=job.id,
        )
    if 2 <= days <= UPCOMING_INTERVIEW_DAYS:
        return Notification(
            id=f"interview-upcoming-{job.id}",
            type="interview",
            title=f"Interview in {days} days",
            message=f"Upcoming interview with {job.company} for the {job.role} position.",
            date=now,
            job_id=job.id,
        )
    return None


def _followup_notification(job: JobRecord, now: datetime) -> Notification | None:
    days = day_delta(job.follow_up_date, now)
    if days is None:
        return None

    if days <= 0:
        return Notification(
            id=f"followup-due-{job.id}",
            type="followup",
            title="Follow-up Due",
            message=f"Time to follow up with {job.company} about your {job.role} application.",
            date=now,
            job_id=job.id,
        )
    if days == 1:
        return Notification(
            id=f"followup-tomorrow-{job.id}",
            type="followup",
            title="Follow-up Tomorrow",
            message=f"Remember to follow up with {job.company} tomorrow.",
            date=now,
            job_id=job.id,
        )
    return None


def _stale_notification(job: JobRecord, now: datetime) -> Notification | None:
    if job.status != Status.APPLIED or job.follow_up_date:
        return None
    days = day_delta(job.application_date, now)
    if days is None:
        return None

    age = -days
    if age < STALE_AFTER_DAYS:
        return None
    return Notification(
        id=f"stale-application-{job.id}",
        type="followup",
        title="Application Follow-up Suggested",
        message=f"It's been {age} days since you applied to {job.company}. Consider following up.",
        date=now,
        job_id=job.id,
    )


def _achievement_notifications(jobs: list[JobRecord], now: datetime) -> list[Notification]:
    found = []
    total = len(jobs)
    if total > 0 and total % MILESTONE_EVERY == 0:
        found.append(Notification(
            id=f"milestone-{total}",
            type="achievement",
            title="Milestone Reached!",
            message=f"Congratulations! You've reached {total} job applications.",
            date=now,
        ))

    this_week = sum(1 for job in jobs if within_trailing_days(job.application_date, now, WEEK_DAYS))
    if this_week >= WEEKLY_GOAL_THRESHOLD:
        found.append(Notification(
            id=f"weekly-goal-{this_week}",
            type="achievement",
            title="Weekly Goal Achieved!",
            message=f"Great job! You've applied to {this_week} jobs this week.",
            date=now,
        ))
    return found


def derive_notifications(jobs: Iterable[JobRecord], now: datetime) -> list[Notification]:
    """Build the notification list for jobs as of now.

    Per-job reminders come first, in job order, followed by achievements.
    """
    jobs = list(jobs)
    found: list[Notification] = []

    for job in jobs:
        for rule in (_interview_notification, _followup_notification, _stale_notification):
            notification = rule(job, now)
            if notification is not None:
                found.append(notification)

    found.extend(_achievement_notifications(jobs, now))

    return found


def unread_count(notifications: Iterable[Notification]) -> int:
    return sum(1 for n in notifications if not n.is_read)


class NotificationInbox:
    """Read and dismissed state for derived notifications.

    Held per browser session; job records are never touched.
    """

    def __init__(self, read_ids: Iterable[str] = (), deleted_ids: Iterable[str] = ()):
        self.read_ids: set[str] = set(read_ids)
        self.deleted_ids: set[str] = set(deleted_ids)

    def mark_read(self, notification_id: str) -> None:
        self.read_ids.add(notification_id)

    def mark_all_read(self, notifications: Iterable[Notification]) -> None:
        self.read_ids.update(n.id for n in notifications)

    def delete(self, notification_id: str) -> None:
        self.deleted_ids.add(notification_id)

    def retain(self, live_ids: Iterable[str]) -> None:
        """Forget state for notifications that are no longer derived."""
        live = set(live_ids)
        self.read_ids &= live
        self.deleted_ids &= live

    def apply(self, notifications: Iterable[Notification]) -> list[Notification]:
        """Drop deleted notifications and set is_read from local state."""
        return [
            replace(n, is_read=n.is_read or n.id in self.read_ids)
            for n in notifications
            if n.id not in self.deleted_ids
        ]

    def to_session(self) -> dict:
        return {"read": sorted(self.read_ids), "deleted": sorted(self.deleted_ids)}

    @classmethod
    def from_session(cls, data: dict | None) -> "NotificationInbox":
        data = data or {}
        return cls(read_ids=data.get("read", []), deleted_ids=data.get("deleted", []))
