"""Calendar view data: dated job events and a Sunday-first month grid."""

import calendar
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from job_tracker.jobs.models import CalendarEvent, JobRecord
from job_tracker.utils.dates import parse_datetime

# event type -> (job date attribute, title prefix, color)
_EVENT_KINDS = (
    ("application", "application_date", "Applied", "blue"),
    ("interview", "interview_date", "Interview", "yellow"),
    ("followup", "follow_up_date", "Follow-up", "purple"),
)


def calendar_events(jobs: Iterable[JobRecord]) -> list[CalendarEvent]:
    events = []
    for job in jobs:
        for event_type, attr, prefix, color in _EVENT_KINDS:
            when = parse_datetime(getattr(job, attr))
            if when is None:
                continue
            events.append(CalendarEvent(
                id=f"{job.id}-{event_type}",
                title=f"{prefix}: {job.company}",
                date=when,
                type=event_type,
                job_id=job.id,
                color=color,
            ))
    return events


def events_by_day(events: Iterable[CalendarEvent]) -> dict[date, list[CalendarEvent]]:
    grouped: dict[date, list[CalendarEvent]] = defaultdict(list)
    for event in events:
        grouped[event.date.date()].append(event)
    return dict(grouped)


def month_grid(year: int, month: int) -> list[list[date]]:
    """Weeks (Sunday to Saturday) covering the month, padded with adjacent days."""
    return calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
