"""Google Calendar sync for interview, follow-up and application dates.

Sync is best effort: any failure is logged and the affected event category is
left out of the returned mapping, so a failed sync never blocks saving a job.
"""

import logging
from datetime import timedelta
from typing import Optional

import requests

from job_tracker.jobs.models import JobRecord
from job_tracker.utils.dates import parse_datetime
from job_tracker.utils.http_client import create_session

logger = logging.getLogger("job_tracker.calendar")

API_BASE = "https://www.googleapis.com/calendar/v3"

EVENT_TYPES = ("application", "interview", "followup")

# event type -> (job date attribute, summary prefix, Google colorId)
_EVENT_SPECS = {
    "application": ("application_date", "Applied", "1"),
    "interview": ("interview_date", "Interview", "5"),
    "followup": ("follow_up_date", "Follow-up", "10"),
}


def _description(job: JobRecord, event_type: str) -> str:
    lines = [f"Company: {job.company}", f"Position: {job.role}", f"Status: {job.status.value}"]
    if event_type == "interview":
        lines.append("Prepare: research the company, review the job description, prepare questions.")
    elif event_type == "followup":
        lines.append("Send a short, polite follow-up about your application.")
    if job.location:
        lines.append(f"Location: {job.location}")
    if job.salary:
        lines.append(f"Salary: {job.salary}")
    if job.link:
        lines.append(f"Job posting: {job.link}")
    if job.notes:
        lines.append("")
        lines.append(job.notes)
    return "\n".join(lines)


class GoogleCalendarClient:
    """Minimal Calendar API v3 client authenticated with an OAuth access token."""

    def __init__(
        self,
        access_token: str,
        calendar_id: str = "primary",
        time_zone: str = "UTC",
        session: Optional[requests.Session] = None,
        timeout: int = 10,
    ):
        self.access_token = access_token
        self.calendar_id = calendar_id
        self.time_zone = time_zone
        self.session = session or create_session()
        self.timeout = timeout

    @property
    def _events_url(self) -> str:
        return f"{API_BASE}/calendars/{self.calendar_id}/events"

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.access_token}"}

    def build_event(self, job: JobRecord, event_type: str) -> dict | None:
        """Build the event body for job, or None if the job lacks that date."""
        if event_type not in _EVENT_SPECS:
            return None
        attr, prefix, color_id = _EVENT_SPECS[event_type]
        start = parse_datetime(getattr(job, attr))
        if start is None:
            return None

        is_interview = event_type == "interview"
        end = start + (timedelta(hours=1) if is_interview else timedelta(minutes=30))

        event = {
            "summary": f"{prefix}: {job.company} - {job.role}",
            "description": _description(job, event_type),
            "start": {"dateTime": start.isoformat(), "timeZone": self.time_zone},
            "end": {"dateTime": end.isoformat(), "timeZone": self.time_zone},
            "colorId": color_id,
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": 60 if is_interview else 1440},
                    {"method": "popup", "minutes": 15 if is_interview else 60},
                ],
            },
            "extendedProperties": {
                "private": {
                    "source": "job-tracker-app",
                    "jobId": job.id,
                    "eventType": event_type,
                    "company": job.company,
                    "role": job.role,
                }
            },
            "transparency": "opaque" if is_interview else "transparent",
            "visibility": "private",
        }
        if is_interview and (job.location or job.is_remote):
            event["location"] = job.location or "Remote Interview"
        if job.link:
            event["source"] = {"title": f"{job.company} job posting", "url": job.link}
        return event

    def create_event(self, event: dict) -> str | None:
        """Insert event. Returns the new event id, or None on failure."""
        try:
            response = self.session.post(
                self._events_url, json=event, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
            return response.json().get("id")
        except (requests.RequestException, ValueError) as e:
            logger.warning("Calendar event creation failed: %s", e)
            return None

    def delete_event(self, event_id: str) -> bool:
        try:
            response = self.session.delete(
                f"{self._events_url}/{event_id}", headers=self._headers(), timeout=self.timeout
            )
            # 410 Gone: already deleted on the calendar side
            if response.status_code == 410:
                return True
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.warning("Calendar event %s deletion failed: %s", event_id, e)
            return False

    def sync_job(self, job: JobRecord) -> dict[str, str]:
        """Create events for each dated category. Returns category -> event id for successes."""
        events: dict[str, str] = {}
        for event_type in EVENT_TYPES:
            body = self.build_event(job, event_type)
            if body is None:
                continue
            event_id = self.create_event(body)
            if event_id:
                events[event_type] = event_id
        if events:
            logger.info("Synced %d calendar event(s) for job %s", len(events), job.id)
        return events

    def remove_events(self, event_ids) -> bool:
        """Delete each event id. True if every deletion succeeded."""
        all_deleted = True
        for event_id in event_ids:
            if event_id and not self.delete_event(event_id):
                all_deleted = False
        return all_deleted
