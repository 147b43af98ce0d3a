"""Tests for Google Calendar sync and the calendar month view."""

from datetime import date
from unittest.mock import MagicMock

import requests

from job_tracker.calendar_sync import GoogleCalendarClient
from job_tracker.calendar_view import calendar_events, events_by_day, month_grid, shift_month
from job_tracker.jobs.models import JobRecord


def make_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


def make_job(**kwargs):
    kwargs.setdefault("company", "Acme")
    kwargs.setdefault("role", "Engineer")
    kwargs.setdefault("id", "job-1")
    return JobRecord(**kwargs)


class TestBuildEvent:
    def setup_method(self):
        self.client = GoogleCalendarClient("token", session=MagicMock(), time_zone="Asia/Manila")

    def test_interview_event(self):
        job = make_job(interview_date="2024-06-12T14:00:00", is_remote=True, link="https://acme.test/jobs/1")
        event = self.client.build_event(job, "interview")
        assert event["summary"] == "Interview: Acme - Engineer"
        assert event["colorId"] == "5"
        assert event["start"] == {"dateTime": "2024-06-12T14:00:00", "timeZone": "Asia/Manila"}
        assert event["end"]["dateTime"] == "2024-06-12T15:00:00"
        assert event["location"] == "Remote Interview"
        assert event["transparency"] == "opaque"
        assert event["extendedProperties"]["private"]["jobId"] == "job-1"
        assert event["source"]["url"] == "https://acme.test/jobs/1"

    def test_follow_up_is_half_hour(self):
        event = self.client.build_event(make_job(follow_up_date="2024-06-12"), "followup")
        assert event["colorId"] == "10"
        assert event["end"]["dateTime"] == "2024-06-12T00:30:00"
        assert "location" not in event

    def test_missing_date(self):
        assert self.client.build_event(make_job(), "interview") is None
        assert self.client.build_event(make_job(interview_date="2024-06-12"), "party") is None


class TestSync:
    def test_sync_creates_dated_events(self):
        session = MagicMock()
        session.post.side_effect = [make_response(payload={"id": "evt-a"}), make_response(payload={"id": "evt-i"})]
        client = GoogleCalendarClient("token", session=session)

        events = client.sync_job(make_job(application_date="2024-06-01", interview_date="2024-06-12"))

        assert events == {"application": "evt-a", "interview": "evt-i"}
        url = session.post.call_args.args[0]
        assert url == "https://www.googleapis.com/calendar/v3/calendars/primary/events"
        assert session.post.call_args.kwargs["headers"] == {"Authorization": "Bearer token"}

    def test_failed_category_left_out(self):
        session = MagicMock()
        session.post.side_effect = [requests.ConnectionError("down"), make_response(payload={"id": "evt-i"})]
        client = GoogleCalendarClient("token", session=session)

        events = client.sync_job(make_job(application_date="2024-06-01", interview_date="2024-06-12"))
        assert events == {"interview": "evt-i"}

    def test_total_failure_is_empty(self):
        session = MagicMock()
        session.post.return_value = make_response(401)
        client = GoogleCalendarClient("token", session=session)
        assert client.sync_job(make_job(interview_date="2024-06-12")) == {}

    def test_remove_events_treats_gone_as_deleted(self):
        session = MagicMock()
        session.delete.side_effect = [make_response(204), make_response(410)]
        client = GoogleCalendarClient("token", session=session)
        assert client.remove_events(["a", "b"])

    def test_remove_events_reports_failure(self):
        session = MagicMock()
        session.delete.side_effect = [make_response(500), make_response(204)]
        client = GoogleCalendarClient("token", session=session)
        assert not client.remove_events(["a", "b"])
        assert session.delete.call_count == 2


class TestCalendarView:
    def test_events_and_colors(self):
        job = make_job(application_date="2024-06-01", interview_date="2024-06-12", follow_up_date="2024-06-15")
        events = calendar_events([job])
        assert [(e.id, e.color) for e in events] == [
            ("job-1-application", "blue"),
            ("job-1-interview", "yellow"),
            ("job-1-followup", "purple"),
        ]
        assert events[1].title == "Interview: Acme"

    def test_events_by_day(self):
        jobs = [make_job(id="a", interview_date="2024-06-12"), make_job(id="b", follow_up_date="2024-06-12T10:00")]
        grouped = events_by_day(calendar_events(jobs))
        assert len(grouped[date(2024, 6, 12)]) == 2

    def test_month_grid_starts_sunday(self):
        weeks = month_grid(2024, 6)
        assert weeks[0][0] == date(2024, 5, 26)
        assert all(week[0].weekday() == 6 for week in weeks)
        assert all(len(week) == 7 for week in weeks)

    def test_shift_month(self):
        assert shift_month(2024, 1, -1) == (2023, 12)
        assert shift_month(2024, 12, 1) == (2025, 1)
        assert shift_month(2024, 6, 0) == (2024, 6)
