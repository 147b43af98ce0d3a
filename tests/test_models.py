"""Tests for data models."""

from datetime import datetime, timezone

import pytest

from job_tracker.jobs.models import JobRecord, Status


class TestStatus:
    def test_parse_values(self):
        assert Status.parse("Applied") is Status.APPLIED
        assert Status.parse("interviewing") is Status.INTERVIEWING
        assert Status.parse(Status.REJECTED) is Status.REJECTED

    def test_accepted_is_offer(self):
        assert Status.parse("Accepted") is Status.OFFER
        assert Status.parse("accepted") is Status.OFFER

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            Status.parse("Ghosted")


class TestJobRecord:
    def test_defaults(self):
        job = JobRecord(company="Acme", role="Engineer")
        assert job.status is Status.APPLIED
        assert job.tags == []
        assert job.google_calendar_events == {}
        assert not job.is_remote

    def test_status_string_is_parsed(self):
        job = JobRecord(company="Acme", role="Engineer", status="Accepted")
        assert job.status is Status.OFFER

    def test_to_dict(self):
        created = datetime(2024, 6, 10, 9, 30, tzinfo=timezone.utc)
        job = JobRecord(
            company="Acme",
            role="Engineer",
            id="abc",
            uid=7,
            status=Status.INTERVIEWING,
            tags=["python"],
            created_at=created,
        )
        d = job.to_dict()
        assert d["company"] == "Acme"
        assert d["status"] == "Interviewing"
        assert d["tags"] == ["python"]
        assert d["created_at"] == created.isoformat()

    def test_from_dict_ignores_unknown_keys(self):
        job = JobRecord.from_dict({
            "company": "Acme",
            "role": "Engineer",
            "status": "Offer",
            "created_at": "2024-06-10T09:30:00+00:00",
            "legacy_field": "ignored",
        })
        assert job.status is Status.OFFER
        assert job.created_at == datetime(2024, 6, 10, 9, 30, tzinfo=timezone.utc)
