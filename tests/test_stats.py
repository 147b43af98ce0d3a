"""Tests for statistics aggregation."""

from datetime import datetime, timedelta, timezone

import pytest

from job_tracker.jobs.models import JobRecord, Status
from job_tracker.jobs.stats import compute_stats, jobs_in_range, status_breakdown, week_jobs

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


def make_job(status, salary="", days_ago=0, application_date="", response_date=""):
    return JobRecord(
        company="Acme",
        role="Engineer",
        status=status,
        salary=salary,
        application_date=application_date,
        response_date=response_date,
        created_at=NOW - timedelta(days=days_ago),
    )


class TestComputeStats:
    def test_empty_is_all_zero(self):
        stats = compute_stats([], NOW)
        assert stats.total == 0
        assert stats.response_rate == 0
        assert stats.success_rate == 0
        assert stats.avg_salary == 0
        assert stats.avg_days_to_response == 0
        assert stats.weekly_progress == 0

    def test_counts_and_rates(self):
        jobs = [
            make_job(Status.APPLIED),
            make_job(Status.APPLIED),
            make_job(Status.INTERVIEWING),
            make_job(Status.OFFER),
        ]
        stats = compute_stats(jobs, NOW)
        assert (stats.applied, stats.interviewing, stats.offers, stats.rejected) == (2, 1, 1, 0)
        assert stats.response_rate == pytest.approx(50.0)
        assert stats.success_rate == pytest.approx(25.0)

    def test_avg_salary_skips_blank_and_bad(self):
        jobs = [
            make_job(Status.APPLIED, salary="100000"),
            make_job(Status.APPLIED, salary="50000"),
            make_job(Status.APPLIED, salary=""),
            make_job(Status.APPLIED, salary="negotiable"),
        ]
        assert compute_stats(jobs, NOW).avg_salary == pytest.approx(75000)

    def test_avg_days_to_response(self):
        jobs = [
            make_job(Status.REJECTED, application_date="2024-05-01", response_date="2024-05-11"),
            make_job(Status.OFFER, application_date="2024-05-01", response_date="2024-05-05"),
            make_job(Status.APPLIED, application_date="2024-05-01"),
        ]
        assert compute_stats(jobs, NOW).avg_days_to_response == pytest.approx(7.0)

    def test_weekly_progress_is_trailing_seven_days(self):
        jobs = [
            make_job(Status.APPLIED, days_ago=0),
            make_job(Status.APPLIED, days_ago=6),
            make_job(Status.APPLIED, days_ago=7),
        ]
        stats = compute_stats(jobs, NOW, weekly_goal=3)
        assert stats.weekly_progress == 2
        assert stats.weekly_goal == 3

    def test_to_dict(self):
        d = compute_stats([make_job(Status.OFFER)], NOW).to_dict()
        assert d["offers"] == 1
        assert d["weekly_goal"] == 10


class TestHelpers:
    def test_week_jobs(self):
        jobs = [make_job(Status.APPLIED, days_ago=d) for d in (1, 3, 10)]
        assert len(week_jobs(jobs, NOW)) == 2

    def test_jobs_in_range(self):
        jobs = [make_job(Status.APPLIED, days_ago=d) for d in (1, 3, 10)]
        found = jobs_in_range(jobs, NOW - timedelta(days=5), NOW)
        assert len(found) == 2

    def test_status_breakdown(self):
        stats = compute_stats([make_job(Status.APPLIED), make_job(Status.OFFER)], NOW)
        rows = dict((name, pct) for name, _, pct in status_breakdown(stats))
        assert rows["Applied"] == pytest.approx(50.0)
        assert rows["Rejected"] == 0
