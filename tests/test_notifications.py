"""Tests for notification derivation and the read/dismiss inbox."""

from datetime import datetime, timedelta

import pytest

from job_tracker.jobs.models import JobRecord, Status
from job_tracker.jobs.notifications import NotificationInbox, derive_notifications, unread_count

NOW = datetime(2024, 6, 10, 9, 0)


def day(offset: int) -> str:
    return (NOW + timedelta(days=offset)).date().isoformat()


def make_job(job_id, **kwargs):
    kwargs.setdefault("company", "Acme")
    kwargs.setdefault("role", "Engineer")
    return JobRecord(id=job_id, **kwargs)


def ids(notifications):
    return [n.id for n in notifications]


class TestInterviewReminders:
    @pytest.mark.parametrize("offset,expected", [
        (0, "interview-today-j1"),
        (1, "interview-tomorrow-j1"),
        (2, "interview-upcoming-j1"),
        (3, "interview-upcoming-j1"),
    ])
    def test_windows(self, offset, expected):
        jobs = [make_job("j1", interview_date=day(offset))]
        assert ids(derive_notifications(jobs, NOW)) == [expected]

    @pytest.mark.parametrize("offset", [-1, 4])
    def test_outside_window(self, offset):
        jobs = [make_job("j1", interview_date=day(offset))]
        assert derive_notifications(jobs, NOW) == []

    def test_message_mentions_company_and_role(self):
        [n] = derive_notifications([make_job("j1", interview_date=day(0))], NOW)
        assert "Acme" in n.message and "Engineer" in n.message
        assert n.job_id == "j1"
        assert n.date == NOW


class TestFollowUps:
    def test_overdue_is_due(self):
        jobs = [make_job("j1", follow_up_date=day(-3))]
        assert ids(derive_notifications(jobs, NOW)) == ["followup-due-j1"]

    def test_tomorrow(self):
        jobs = [make_job("j1", follow_up_date=day(1))]
        assert ids(derive_notifications(jobs, NOW)) == ["followup-tomorrow-j1"]

    def test_later_is_silent(self):
        assert derive_notifications([make_job("j1", follow_up_date=day(5))], NOW) == []

    def test_stale_application(self):
        jobs = [make_job("j1", application_date=day(-14))]
        [n] = derive_notifications(jobs, NOW)
        assert n.id == "stale-application-j1"
        assert "14 days" in n.message

    def test_stale_needs_applied_status(self):
        jobs = [make_job("j1", application_date=day(-20), status=Status.INTERVIEWING)]
        assert derive_notifications(jobs, NOW) == []

    def test_stale_skipped_when_follow_up_set(self):
        jobs = [make_job("j1", application_date=day(-20), follow_up_date=day(10))]
        assert derive_notifications(jobs, NOW) == []

    def test_recent_application_not_stale(self):
        assert derive_notifications([make_job("j1", application_date=day(-13))], NOW) == []


class TestAchievements:
    def test_milestone_every_ten(self):
        jobs = [make_job(f"j{i}") for i in range(10)]
        assert "milestone-10" in ids(derive_notifications(jobs, NOW))

    def test_no_milestone_at_eleven(self):
        jobs = [make_job(f"j{i}") for i in range(11)]
        assert not any(i.startswith("milestone") for i in ids(derive_notifications(jobs, NOW)))

    def test_weekly_goal(self):
        jobs = [make_job(f"j{i}", application_date=day(-i)) for i in range(5)]
        assert "weekly-goal-5" in ids(derive_notifications(jobs, NOW))

    def test_weekly_goal_ignores_older_applications(self):
        jobs = [make_job(f"j{i}", application_date=day(-8)) for i in range(5)]
        assert not any(i.startswith("weekly-goal") for i in ids(derive_notifications(jobs, NOW)))

    def test_weekly_goal_window_is_seven_days_counting_today(self):
        six_days_back = [make_job(f"j{i}", application_date=day(-6)) for i in range(5)]
        seven_days_back = [make_job(f"j{i}", application_date=day(-7)) for i in range(5)]
        assert "weekly-goal-5" in ids(derive_notifications(six_days_back, NOW))
        assert not any(i.startswith("weekly-goal") for i in ids(derive_notifications(seven_days_back, NOW)))


class TestDerivation:
    def test_empty(self):
        assert derive_notifications([], NOW) == []

    def test_deterministic(self):
        jobs = [
            make_job("j1", interview_date=day(0)),
            make_job("j2", follow_up_date=day(-1)),
            make_job("j3", application_date=day(-30)),
        ]
        first = derive_notifications(jobs, NOW)
        second = derive_notifications(jobs, NOW)
        assert first == second
        assert ids(first) == ["interview-today-j1", "followup-due-j2", "stale-application-j3"]

    def test_reminders_precede_achievements(self):
        jobs = [make_job(f"j{i}", application_date=day(-1)) for i in range(4)]
        jobs.append(make_job("j4", application_date=day(0), interview_date=day(0)))
        notifications = derive_notifications(jobs, NOW)
        assert ids(notifications) == ["interview-today-j4", "weekly-goal-5"]
        assert {n.date for n in notifications} == {NOW}


class TestNotificationInbox:
    def setup_method(self):
        self.notifications = derive_notifications([
            make_job("j1", interview_date=day(0)),
            make_job("j2", follow_up_date=day(-1)),
        ], NOW)

    def test_mark_read(self):
        inbox = NotificationInbox()
        inbox.mark_read("interview-today-j1")
        applied = inbox.apply(self.notifications)
        assert unread_count(applied) == 1

    def test_mark_all_read(self):
        inbox = NotificationInbox()
        inbox.mark_all_read(self.notifications)
        assert unread_count(inbox.apply(self.notifications)) == 0

    def test_delete_hides(self):
        inbox = NotificationInbox()
        inbox.delete("followup-due-j2")
        assert ids(inbox.apply(self.notifications)) == ["interview-today-j1"]

    def test_state_survives_recomputation(self):
        inbox = NotificationInbox()
        inbox.mark_read("interview-today-j1")
        restored = NotificationInbox.from_session(inbox.to_session())
        recomputed = derive_notifications([make_job("j1", interview_date=day(0))], NOW)
        assert restored.apply(recomputed)[0].is_read

    def test_retain_drops_stale_ids(self):
        inbox = NotificationInbox()
        inbox.mark_read("interview-today-j1")
        inbox.mark_read("interview-today-gone")
        inbox.delete("followup-due-j2")
        inbox.delete("milestone-10")
        inbox.retain(n.id for n in self.notifications)
        assert inbox.to_session() == {"read": ["interview-today-j1"], "deleted": ["followup-due-j2"]}

    def test_from_empty_session(self):
        inbox = NotificationInbox.from_session(None)
        assert inbox.apply(self.notifications) == self.notifications
