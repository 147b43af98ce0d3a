"""Tests for job form validation."""

import pytest

from job_tracker.errors import ValidationError
from job_tracker.jobs.models import Status
from job_tracker.jobs.validation import parse_bool, parse_tags, validate_job_form


class TestParseHelpers:
    def test_parse_bool(self):
        assert parse_bool("on")
        assert parse_bool("TRUE")
        assert parse_bool(True)
        assert not parse_bool("")
        assert not parse_bool(None)
        assert not parse_bool("off")

    def test_parse_tags(self):
        assert parse_tags("python, remote ,python,, ") == ["python", "remote"]
        assert parse_tags(["a", "b", "a"]) == ["a", "b"]
        assert parse_tags("") == []


class TestValidateJobForm:
    def test_minimal_form(self):
        fields = validate_job_form({"company": "Acme", "role": "Engineer"})
        assert fields["company"] == "Acme"
        assert fields["role"] == "Engineer"
        assert fields["status"] is Status.APPLIED
        assert fields["tags"] == []
        assert fields["is_remote"] is False

    def test_company_and_role_required(self):
        with pytest.raises(ValidationError) as exc:
            validate_job_form({"company": "  ", "role": ""})
        assert set(exc.value.errors) == {"company", "role"}

    def test_name_length_limit(self):
        with pytest.raises(ValidationError) as exc:
            validate_job_form({"company": "A" * 101, "role": "Engineer"})
        assert "company" in exc.value.errors

    def test_rejects_non_http_link(self):
        with pytest.raises(ValidationError) as exc:
            validate_job_form({"company": "Acme", "role": "Engineer", "link": "javascript:alert(1)"})
        assert "link" in exc.value.errors

    def test_salary_strips_commas(self):
        fields = validate_job_form({"company": "Acme", "role": "Engineer", "salary": "85,000"})
        assert fields["salary"] == "85000"

    def test_salary_must_be_numeric(self):
        with pytest.raises(ValidationError) as exc:
            validate_job_form({"company": "Acme", "role": "Engineer", "salary": "lots"})
        assert "salary" in exc.value.errors

    def test_notes_length_limit(self):
        with pytest.raises(ValidationError) as exc:
            validate_job_form({"company": "Acme", "role": "Engineer", "notes": "x" * 1001})
        assert "notes" in exc.value.errors

    def test_bad_date(self):
        with pytest.raises(ValidationError) as exc:
            validate_job_form({"company": "Acme", "role": "Engineer", "interview_date": "next tuesday"})
        assert "interview_date" in exc.value.errors

    def test_unknown_priority(self):
        with pytest.raises(ValidationError) as exc:
            validate_job_form({"company": "Acme", "role": "Engineer", "priority": "urgent"})
        assert "priority" in exc.value.errors

    def test_markup_stripped_from_names(self):
        fields = validate_job_form({"company": "<Acme>", "role": "Engineer"})
        assert fields["company"] == "Acme"

    def test_partial_only_returns_present_fields(self):
        fields = validate_job_form({"priority": "High"}, partial=True)
        assert fields == {"priority": "high"}

    def test_partial_status(self):
        assert validate_job_form({"status": "Accepted"}, partial=True) == {"status": Status.OFFER}
        with pytest.raises(ValidationError):
            validate_job_form({"status": ""}, partial=True)
