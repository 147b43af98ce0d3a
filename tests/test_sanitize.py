"""Tests for input sanitisation, date and currency utilities."""

from datetime import datetime, timedelta, timezone

from job_tracker.utils.currency import format_salary, get_country
from job_tracker.utils.dates import day_delta, parse_datetime, within_trailing_days
from job_tracker.utils.sanitize import (
    is_valid_email,
    is_valid_url,
    parse_number,
    sanitize_company_name,
    sanitize_email,
    sanitize_notes,
    sanitize_text,
    sanitize_url,
    validate_password,
)


class TestSanitizeText:
    def test_collapses_whitespace(self):
        assert sanitize_text("  Senior \t  Engineer \n") == "Senior Engineer"

    def test_strips_control_chars(self):
        assert sanitize_text("Acme\x00Corp") == "Acme Corp"

    def test_empty(self):
        assert sanitize_text("") == ""
        assert sanitize_text(None) == ""

    def test_company_name_drops_brackets(self):
        assert sanitize_company_name("<script>Acme</script>") == "scriptAcme/script"

    def test_notes_keep_newlines(self):
        assert sanitize_notes("line one\r\nline two\x07") == "line one\nline two"

    def test_email(self):
        assert sanitize_email("  Jane.Doe+jobs@Example.COM ") == "jane.doe+jobs@example.com"


class TestValidators:
    def test_urls(self):
        assert is_valid_url("https://example.com/jobs/1")
        assert is_valid_url("http://example.com")
        assert not is_valid_url("ftp://example.com")
        assert not is_valid_url("javascript:alert(1)")
        assert not is_valid_url("example.com")

    def test_sanitize_url(self):
        assert sanitize_url(" https://example.com ") == "https://example.com"
        assert sanitize_url("data:text/html,hi") == ""

    def test_emails(self):
        assert is_valid_email("a@b.co")
        assert not is_valid_email("not-an-email")
        assert not is_valid_email("")

    def test_parse_number(self):
        assert parse_number("85000") == 85000.0
        assert parse_number(" 1.5 ") == 1.5
        assert parse_number("") is None
        assert parse_number("abc") is None
        assert parse_number("inf") is None
        assert parse_number(True) is None


class TestPasswordPolicy:
    def test_strong_password_passes(self):
        assert validate_password("Correct-Horse-9x", email="jane@example.com", name="Jane Doe") == []

    def test_each_character_class_required(self):
        errors = validate_password("abcdefgh")
        assert any("uppercase" in e for e in errors)
        assert any("number" in e for e in errors)
        assert any("special character" in e for e in errors)
        assert not any("lowercase" in e for e in errors)

    def test_length_bounds(self):
        assert any("at least 8" in e for e in validate_password("Aa1!"))
        assert any("exceed 128" in e for e in validate_password("Aa1!" * 33))

    def test_repeating_characters(self):
        assert any("repeating" in e for e in validate_password("Passs-word-9"))
        assert validate_password("Pass-word-9x") == []

    def test_common_password(self):
        assert any("too common" in e for e in validate_password("Password123"))

    def test_personal_information(self):
        assert validate_password("Jane-Rocks-9x", name="Jane Doe")
        assert validate_password("Acme-Rocks-9x", email="sam@acme.io")
        assert validate_password("Blue-Rocks-9x", email="sam@acme.io") == []


class TestDates:
    def test_parse_z_suffix(self):
        parsed = parse_datetime("2024-06-10T09:00:00Z")
        assert parsed == datetime(2024, 6, 10, 9, tzinfo=timezone.utc)

    def test_parse_invalid(self):
        assert parse_datetime("soon") is None
        assert parse_datetime("") is None

    def test_day_delta_uses_calendar_days(self):
        now = datetime(2024, 6, 10, 23, 0)
        assert day_delta("2024-06-11T00:30:00", now) == 1
        assert day_delta("2024-06-10", now) == 0
        assert day_delta("2024-06-08", now) == -2

    def test_day_delta_converts_timezones(self):
        now = datetime(2024, 6, 10, 12, 0, tzinfo=timezone(timedelta(hours=8)))
        # 20:00 UTC on the 10th is 04:00 on the 11th at UTC+8
        assert day_delta("2024-06-10T20:00:00+00:00", now) == 1

    def test_within_trailing_days(self):
        now = datetime(2024, 6, 10, 12, 0)
        assert within_trailing_days("2024-06-10", now, 7)
        assert within_trailing_days("2024-06-04", now, 7)
        assert not within_trailing_days("2024-06-03", now, 7)
        assert not within_trailing_days("2024-06-11", now, 7)


class TestCurrency:
    def test_format_default_country(self):
        assert format_salary(85000) == "₱85,000"

    def test_format_us(self):
        assert format_salary("120000.4", "US") == "$120,000"

    def test_invalid_amount(self):
        assert format_salary("n/a", "US") == "$0"

    def test_unknown_country_falls_back(self):
        assert format_salary(1000, "XX") == "₱1,000"

    def test_get_country(self):
        assert get_country("gb").currency == "GBP"
        assert get_country(None) is None
