"""Input sanitisation and validation helpers for form fields."""

import math
import re
from urllib.parse import urlparse

ALLOWED_URL_SCHEMES = {"http", "https"}

# Control characters except tab/newline/carriage return
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_ALL_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_UNSAFE_NAME_CHARS = re.compile(r"[<>{}\[\]\\]")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
MAX_REPEATING_CHARS = 3

COMMON_PASSWORDS = {
    "password", "123456", "123456789", "qwerty", "abc123", "password123",
    "admin", "letmein", "welcome", "monkey", "1234567890", "password1",
    "qwerty123", "admin123", "root", "user", "guest", "test", "demo",
    "12345678", "password321", "abcdef123", "welcome123", "hello123",
}


def sanitize_text(value: str) -> str:
    """Strip control characters and collapse whitespace to single spaces."""
    if not value:
        return ""
    value = _ALL_CONTROL_CHARS.sub(" ", value)
    return re.sub(r"\s+", " ", value).strip()


def sanitize_company_name(value: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("", sanitize_text(value))


def sanitize_job_title(value: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("", sanitize_text(value))


def sanitize_notes(value: str) -> str:
    """Like sanitize_text but keeps line breaks."""
    if not value:
        return ""
    value = _CONTROL_CHARS.sub("", value).replace("\r\n", "\n")
    return value.strip()


def sanitize_email(value: str) -> str:
    if not value:
        return ""
    return re.sub(r"[^\w@.+-]", "", value.strip().lower())


def is_valid_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(value.strip())
    except (AttributeError, ValueError):
        return False
    return parsed.scheme in ALLOWED_URL_SCHEMES and bool(parsed.netloc)


def sanitize_url(value: str) -> str:
    """Return the trimmed URL if it is a valid http(s) URL, else an empty string."""
    if not value or not is_valid_url(value):
        return ""
    return value.strip()


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or "")) and len(value) <= 254


def parse_number(value) -> float | None:
    """Parse a numeric value the way a salary field is read. None if not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _personal_parts(email: str, name: str) -> list[str]:
    parts = []
    if email:
        username, _, domain = email.lower().partition("@")
        parts.extend([username, domain.split(".")[0]])
    if name:
        parts.extend(name.lower().split())
    return [p for p in parts if len(p) > 2]


def validate_password(password: str, email: str = "", name: str = "") -> list[str]:
    """Check a new password against the signup policy. Returns error messages, empty if it passes.

    Requires 8-128 characters with upper and lower case letters, a digit and a
    symbol. Rejects runs of three identical characters, common passwords, and
    passwords containing the email username, email domain or a name part.
    """
    password = password or ""
    errors = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    if len(password) > MAX_PASSWORD_LENGTH:
        errors.append(f"Password must not exceed {MAX_PASSWORD_LENGTH} characters.")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter.")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter.")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number.")
    if not re.search(r"[^a-zA-Z0-9]", password):
        errors.append("Password must contain at least one special character.")
    if re.search(r"(.)\1{%d}" % (MAX_REPEATING_CHARS - 1), password):
        errors.append(f"Password cannot have {MAX_REPEATING_CHARS} or more repeating characters.")
    if password.lower() in COMMON_PASSWORDS:
        errors.append("This password is too common and easily guessable.")

    lowered = password.lower()
    if any(part in lowered for part in _personal_parts(email, name)):
        errors.append("Password should not contain personal information like your name or email.")
    return errors
