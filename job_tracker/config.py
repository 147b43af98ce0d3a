"""YAML config loading and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from job_tracker.admin import parse_admin_emails

DEFAULT_SESSION_SECRET = "dev-secret-change-me-in-production"


@dataclass
class AuthConfig:
    session_secret: str = DEFAULT_SESSION_SECRET
    admin_emails: list[str] = field(default_factory=list)
    admin_cache_seconds: int = 300


@dataclass
class TrackerConfig:
    weekly_goal: int = 10
    action_interval_ms: int = 1000
    default_country: str = "PH"


@dataclass
class CalendarConfig:
    enabled: bool = False
    access_token: str = ""  # OAuth access token with calendar.events scope
    calendar_id: str = "primary"
    time_zone: str = "UTC"
    timeout: int = 10


@dataclass
class RateLimitConfig:
    admin_verify_per_minute: int = 10
    team_manage_per_minute: int = 20


@dataclass
class AppConfig:
    auth: AuthConfig = field(default_factory=AuthConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    rate_limits: RateLimitConfig = field(default_factory=RateLimitConfig)
    log_dir: str = "logs"


def apply_env_overrides(config: AppConfig) -> AppConfig:
    """Environment variables take precedence over file values."""
    config.auth.session_secret = os.environ.get("SESSION_SECRET", config.auth.session_secret)
    if os.environ.get("ADMIN_EMAILS"):
        config.auth.admin_emails = parse_admin_emails(os.environ["ADMIN_EMAILS"])
    token = os.environ.get("GOOGLE_CALENDAR_TOKEN")
    if token:
        config.calendar.access_token = token
    return config


def load_config(config_path: str = "config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Copy config.example.yaml to config.yaml and fill in your settings."
        )

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = AppConfig()

    # Auth
    auth_raw = raw.get("auth", {})
    config.auth = AuthConfig(
        session_secret=auth_raw.get("session_secret", DEFAULT_SESSION_SECRET),
        admin_emails=parse_admin_emails(auth_raw.get("admin_emails", [])),
        admin_cache_seconds=auth_raw.get("admin_cache_seconds", 300),
    )

    # Tracker
    tracker_raw = raw.get("tracker", {})
    config.tracker = TrackerConfig(
        weekly_goal=tracker_raw.get("weekly_goal", 10),
        action_interval_ms=tracker_raw.get("action_interval_ms", 1000),
        default_country=tracker_raw.get("default_country", "PH"),
    )

    # Calendar
    calendar_raw = raw.get("calendar", {})
    config.calendar = CalendarConfig(
        enabled=calendar_raw.get("enabled", False),
        access_token=calendar_raw.get("access_token", ""),
        calendar_id=calendar_raw.get("calendar_id", "primary"),
        time_zone=calendar_raw.get("time_zone", "UTC"),
        timeout=calendar_raw.get("timeout", 10),
    )

    # Rate limits
    limits_raw = raw.get("rate_limits", {})
    config.rate_limits = RateLimitConfig(
        admin_verify_per_minute=limits_raw.get("admin_verify_per_minute", 10),
        team_manage_per_minute=limits_raw.get("team_manage_per_minute", 20),
    )

    config.log_dir = raw.get("log_dir", "logs")

    return apply_env_overrides(config)


def load_config_or_default(config_path: str = "config.yaml") -> AppConfig:
    """Like load_config, but fall back to defaults plus environment when the file is missing."""
    try:
        return load_config(config_path)
    except FileNotFoundError:
        return apply_env_overrides(AppConfig())


def validate_config(config: AppConfig) -> list[str]:
    """Return list of validation warnings (empty = OK)."""
    warnings = []

    if config.auth.session_secret == DEFAULT_SESSION_SECRET:
        warnings.append("Using the default session secret - set SESSION_SECRET in production")

    if not config.auth.admin_emails:
        warnings.append("No admin emails configured - nobody can manage the admin team")

    if config.calendar.enabled and not config.calendar.access_token:
        warnings.append("Calendar sync enabled but no access token configured - sync will be skipped")

    if config.tracker.action_interval_ms < 0:
        warnings.append("Negative action interval - rate limiting is effectively disabled")

    if config.tracker.weekly_goal <= 0:
        warnings.append("Weekly goal must be positive")

    return warnings
