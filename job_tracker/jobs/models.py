"""Job application record, status enumeration, and derived view types."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Status(str, Enum):
    APPLIED = "Applied"
    INTERVIEWING = "Interviewing"
    OFFER = "Offer"
    REJECTED = "Rejected"

    @classmethod
    def parse(cls, value) -> "Status":
        """Return the status for value. "Accepted" is an alias of Offer."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        if text.lower() == "accepted":
            return cls.OFFER
        for status in cls:
            if status.value.lower() == text.lower():
                return status
        raise ValueError(f"Unknown status: {value!r}")


STATUSES = list(Status)
PRIORITIES = ("high", "medium", "low")
JOB_TYPES = ("full-time", "part-time", "contract", "internship")
NOTIFICATION_TYPES = ("interview", "followup", "deadline", "achievement")

# Field names that callers may set through forms or bulk actions
EDITABLE_FIELDS = (
    "company", "role", "status", "link", "notes", "salary", "location",
    "industry", "company_size", "job_type", "tags", "priority", "is_remote",
    "is_favorite", "application_date", "interview_date", "follow_up_date",
    "response_date",
)


@dataclass
class JobRecord:
    """One tracked job application, owned by a single user."""

    company: str
    role: str
    id: str = ""
    uid: int | None = None
    status: Status = Status.APPLIED
    link: str = ""
    notes: str = ""
    salary: str = ""
    location: str = ""
    industry: str = ""
    company_size: str = ""
    job_type: str = ""  # full-time, part-time, contract, internship
    tags: list[str] = field(default_factory=list)
    priority: str = ""  # high, medium, low
    is_remote: bool = False
    is_favorite: bool = False
    application_date: str = ""
    interview_date: str = ""
    follow_up_date: str = ""
    response_date: str = ""
    google_calendar_events: dict[str, str] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.status = Status.parse(self.status)

    def to_dict(self) -> dict:
        """Convert to a flat, JSON-serialisable dictionary."""
        return {
            "id": self.id,
            "uid": self.uid,
            "company": self.company,
            "role": self.role,
            "status": self.status.value,
            "link": self.link,
            "notes": self.notes,
            "salary": self.salary,
            "location": self.location,
            "industry": self.industry,
            "company_size": self.company_size,
            "job_type": self.job_type,
            "tags": list(self.tags),
            "priority": self.priority,
            "is_remote": self.is_remote,
            "is_favorite": self.is_favorite,
            "application_date": self.application_date,
            "interview_date": self.interview_date,
            "follow_up_date": self.follow_up_date,
            "response_date": self.response_date,
            "google_calendar_events": dict(self.google_calendar_events),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "JobRecord":
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        known["created_at"] = created_at
        known["tags"] = list(known.get("tags") or [])
        known["google_calendar_events"] = dict(known.get("google_calendar_events") or {})
        return cls(**known)


@dataclass
class Notification:
    """A derived reminder or achievement. Never persisted."""

    id: str
    type: str  # interview, followup, deadline, achievement
    title: str
    message: str
    date: datetime
    job_id: str | None = None
    is_read: bool = False


@dataclass
class CalendarEvent:
    id: str
    title: str
    date: datetime
    type: str  # application, interview, followup
    job_id: str
    color: str
