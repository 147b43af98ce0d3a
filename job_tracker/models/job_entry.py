"""Job entry model: one row per tracked application, owned by a user."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from job_tracker.jobs.models import JobRecord, Status

from .base import Base


def _new_id() -> str:
    return uuid4().hex


class JobEntry(Base):
    __tablename__ = "job_entries"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    uid: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    company: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=Status.APPLIED.value, index=True)
    link: Mapped[str] = mapped_column(String(2048), default="")
    notes: Mapped[str] = mapped_column(Text, default="")
    salary: Mapped[str] = mapped_column(String(50), default="")
    location: Mapped[str] = mapped_column(String(200), default="")
    industry: Mapped[str] = mapped_column(String(200), default="")
    company_size: Mapped[str] = mapped_column(String(200), default="")
    job_type: Mapped[str] = mapped_column(String(20), default="")
    tags: Mapped[list] = mapped_column(JSON, default=list)
    priority: Mapped[str] = mapped_column(String(10), default="")
    is_remote: Mapped[bool] = mapped_column(Boolean, default=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)

    # ISO date strings, kept as entered
    application_date: Mapped[str] = mapped_column(String(40), default="")
    interview_date: Mapped[str] = mapped_column(String(40), default="")
    follow_up_date: Mapped[str] = mapped_column(String(40), default="")
    response_date: Mapped[str] = mapped_column(String(40), default="")

    google_calendar_events: Mapped[dict] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )

    owner: Mapped["User"] = relationship(back_populates="jobs")

    def to_record(self) -> JobRecord:
        """Convert DB row to the JobRecord dataclass."""
        created_at = self.created_at
        # SQLite drops tzinfo on the way back
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return JobRecord(
            id=self.id,
            uid=self.uid,
            company=self.company,
            role=self.role,
            status=Status.parse(self.status or Status.APPLIED.value),
            link=self.link or "",
            notes=self.notes or "",
            salary=self.salary or "",
            location=self.location or "",
            industry=self.industry or "",
            company_size=self.company_size or "",
            job_type=self.job_type or "",
            tags=list(self.tags or []),
            priority=self.priority or "",
            is_remote=bool(self.is_remote),
            is_favorite=bool(self.is_favorite),
            application_date=self.application_date or "",
            interview_date=self.interview_date or "",
            follow_up_date=self.follow_up_date or "",
            response_date=self.response_date or "",
            google_calendar_events=dict(self.google_calendar_events or {}),
            created_at=created_at,
        )
