"""User account model."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    country_code: Mapped[str] = mapped_column(String(2), default="PH")  # salary currency
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    jobs: Mapped[list["JobEntry"]] = relationship(back_populates="owner", cascade="all, delete-orphan")

    # Team roster rows are keyed by email and may exist before the account does
    team_member: Mapped["TeamMember"] = relationship(
        primaryjoin="User.email == foreign(TeamMember.email)",
        viewonly=True,
        uselist=False,
    )

    @property
    def team_role(self) -> str | None:
        member = self.team_member
        return member.role if member is not None and member.is_active else None

    @property
    def is_admin(self) -> bool:
        """Dynamic role record: an active team membership."""
        return self.team_role is not None
