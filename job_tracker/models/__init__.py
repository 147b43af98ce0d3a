"""ORM models for the multi-user job tracker."""

from .base import Base, SessionLocal, engine, init_db
from .feedback import Feedback
from .job_entry import JobEntry
from .team_member import TeamMember
from .user import User

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "init_db",
    "User",
    "JobEntry",
    "TeamMember",
    "Feedback",
]
