"""Shared FastAPI dependencies: DB session, auth context and the per-request board."""

from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from job_tracker.errors import TrackerError, ValidationError
from job_tracker.jobs.board import JobBoard
from job_tracker.models import SessionLocal, User
from job_tracker.storage.job_store import JobStore


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(request: Request, db: Session) -> User | None:
    """Return the logged-in User or None (reads session cookie)."""
    user_id = request.session.get("user_id")
    if user_id is None:
        return None
    return db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()


def build_board(request: Request, db: Session, user: User) -> JobBoard:
    """A JobBoard for user, loaded from the store."""
    state = request.app.state
    board = JobBoard(
        JobStore(db),
        user.id,
        limiter=state.action_limiters.get(user.id),
        calendar=state.calendar,
        weekly_goal=state.config.tracker.weekly_goal,
    )
    board.load()
    return board


def error_payload(err: TrackerError) -> dict:
    """JSON body for a failed API call."""
    payload = {"error": str(err)}
    if isinstance(err, ValidationError):
        payload["errors"] = err.errors
    return payload


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def page_context(request: Request, user: User | None, **extra) -> dict:
    """Base template context: request, current user and their admin flag."""
    context = {
        "request": request,
        "user": user,
        "is_admin": request.app.state.admin_resolver.is_admin(user),
    }
    context.update(extra)
    return context
