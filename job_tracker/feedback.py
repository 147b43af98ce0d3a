"""Bug reports and feature requests: submission, triage filters and the feedback store."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from job_tracker.errors import NotFoundError, PermissionDeniedError, StoreError, ValidationError
from job_tracker.models import Feedback
from job_tracker.team import SUPER_ADMIN
from job_tracker.utils.sanitize import is_valid_email, sanitize_email, sanitize_notes, sanitize_text

logger = logging.getLogger("job_tracker.feedback")

FEEDBACK_TYPES = ("bug", "feature", "improvement", "other")
FEEDBACK_STATUSES = ("new", "in-progress", "resolved", "closed")
FEEDBACK_PRIORITIES = ("critical", "high", "medium", "low")
SORT_OPTIONS = ("urgency", "newest", "oldest", "status", "type")

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000
LARGE_BULK_SIZE = 50

# Lower is more urgent
_STATUS_RANK = {"new": 1, "in-progress": 2, "resolved": 3, "closed": 4}
_TYPE_RANK = {"bug": 0.2, "feature": 0.4, "improvement": 0.5, "other": 0.6}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def validate_feedback(data: Mapping) -> dict:
    """Check a submission form. Returns clean column values or raises ValidationError."""
    errors = {}

    feedback_type = (data.get("type") or "bug").strip().lower()
    if feedback_type not in FEEDBACK_TYPES:
        errors["type"] = "Please choose a feedback type."

    title = sanitize_text(data.get("title") or "")
    if not title:
        errors["title"] = "This field is required."
    elif len(title) > MAX_TITLE_LENGTH:
        errors["title"] = f"Must be {MAX_TITLE_LENGTH} characters or fewer."

    description = sanitize_notes(data.get("description") or "")
    if not description:
        errors["description"] = "This field is required."
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        errors["description"] = f"Must be {MAX_DESCRIPTION_LENGTH} characters or fewer."

    email = sanitize_email(data.get("email") or "")
    if email and not is_valid_email(email):
        errors["email"] = "Please enter a valid email address."

    if errors:
        raise ValidationError(errors)
    return {"type": feedback_type, "title": title, "description": description, "email": email}


def check_status(status: str) -> str:
    if status not in FEEDBACK_STATUSES:
        raise ValidationError({"status": f"Unknown status: {status}"})
    return status


def check_bulk_status_allowed(role: str | None, count: int, status: str) -> None:
    """Closing feedback, or touching more than LARGE_BULK_SIZE items at once, needs a super-admin."""
    if (count > LARGE_BULK_SIZE or status == "closed") and role != SUPER_ADMIN:
        raise PermissionDeniedError("Only super-admins can close feedback or update more than "
                                    f"{LARGE_BULK_SIZE} items at once")


def urgency(item) -> float:
    return _STATUS_RANK.get(item.status, 5) + _TYPE_RANK.get(item.type, 0.6)


def _created(item) -> datetime:
    created = item.created_at
    if created is None:
        return _EPOCH
    # SQLite drops tzinfo on the way back
    return created if created.tzinfo else created.replace(tzinfo=timezone.utc)


@dataclass
class FeedbackQuery:
    """Triage filters. "all" leaves a dimension unset."""

    status: str = "all"
    search: str = ""
    assigned_to: str = "all"  # "all", "unassigned" or an admin email
    priority: str = "all"
    sort_by: str = "urgency"

    @classmethod
    def from_params(cls, params: Mapping) -> "FeedbackQuery":
        status = (params.get("status") or "all").strip()
        priority = (params.get("priority") or "all").strip()
        sort_by = (params.get("sort") or "urgency").strip()
        return cls(
            status=status if status in FEEDBACK_STATUSES else "all",
            search=(params.get("q") or "").strip(),
            assigned_to=(params.get("assigned") or "all").strip().lower() or "all",
            priority=priority if priority in FEEDBACK_PRIORITIES else "all",
            sort_by=sort_by if sort_by in SORT_OPTIONS else "urgency",
        )


def matches_feedback(item, query: FeedbackQuery) -> bool:
    if query.status != "all" and item.status != query.status:
        return False

    if query.search:
        needle = query.search.lower()
        haystack = (item.title, item.description, item.email or "", item.type)
        if not any(needle in (text or "").lower() for text in haystack):
            return False

    if query.assigned_to == "unassigned":
        if item.assigned_to:
            return False
    elif query.assigned_to != "all" and item.assigned_to != query.assigned_to:
        return False

    if query.priority != "all" and item.priority != query.priority:
        return False
    return True


def sort_feedback(items: Iterable, sort_by: str = "urgency") -> list:
    items = list(items)
    if sort_by == "oldest":
        return sorted(items, key=_created)
    if sort_by == "newest":
        return sorted(items, key=_created, reverse=True)

    # Newest first within equal keys
    newest_first = sorted(items, key=_created, reverse=True)
    if sort_by == "status":
        return sorted(newest_first, key=lambda i: _STATUS_RANK.get(i.status, 5))
    if sort_by == "type":
        return sorted(newest_first, key=lambda i: i.type)
    return sorted(newest_first, key=urgency)


def filter_feedback(items: Iterable, query: FeedbackQuery) -> list:
    return sort_feedback([item for item in items if matches_feedback(item, query)], query.sort_by)


class FeedbackStore:
    """Reads and writes Feedback rows. Bulk changes are all-or-nothing."""

    def __init__(self, db: Session):
        self.db = db

    def submit(self, fields: dict, user_id: int | None = None, url: str = "", user_agent: str = "") -> Feedback:
        row = Feedback(
            user_id=user_id,
            status="new",
            url=url[:2048],
            user_agent=user_agent[:500],
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to save feedback: %s", e)
            raise StoreError("Sorry, there was an error submitting your feedback. Please try again later.") from e
        logger.info("Feedback %d submitted (%s)", row.id, row.type)
        return row

    def list_all(self) -> list[Feedback]:
        try:
            return self.db.query(Feedback).order_by(Feedback.created_at.desc()).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Failed to load feedback. Please refresh the page.") from e

    def update_status(self, feedback_id: int, status: str) -> Feedback:
        check_status(status)
        [row] = self._rows([feedback_id])
        previous = row.status
        self._apply([row], {"status": status}, "Failed to update feedback status")
        logger.info("Feedback %d status %s -> %s", feedback_id, previous, status)
        return row

    def bulk_assign(self, feedback_ids: list[int], assignee: str, assigned_by: str) -> int:
        assignee = sanitize_email(assignee)
        if not is_valid_email(assignee):
            raise ValidationError({"value": "Please choose an admin to assign."})
        rows = self._rows(feedback_ids)
        self._apply(
            rows,
            {"assigned_to": assignee, "assigned_by": sanitize_email(assigned_by)},
            "Failed to complete bulk assignment",
        )
        logger.info("%s assigned %d feedback items to %s", assigned_by, len(rows), assignee)
        return len(rows)

    def bulk_update_status(self, feedback_ids: list[int], status: str) -> int:
        check_status(status)
        rows = self._rows(feedback_ids)
        self._apply(rows, {"status": status}, "Failed to complete bulk status update")
        logger.info("Bulk status update of %d feedback items to %s", len(rows), status)
        return len(rows)

    def _rows(self, feedback_ids: list[int]) -> list[Feedback]:
        feedback_ids = list(dict.fromkeys(feedback_ids))
        if not feedback_ids:
            raise ValidationError({"ids": "Select at least one item."})
        try:
            rows = self.db.query(Feedback).filter(Feedback.id.in_(feedback_ids)).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Failed to load feedback. Please try again.") from e
        by_id = {row.id: row for row in rows}
        missing = [i for i in feedback_ids if i not in by_id]
        if missing:
            raise NotFoundError(f"Feedback not found: {missing[0]}")
        return [by_id[i] for i in feedback_ids]

    def _apply(self, rows: list[Feedback], values: dict, message: str) -> None:
        now = datetime.now(timezone.utc)
        try:
            for row in rows:
                for name, value in values.items():
                    setattr(row, name, value)
                row.updated_at = now
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("%s: %s", message, e)
            raise StoreError(f"{message}. Please try again.") from e
