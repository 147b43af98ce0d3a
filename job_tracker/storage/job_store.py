"""Job record storage, scoped to an owner, over a SQLAlchemy session."""

import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from job_tracker.errors import NotFoundError, StoreError
from job_tracker.jobs.models import JobRecord, Status
from job_tracker.models import JobEntry

logger = logging.getLogger("job_tracker.storage")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _column_values(fields: dict) -> dict:
    values = dict(fields)
    if "status" in values:
        values["status"] = Status.parse(values["status"]).value
    return values


class JobStore:
    """Reads and writes JobEntry rows. Every call is filtered by owner uid."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_owner(self, uid: int) -> list[JobRecord]:
        """All of uid's jobs, newest first."""
        try:
            rows = (
                self.db.query(JobEntry)
                .filter(JobEntry.uid == uid)
                .order_by(JobEntry.created_at.desc())
                .all()
            )
            return [row.to_record() for row in rows]
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Ordered job query failed for user %d, sorting in memory: %s", uid, e)

        try:
            rows = self.db.query(JobEntry).filter(JobEntry.uid == uid).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Job query failed for user %d: %s", uid, e)
            raise StoreError("Failed to load your jobs. Please refresh the page.") from e

        records = [row.to_record() for row in rows]
        records.sort(key=lambda r: r.created_at or _EPOCH, reverse=True)
        return records

    def get(self, uid: int, job_id: str) -> JobRecord:
        return self._get_row(uid, job_id).to_record()

    def add(self, uid: int, fields: dict) -> JobRecord:
        """Insert a new job. created_at is assigned here and never changed."""
        values = _column_values(fields)
        values.setdefault("status", Status.APPLIED.value)
        values.pop("created_at", None)
        row = JobEntry(uid=uid, created_at=datetime.now(timezone.utc), **values)
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to add job for user %d: %s", uid, e)
            raise StoreError("Failed to save job. Please try again.") from e
        return row.to_record()

    def update(self, uid: int, job_id: str, fields: dict) -> None:
        row = self._get_row(uid, job_id)
        values = _column_values(fields)
        values.pop("created_at", None)
        try:
            for name, value in values.items():
                setattr(row, name, value)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to update job %s: %s", job_id, e)
            raise StoreError("Failed to update job. Please try again.") from e

    def delete(self, uid: int, job_id: str) -> None:
        row = self._get_row(uid, job_id)
        try:
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to delete job %s: %s", job_id, e)
            raise StoreError("Failed to delete job. Please try again.") from e

    def bulk_update(self, uid: int, updates: dict[str, dict]) -> None:
        """Apply per-job field updates in one transaction: all succeed or none do."""
        try:
            rows = (
                self.db.query(JobEntry)
                .filter(JobEntry.uid == uid, JobEntry.id.in_(list(updates)))
                .all()
            )
            by_id = {row.id: row for row in rows}
            missing = [job_id for job_id in updates if job_id not in by_id]
            if missing:
                raise NotFoundError(f"Job not found: {missing[0]}")

            for job_id, fields in updates.items():
                values = _column_values(fields)
                values.pop("created_at", None)
                for name, value in values.items():
                    setattr(by_id[job_id], name, value)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Bulk update of %d jobs failed for user %d: %s", len(updates), uid, e)
            raise StoreError("Failed to update jobs. Please try again.") from e

    def count_by_owner(self) -> dict[int, int]:
        """Job counts keyed by owner uid (admin view)."""
        rows = self.db.query(JobEntry.uid, func.count(JobEntry.id)).group_by(JobEntry.uid).all()
        return {uid: count for uid, count in rows}

    def list_all(self) -> list[JobRecord]:
        """Every job of every user (admin view)."""
        return [row.to_record() for row in self.db.query(JobEntry).all()]

    def _get_row(self, uid: int, job_id: str) -> JobEntry:
        try:
            row = (
                self.db.query(JobEntry)
                .filter(JobEntry.uid == uid, JobEntry.id == job_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Failed to load job. Please try again.") from e
        if row is None:
            raise NotFoundError(f"Job not found: {job_id}")
        return row
