from __future__ import annotations
from datetime import datetime
from enum import Enum

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from latam_jobs.core.logging import get_logger
from latam_jobs.errors import PersistenceError
from latam_jobs.fetchers.base import StandardizedJob
from latam_jobs.models.job import JOB_STATUS_ACTIVE, JOB_STATUS_CLOSED, Job
from latam_jobs.models.run_record import RunRecord
from latam_jobs.models.source import JobSource
from latam_jobs.utils.hash import job_identity_key

logger = get_logger(__name__)

# Refreshed on every sighting, but only when the incoming value is present.
MUTABLE_FIELDS = (
    "title",
    "description",
    "original_url",
    "company_name",
    "location",
    "country",
    "is_remote",
    "employment_type",
    "salary",
    "hiring_region",
    "posted_at",
)


class UpsertOutcome(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    SKIPPED = "SKIPPED"


def identity_for(job: StandardizedJob) -> str:
    return job_identity_key(job.provider_native_id, job.original_url)


class JobStore:
    def __init__(self, db: Session):
        self.db = db

    def find_job_by_identity(self, provider_type: str, identity_key: str) -> Job | None:
        return (
            self.db.query(Job)
            .filter(Job.provider_type == provider_type, Job.identity_key == identity_key)
            .first()
        )

    def _apply_update(self, record: Job, job: StandardizedJob, source_id: int) -> UpsertOutcome:
        changed = False
        for name in MUTABLE_FIELDS:
            value = getattr(job, name)
            if value is None or value == "":
                continue
            if getattr(record, name) != value:
                setattr(record, name, value)
                changed = True

        reopened = record.status != JOB_STATUS_ACTIVE
        record.status = JOB_STATUS_ACTIVE
        record.missed_runs = 0
        record.source_id = source_id
        record.last_seen_at = datetime.utcnow()
        if changed:
            record.raw_payload = job.raw_payload
        self.db.commit()
        return UpsertOutcome.UPDATED if changed or reopened else UpsertOutcome.SKIPPED

    def upsert_job(self, job: StandardizedJob, source_id: int) -> UpsertOutcome:
        key = identity_for(job)
        try:
            existing = self.find_job_by_identity(job.provider_type, key)
            if existing:
                return self._apply_update(existing, job, source_id)

            now = datetime.utcnow()
            record = Job(
                source_id=source_id,
                provider_type=job.provider_type,
                identity_key=key,
                provider_native_id=job.provider_native_id,
                original_url=job.original_url,
                title=job.title,
                company_name=job.company_name,
                description=job.description,
                location=job.location,
                country=job.country,
                is_remote=job.is_remote,
                employment_type=job.employment_type,
                salary=job.salary,
                hiring_region=job.hiring_region,
                posted_at=job.posted_at,
                status=JOB_STATUS_ACTIVE,
                missed_runs=0,
                first_seen_at=now,
                last_seen_at=now,
                raw_payload=job.raw_payload,
            )
            self.db.add(record)
            try:
                self.db.commit()
            except IntegrityError:
                # Another writer inserted the same identity first; fold into an update.
                self.db.rollback()
                existing = self.find_job_by_identity(job.provider_type, key)
                if existing is None:
                    raise
                return self._apply_update(existing, job, source_id)
            return UpsertOutcome.CREATED
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError(f"upsert failed for {job.provider_type}:{key}: {exc}") from exc

    def close_unseen_jobs(self, source_id: int, seen_keys: set[str], after_missed_runs: int) -> int:
        """Age out active jobs of a source that this run did not see; returns how many were closed."""
        closed = 0
        try:
            rows = self.db.query(Job).filter(Job.source_id == source_id, Job.status == JOB_STATUS_ACTIVE).all()
            for row in rows:
                if row.identity_key in seen_keys:
                    continue
                row.missed_runs += 1
                if row.missed_runs >= after_missed_runs:
                    row.status = JOB_STATUS_CLOSED
                    closed += 1
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError(f"closing unseen jobs failed for source_id={source_id}: {exc}") from exc
        return closed

    def save_run_record(self, record: RunRecord) -> RunRecord:
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def get_latest_run_record(self, job_source_id: int) -> RunRecord | None:
        return (
            self.db.query(RunRecord)
            .filter(RunRecord.job_source_id == job_source_id)
            .order_by(desc(RunRecord.run_started_at), desc(RunRecord.id))
            .first()
        )

    def update_source_last_fetched(self, job_source_id: int, timestamp: datetime) -> None:
        source = self.db.get(JobSource, job_source_id)
        if source is None:
            logger.warning("cannot update last_fetched_at, source_id=%s not found", job_source_id)
            return
        source.last_fetched_at = timestamp
        self.db.commit()

    def list_runs(self, source_id: int | None = None, limit: int = 100) -> list[RunRecord]:
        query = self.db.query(RunRecord)
        if source_id is not None:
            query = query.filter(RunRecord.job_source_id == source_id)
        return query.order_by(desc(RunRecord.run_started_at), desc(RunRecord.id)).limit(limit).all()
