from __future__ import annotations
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy.orm import Session

from latam_jobs.core.config import settings
from latam_jobs.models.run_record import RunRecord, RunStatus
from latam_jobs.services.job_store import JobStore
from latam_jobs.services.source_registry import SourceRegistry


class HealthStatus(str, Enum):
    HEALTHY = "Healthy"
    WARNING = "Warning"
    ERROR = "Error"
    UNKNOWN = "Unknown"


def evaluate(
    latest_run: RunRecord | None, now: datetime | None = None, stale_after: timedelta | None = None
) -> HealthStatus:
    if latest_run is None:
        return HealthStatus.UNKNOWN

    now = now or datetime.utcnow()
    stale_after = stale_after or timedelta(hours=settings.health_stale_hours)
    ended_at = latest_run.run_ended_at or latest_run.run_started_at

    if latest_run.status == RunStatus.FAILURE.value:
        return HealthStatus.ERROR
    if latest_run.status == RunStatus.PARTIAL_SUCCESS.value:
        return HealthStatus.WARNING
    if latest_run.status == RunStatus.SUCCESS.value:
        if latest_run.jobs_found == 0 and latest_run.jobs_relevant == 0:
            return HealthStatus.WARNING
        if now - ended_at > stale_after:
            return HealthStatus.WARNING
        return HealthStatus.HEALTHY
    return HealthStatus.UNKNOWN


def list_source_health(db: Session, now: datetime | None = None) -> list[dict]:
    store = JobStore(db)
    results = []
    for source in SourceRegistry(db).list_sources():
        latest = store.get_latest_run_record(source.id)
        results.append(
            {
                "id": source.id,
                "name": source.name,
                "provider_type": source.provider_type,
                "is_enabled": source.is_enabled,
                "last_fetched_at": source.last_fetched_at,
                "company_website": source.company_website,
                "health_status": evaluate(latest, now=now).value,
                "latest_run": latest,
            }
        )
    return results
