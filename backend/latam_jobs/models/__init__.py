from __future__ import annotations
from latam_jobs.models.job import Job
from latam_jobs.models.run_record import RunRecord, RunStatus
from latam_jobs.models.source import JobSource

__all__ = ["Job", "JobSource", "RunRecord", "RunStatus"]
