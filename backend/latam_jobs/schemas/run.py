from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel


class RunRecordOut(BaseModel):
    id: int
    job_source_id: int
    run_started_at: datetime
    run_ended_at: datetime | None
    status: str
    jobs_found: int
    jobs_relevant: int
    jobs_processed: int
    jobs_errored: int
    jobs_created: int
    jobs_updated: int
    jobs_skipped: int
    jobs_closed: int
    error_message: str | None

    class Config:
        from_attributes = True
