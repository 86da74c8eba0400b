from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel

from latam_jobs.schemas.run import RunRecordOut


class SourceOut(BaseModel):
    id: int
    name: str
    provider_type: str
    provider_config: dict
    is_enabled: bool
    company_website: str | None
    last_fetched_at: datetime | None
    created_at: datetime

    class Config:
        from_attributes = True


class SourceHealthOut(BaseModel):
    id: int
    name: str
    provider_type: str
    is_enabled: bool
    last_fetched_at: datetime | None
    company_website: str | None
    health_status: str
    latest_run: RunRecordOut | None

    class Config:
        from_attributes = True


class TriggerAccepted(BaseModel):
    success: bool
    message: str
    source_id: int | None = None
