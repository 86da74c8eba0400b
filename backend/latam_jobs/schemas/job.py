from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel


class JobOut(BaseModel):
    id: int
    source_id: int
    provider_type: str
    provider_native_id: str | None
    original_url: str
    title: str
    company_name: str
    description: str
    location: str | None
    country: str | None
    is_remote: bool | None
    employment_type: str | None
    salary: str | None
    hiring_region: str
    posted_at: datetime | None
    status: str
    first_seen_at: datetime
    last_seen_at: datetime

    class Config:
        from_attributes = True
