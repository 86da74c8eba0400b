from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from latam_jobs.db.database import Base

JOB_STATUS_ACTIVE = "active"
JOB_STATUS_CLOSED = "closed"


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (UniqueConstraint("provider_type", "identity_key", name="uq_jobs_provider_identity"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    source_id: Mapped[int] = mapped_column(ForeignKey("job_sources.id"), nullable=False, index=True)
    provider_type: Mapped[str] = mapped_column(String(32), nullable=False)
    identity_key: Mapped[str] = mapped_column(String(256), nullable=False)
    provider_native_id: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)

    original_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    company_name: Mapped[str] = mapped_column(String(256), default="", nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    is_remote: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    employment_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    salary: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    hiring_region: Mapped[str] = mapped_column(String(16), nullable=False)
    posted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    status: Mapped[str] = mapped_column(String(16), default=JOB_STATUS_ACTIVE, nullable=False)
    missed_runs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    first_seen_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    raw_payload: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
