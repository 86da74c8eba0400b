from __future__ import annotations
from latam_jobs.schemas.auth import LoginRequest, TokenResponse
from latam_jobs.schemas.job import JobOut
from latam_jobs.schemas.run import RunRecordOut
from latam_jobs.schemas.source import SourceHealthOut, SourceOut, TriggerAccepted

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "JobOut",
    "RunRecordOut",
    "SourceHealthOut",
    "SourceOut",
    "TriggerAccepted",
]
