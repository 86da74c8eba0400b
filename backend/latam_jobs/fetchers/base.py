from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from latam_jobs.errors import ConfigurationError
from latam_jobs.models.source import JobSource

# Provider-shaped payload for one posting, exactly as the provider published it.
RawPosting = dict[str, Any]


@dataclass
class StandardizedJob:
    title: str
    description: str
    original_url: str
    company_name: str
    provider_type: str
    provider_native_id: str | None
    hiring_region: str
    location: str | None = None
    country: str | None = None
    is_remote: bool | None = None
    employment_type: str | None = None
    posted_at: datetime | None = None
    salary: str | None = None
    raw_payload: dict = field(default_factory=dict)


class SourceFetcher:
    """Retrieves every RawPosting published by one configured source.

    Subclasses declare ``provider_type`` and the ``provider_config`` keys they
    need. ``fetch`` must validate the config before touching the network and
    must not mutate the source.
    """

    provider_type: str
    required_config: tuple[str, ...] = ()

    def __init__(self, transport: httpx.BaseTransport | None = None):
        self.transport = transport

    def validate_config(self, source: JobSource) -> dict:
        config = source.provider_config
        if not isinstance(config, dict):
            raise ConfigurationError(f"source={source.name} provider_config must be an object")
        missing = [key for key in self.required_config if not str(config.get(key) or "").strip()]
        if missing:
            raise ConfigurationError(
                f"source={source.name} provider={self.provider_type} missing config: {', '.join(missing)}"
            )
        return config

    def fetch(self, source: JobSource, deadline: float) -> list[RawPosting]:
        raise NotImplementedError
