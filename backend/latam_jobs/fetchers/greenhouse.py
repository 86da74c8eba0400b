from __future__ import annotations

from latam_jobs.errors import TransportError
from latam_jobs.fetchers.base import RawPosting, SourceFetcher
from latam_jobs.fetchers.http_helpers import fetch_json
from latam_jobs.models.source import JobSource

API_BASE = "https://boards-api.greenhouse.io/v1/boards"


class GreenhouseFetcher(SourceFetcher):
    provider_type = "greenhouse"
    required_config = ("boardToken",)

    def fetch(self, source: JobSource, deadline: float) -> list[RawPosting]:
        config = self.validate_config(source)
        token = str(config["boardToken"]).strip()
        # content=true inlines the description and metadata for every posting
        payload = fetch_json(f"{API_BASE}/{token}/jobs", deadline, params={"content": "true"}, transport=self.transport)
        jobs = payload.get("jobs") if isinstance(payload, dict) else None
        if not isinstance(jobs, list):
            raise TransportError(f"greenhouse board={token} response has no 'jobs' list")
        return jobs
