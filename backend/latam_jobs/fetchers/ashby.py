from __future__ import annotations

from latam_jobs.errors import TransportError
from latam_jobs.fetchers.base import RawPosting, SourceFetcher
from latam_jobs.fetchers.http_helpers import fetch_json
from latam_jobs.models.source import JobSource

API_BASE = "https://api.ashbyhq.com/posting-api/job-board"


class AshbyFetcher(SourceFetcher):
    provider_type = "ashby"
    required_config = ("jobBoardName",)

    def fetch(self, source: JobSource, deadline: float) -> list[RawPosting]:
        config = self.validate_config(source)
        board = str(config["jobBoardName"]).strip()
        payload = fetch_json(
            f"{API_BASE}/{board}",
            deadline,
            params={"includeCompensation": "true"},
            transport=self.transport,
        )
        jobs = payload.get("jobs") if isinstance(payload, dict) else None
        if not isinstance(jobs, list):
            raise TransportError(f"ashby board={board} response has no 'jobs' list")
        return jobs
