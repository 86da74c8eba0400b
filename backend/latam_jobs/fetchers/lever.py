from __future__ import annotations

from latam_jobs.errors import ConfigurationError, TransportError
from latam_jobs.fetchers.base import RawPosting, SourceFetcher
from latam_jobs.fetchers.http_helpers import fetch_json
from latam_jobs.models.source import JobSource

API_BASES = {
    "global": "https://api.lever.co/v0/postings",
    "eu": "https://api.eu.lever.co/v0/postings",
}


class LeverFetcher(SourceFetcher):
    provider_type = "lever"
    required_config = ("companyIdentifier",)

    def fetch(self, source: JobSource, deadline: float) -> list[RawPosting]:
        config = self.validate_config(source)
        company = str(config["companyIdentifier"]).strip()
        region = str(config.get("apiBase") or "global").lower()
        if region not in API_BASES:
            raise ConfigurationError(f"source={source.name} unknown lever apiBase={region}")

        payload = fetch_json(f"{API_BASES[region]}/{company}", deadline, params={"mode": "json"}, transport=self.transport)
        if isinstance(payload, dict):
            # Lever answers unknown companies with {"ok": false, "error": "..."}
            raise TransportError(f"lever company={company} error: {payload.get('error') or payload}")
        if not isinstance(payload, list):
            raise TransportError(f"lever company={company} response is not a list")
        return payload
