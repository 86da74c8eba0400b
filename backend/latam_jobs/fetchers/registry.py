from __future__ import annotations
from latam_jobs.errors import ConfigurationError
from latam_jobs.fetchers.ashby import AshbyFetcher
from latam_jobs.fetchers.base import SourceFetcher
from latam_jobs.fetchers.greenhouse import GreenhouseFetcher
from latam_jobs.fetchers.html_listing import HtmlListingFetcher
from latam_jobs.fetchers.lever import LeverFetcher

FETCHERS: dict[str, type[SourceFetcher]] = {
    "ashby": AshbyFetcher,
    "greenhouse": GreenhouseFetcher,
    "lever": LeverFetcher,
    "html_listing": HtmlListingFetcher,
}


def get_fetcher(provider_type: str) -> SourceFetcher:
    fetcher_cls = FETCHERS.get((provider_type or "").lower())
    if not fetcher_cls:
        raise ConfigurationError(f"missing fetcher for provider_type={provider_type}")
    return fetcher_cls()
