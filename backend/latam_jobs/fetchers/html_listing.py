from __future__ import annotations
from urllib.parse import urljoin, urlparse

from latam_jobs.fetchers.base import RawPosting, SourceFetcher
from latam_jobs.fetchers.http_helpers import fetch_html, soup_links
from latam_jobs.models.source import JobSource

KEYWORDS = ["job", "career", "position", "opening", "vaga", "oportunidade"]
MAX_POSTINGS = 200


def _nearby_location(anchor) -> str:
    # Career pages usually render the location next to the link inside the same card/row.
    container = anchor.find_parent(["li", "tr", "article", "div"])
    if container is None:
        return ""
    el = container.select_one("[class*='location'], [class*='Location']")
    return " ".join(el.get_text(" ", strip=True).split()) if el else ""


def scrape_postings_from_listing(html: str, listing_url: str, host_contains: str) -> list[RawPosting]:
    _, links = soup_links(html)
    postings: list[RawPosting] = []
    seen: set[str] = set()

    for a in links:
        href = (a.get("href") or "").strip()
        text = " ".join(a.get_text(" ", strip=True).split())
        if not href or not text:
            continue

        full_url = urljoin(listing_url, href)
        host = (urlparse(full_url).netloc or "").lower()
        if host_contains and host_contains not in host:
            continue

        lower = f"{text} {full_url}".lower()
        if not any(k in lower for k in KEYWORDS):
            continue
        if len(text) < 8 or full_url in seen:
            continue
        seen.add(full_url)

        postings.append(
            {
                "url": full_url,
                "title": text[:220],
                "location": _nearby_location(a),
                "listing_url": listing_url,
            }
        )

    return postings[:MAX_POSTINGS]


class HtmlListingFetcher(SourceFetcher):
    """Scrapes a plain careers page; postings are anchors that look like job links."""

    provider_type = "html_listing"
    required_config = ("listingUrl",)

    def fetch(self, source: JobSource, deadline: float) -> list[RawPosting]:
        config = self.validate_config(source)
        listing_url = str(config["listingUrl"]).strip()
        host_contains = str(config.get("hostContains") or urlparse(listing_url).netloc).lower()
        html = fetch_html(listing_url, deadline, transport=self.transport)
        return scrape_postings_from_listing(html, listing_url, host_contains)
