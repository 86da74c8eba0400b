from __future__ import annotations
import threading
import time
from http.server import BaseHTTPRequestHandler, HTTPServer

import httpx
import pytest

from latam_jobs.errors import ConfigurationError, TransportError
from latam_jobs.fetchers import html_listing
from latam_jobs.fetchers.ashby import AshbyFetcher
from latam_jobs.fetchers.greenhouse import GreenhouseFetcher
from latam_jobs.fetchers.html_listing import HtmlListingFetcher, scrape_postings_from_listing
from latam_jobs.fetchers.http_helpers import deadline_after, fetch_json
from latam_jobs.fetchers.lever import LeverFetcher
from latam_jobs.fetchers.registry import get_fetcher
from latam_jobs.models.source import JobSource


def _source(provider_type, config, name="Acme"):
    return JobSource(name=name, provider_type=provider_type, provider_config=config, is_enabled=True)


def _transport(handler, calls):
    def _handle(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    return httpx.MockTransport(_handle)


def test_ashby_fetch_returns_every_posting():
    calls = []
    transport = _transport(lambda _req: httpx.Response(200, json={"jobs": [{"id": "1"}, {"id": "2", "isListed": False}]}), calls)

    postings = AshbyFetcher(transport=transport).fetch(_source("ashby", {"jobBoardName": "acme"}), deadline_after())

    assert [p["id"] for p in postings] == ["1", "2"]
    assert calls[0].url.host == "api.ashbyhq.com"
    assert calls[0].url.path == "/posting-api/job-board/acme"
    assert calls[0].url.params["includeCompensation"] == "true"


def test_missing_config_fails_before_any_request():
    calls = []
    transport = _transport(lambda _req: httpx.Response(200, json={"jobs": []}), calls)

    with pytest.raises(ConfigurationError):
        AshbyFetcher(transport=transport).fetch(_source("ashby", {}), deadline_after())
    with pytest.raises(ConfigurationError):
        GreenhouseFetcher(transport=transport).fetch(_source("greenhouse", {"boardToken": "  "}), deadline_after())
    with pytest.raises(ConfigurationError):
        LeverFetcher(transport=transport).fetch(_source("lever", None), deadline_after())

    assert calls == []


def test_non_2xx_is_transport_error():
    transport = _transport(lambda _req: httpx.Response(500, text="boom"), [])

    with pytest.raises(TransportError) as exc_info:
        GreenhouseFetcher(transport=transport).fetch(_source("greenhouse", {"boardToken": "acme"}), deadline_after())

    assert "HTTP 500" in exc_info.value.message
    assert exc_info.value.retryable is True


def test_malformed_body_is_transport_error():
    transport = _transport(lambda _req: httpx.Response(200, content=b"<html>not json</html>"), [])
    with pytest.raises(TransportError):
        AshbyFetcher(transport=transport).fetch(_source("ashby", {"jobBoardName": "acme"}), deadline_after())

    transport = _transport(lambda _req: httpx.Response(200, json={"postings": []}), [])
    with pytest.raises(TransportError):
        GreenhouseFetcher(transport=transport).fetch(_source("greenhouse", {"boardToken": "acme"}), deadline_after())


def test_timeout_is_transport_error():
    def _raise(request):
        raise httpx.ReadTimeout("timed out", request=request)

    transport = _transport(_raise, [])
    with pytest.raises(TransportError) as exc_info:
        AshbyFetcher(transport=transport).fetch(_source("ashby", {"jobBoardName": "acme"}), deadline_after())

    assert "timeout" in exc_info.value.message


def test_expired_deadline_skips_request():
    calls = []
    transport = _transport(lambda _req: httpx.Response(200, json={"jobs": []}), calls)

    with pytest.raises(TransportError):
        AshbyFetcher(transport=transport).fetch(_source("ashby", {"jobBoardName": "acme"}), time.monotonic() - 1)
    assert calls == []


def test_greenhouse_requests_inline_content():
    calls = []
    transport = _transport(lambda _req: httpx.Response(200, json={"jobs": [{"id": 7}], "meta": {"total": 1}}), calls)

    postings = GreenhouseFetcher(transport=transport).fetch(_source("greenhouse", {"boardToken": "nubank"}), deadline_after())

    assert postings == [{"id": 7}]
    assert calls[0].url.path == "/v1/boards/nubank/jobs"
    assert calls[0].url.params["content"] == "true"


def test_lever_eu_base_and_error_payload():
    calls = []
    transport = _transport(lambda _req: httpx.Response(200, json=[{"id": "l-1"}]), calls)
    postings = LeverFetcher(transport=transport).fetch(
        _source("lever", {"companyIdentifier": "plaid", "apiBase": "eu"}), deadline_after()
    )
    assert postings == [{"id": "l-1"}]
    assert calls[0].url.host == "api.eu.lever.co"
    assert calls[0].url.path == "/v0/postings/plaid"

    transport = _transport(lambda _req: httpx.Response(200, json={"ok": False, "error": "Document not found"}), [])
    with pytest.raises(TransportError):
        LeverFetcher(transport=transport).fetch(_source("lever", {"companyIdentifier": "nope"}), deadline_after())

    with pytest.raises(ConfigurationError):
        LeverFetcher().fetch(_source("lever", {"companyIdentifier": "plaid", "apiBase": "mars"}), deadline_after())


LISTING_HTML = """
<ul class="openings">
  <li>
    <a href="/jobs/123-senior-backend-engineer">Senior Backend Engineer</a>
    <span class="job-location">Remote - Brazil</span>
  </li>
  <li><a href="https://elsewhere.example/jobs/9">Other Company Job Opening</a></li>
  <li><a href="/about">About our company</a></li>
  <li><a href="/jobs/123-senior-backend-engineer">Senior Backend Engineer</a></li>
</ul>
"""


def test_scrape_postings_from_listing_keeps_same_host_job_links():
    postings = scrape_postings_from_listing(LISTING_HTML, "https://acme.example/open-roles", "acme.example")

    assert postings == [
        {
            "url": "https://acme.example/jobs/123-senior-backend-engineer",
            "title": "Senior Backend Engineer",
            "location": "Remote - Brazil",
            "listing_url": "https://acme.example/open-roles",
        }
    ]


def test_html_listing_fetcher_uses_listing_host(monkeypatch):
    monkeypatch.setattr(html_listing, "fetch_html", lambda *_args, **_kwargs: LISTING_HTML)

    postings = HtmlListingFetcher().fetch(_source("html_listing", {"listingUrl": "https://acme.example/open-roles"}), deadline_after())

    assert len(postings) == 1
    assert postings[0]["title"] == "Senior Backend Engineer"


def test_registry_rejects_unknown_provider():
    assert isinstance(get_fetcher("Ashby"), AshbyFetcher)
    with pytest.raises(ConfigurationError):
        get_fetcher("workday")


class _TrickleHandler(BaseHTTPRequestHandler):
    body = b'{"jobs": [{"id": "1"}]}'

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        for i in range(len(self.body)):
            self.wfile.write(self.body[i : i + 1])
            self.wfile.flush()
            time.sleep(0.1)

    def log_message(self, *_args):
        pass


@pytest.fixture
def trickle_server(monkeypatch):
    for name in ("NO_PROXY", "no_proxy"):
        monkeypatch.setenv(name, "127.0.0.1,localhost")
    server = HTTPServer(("127.0.0.1", 0), _TrickleHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/jobs"
    server.shutdown()
    server.server_close()


def test_slow_body_is_cut_off_at_the_deadline(trickle_server):
    started = time.monotonic()

    with pytest.raises(TransportError) as exc_info:
        fetch_json(trickle_server, deadline_after(0.5))

    # The full body would take over two seconds to arrive.
    assert time.monotonic() - started < 1.5
    assert "deadline" in exc_info.value.message


def test_fetch_json_reads_a_complete_local_response(trickle_server):
    assert fetch_json(trickle_server, deadline_after(10)) == {"jobs": [{"id": "1"}]}
