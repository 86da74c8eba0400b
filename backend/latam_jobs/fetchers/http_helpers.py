from __future__ import annotations
import json
import time
from typing import Any

from bs4 import BeautifulSoup
import httpx

from latam_jobs.core.config import settings
from latam_jobs.errors import TransportError


def deadline_after(seconds: float | None = None) -> float:
    return time.monotonic() + (settings.fetch_timeout_seconds if seconds is None else seconds)


def _remaining(deadline: float, url: str) -> float:
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise TransportError(f"deadline expired before requesting {url}")
    return remaining


def _get(
    url: str,
    deadline: float,
    params: dict | None = None,
    accept: str = "application/json",
    transport: httpx.BaseTransport | None = None,
) -> tuple[bytes, str]:
    """GET ``url`` and return (body, encoding), giving up once ``deadline`` passes.

    httpx timeouts apply to each connect/read step, so a server trickling its
    body could outlive them; the deadline is re-checked after every chunk.
    """
    headers = {"User-Agent": settings.http_user_agent, "Accept": accept}
    try:
        with httpx.Client(
            timeout=_remaining(deadline, url), follow_redirects=True, headers=headers, transport=transport
        ) as client:
            with client.stream("GET", url, params=params) as resp:
                resp.raise_for_status()
                chunks: list[bytes] = []
                for chunk in resp.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() >= deadline:
                        raise TransportError(f"deadline exceeded while reading {url}")
                return b"".join(chunks), resp.encoding or "utf-8"
    except httpx.TimeoutException as exc:
        raise TransportError(f"timeout fetching {url}") from exc
    except httpx.HTTPStatusError as exc:
        raise TransportError(f"HTTP {exc.response.status_code} from {url}") from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"request to {url} failed: {exc}") from exc


def fetch_json(
    url: str, deadline: float, params: dict | None = None, transport: httpx.BaseTransport | None = None
) -> Any:
    body, _ = _get(url, deadline, params=params, transport=transport)
    try:
        return json.loads(body)
    except ValueError as exc:
        raise TransportError(f"malformed JSON body from {url}") from exc


def fetch_html(url: str, deadline: float, transport: httpx.BaseTransport | None = None) -> str:
    body, encoding = _get(url, deadline, accept="text/html,application/xhtml+xml", transport=transport)
    return body.decode(encoding, errors="replace")


def soup_links(html: str):
    soup = BeautifulSoup(html, "html.parser")
    return soup, soup.find_all("a")
