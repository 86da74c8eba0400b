"""Maps provider-shaped RawPostings into StandardizedJobs and applies the relevance filter.

Each provider has a mapping function returning the canonical fields plus the
provider's "still listed" signal. ``normalize`` dispatches on the provider
type, validates the required fields and decides relevance: a posting must be
listed and explicitly remote. Nothing here touches the network or the store.
"""
from __future__ import annotations

import html
import re
from datetime import datetime, timezone
from typing import Any, Callable

from latam_jobs.errors import NormalizationError
from latam_jobs.fetchers.base import RawPosting, StandardizedJob
from latam_jobs.models.source import JobSource
from latam_jobs.services.region import classify, mentions_brazil_or_latam
from latam_jobs.utils.hash import job_identity_key

REMOTE_RE = re.compile(
    r"\b(remote|remoto|remota|anywhere|worldwide|work from home|wfh|distributed|home office|teletrabajo)\b"
)
RESTRICTED_RE = re.compile(
    r"(?<![a-z])(us|usa|u\.s\.?|united states|uk|canada|eu|europe|emea|apac|india|north america)\s*-?\s*only\b"
)

ASHBY_EMPLOYMENT = {
    "FullTime": "full_time",
    "PartTime": "part_time",
    "Intern": "internship",
    "Contract": "contract",
    "Temporary": "temporary",
}

TRUE_VALUES = {"yes", "true", "1", "remote", "fully remote", "100% remote"}
FALSE_VALUES = {"no", "false", "0", "onsite", "on-site", "office", "in office", "hybrid"}


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = " ".join(str(value).split())
    return text or None


def _join_locations(values: list[Any]) -> str | None:
    seen: list[str] = []
    for value in values:
        text = _text(value)
        if text and text not in seen:
            seen.append(text)
    return ", ".join(seen) or None


def _parse_iso(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_epoch_ms(value: Any) -> datetime | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)


def _flag(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value if v)
    text = (_text(value) or "").lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return None


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _map_ashby(raw: RawPosting) -> tuple[dict, bool]:
    address = _dict(_dict(raw.get("address")).get("postalAddress"))
    secondary = [s for s in raw.get("secondaryLocations") or [] if isinstance(s, dict)]
    compensation = _dict(raw.get("compensation"))

    is_remote = raw.get("isRemote") if isinstance(raw.get("isRemote"), bool) else None
    if is_remote is None and _text(raw.get("workplaceType")):
        is_remote = str(raw["workplaceType"]).lower() == "remote"

    fields = {
        "title": raw.get("title"),
        "original_url": raw.get("jobUrl") or raw.get("applyUrl"),
        "provider_native_id": raw.get("id"),
        "description": raw.get("descriptionHtml") or raw.get("descriptionPlain") or "",
        "location": _join_locations([raw.get("location"), *[s.get("location") for s in secondary]]),
        "country": _text(address.get("addressCountry")),
        "is_remote": is_remote,
        "employment_type": ASHBY_EMPLOYMENT.get(raw.get("employmentType") or ""),
        "posted_at": _parse_iso(raw.get("publishedAt")),
        "salary": _text(compensation.get("compensationTierSummary") or raw.get("compensationTierSummary")),
    }
    return fields, raw.get("isListed") is not False


def _map_greenhouse(raw: RawPosting) -> tuple[dict, bool]:
    is_remote = None
    employment_type = None
    for item in raw.get("metadata") or []:
        if not isinstance(item, dict):
            continue
        name = (_text(item.get("name")) or "").lower()
        if "remote" in name and is_remote is None:
            is_remote = _flag(item.get("value"))
        elif "employment" in name and employment_type is None:
            employment_type = _text(item.get("value"))

    offices = [o.get("name") for o in raw.get("offices") or [] if isinstance(o, dict)]
    fields = {
        "title": raw.get("title"),
        "original_url": raw.get("absolute_url"),
        "provider_native_id": raw.get("id"),
        # The boards API returns the description HTML-escaped
        "description": html.unescape(raw.get("content") or ""),
        "location": _join_locations([_dict(raw.get("location")).get("name"), *offices]),
        "country": None,
        "is_remote": is_remote,
        "employment_type": employment_type,
        "posted_at": _parse_iso(raw.get("updated_at")),
        "salary": None,
        "company_name": _dict(raw.get("company")).get("name"),
    }
    return fields, True


def _lever_salary(value: Any) -> str | None:
    salary = _dict(value)
    if salary.get("min") is None and salary.get("max") is None:
        return None
    amount = "-".join(str(v) for v in (salary.get("min"), salary.get("max")) if v is not None)
    parts = [_text(salary.get("currency")), amount, _text(salary.get("interval"))]
    return " ".join(p for p in parts if p)


def _map_lever(raw: RawPosting) -> tuple[dict, bool]:
    categories = _dict(raw.get("categories"))
    workplace = (_text(raw.get("workplaceType")) or "").lower()
    if workplace == "remote":
        is_remote = True
    elif workplace in ("onsite", "on-site", "hybrid"):
        is_remote = False
    else:
        is_remote = None

    description = raw.get("description") or ""
    for block in raw.get("lists") or []:
        if isinstance(block, dict) and block.get("text") and block.get("content"):
            description += f"<h3>{block['text']}</h3><ul>{block['content']}</ul>"
    if not description.strip():
        description = raw.get("descriptionPlain") or ""

    fields = {
        "title": raw.get("text"),
        "original_url": raw.get("hostedUrl") or raw.get("applyUrl"),
        "provider_native_id": raw.get("id"),
        "description": description,
        "location": _join_locations([categories.get("location"), *(categories.get("allLocations") or [])]),
        "country": _text(raw.get("country")),
        "is_remote": is_remote,
        "employment_type": _text(categories.get("commitment")),
        "posted_at": _parse_epoch_ms(raw.get("createdAt")),
        "salary": _lever_salary(raw.get("salaryRange")),
    }
    return fields, True


def _map_html_listing(raw: RawPosting) -> tuple[dict, bool]:
    fields = {
        "title": raw.get("title"),
        "original_url": raw.get("url"),
        "provider_native_id": None,
        "description": raw.get("description") or "",
        "location": _text(raw.get("location")),
        "country": None,
        "is_remote": None,
        "employment_type": None,
        "posted_at": None,
        "salary": None,
    }
    return fields, True


MAPPERS: dict[str, Callable[[RawPosting], tuple[dict, bool]]] = {
    "ashby": _map_ashby,
    "greenhouse": _map_greenhouse,
    "lever": _map_lever,
    "html_listing": _map_html_listing,
}


def is_remote_posting(flag: bool | None, location: str | None, title: str | None) -> bool:
    if flag is not None:
        return flag
    return bool(REMOTE_RE.search(f"{location or ''} {title or ''}".lower()))


def is_region_restricted(location: str | None) -> bool:
    """True for locations like "Remote - US only" that exclude Brazil/LATAM candidates."""
    if not location or mentions_brazil_or_latam(location):
        return False
    return bool(RESTRICTED_RE.search(location.lower()))


def identity_hint(provider_type: str, raw: RawPosting) -> str | None:
    """Identity key of a posting that failed to normalize, when its id or URL is still readable."""
    mapper = MAPPERS.get((provider_type or "").lower())
    if mapper is None or not isinstance(raw, dict):
        return None
    try:
        fields, _ = mapper(raw)
    except (AttributeError, TypeError, ValueError):
        return None
    native_id = _text(fields.get("provider_native_id"))
    url = _text(fields.get("original_url"))
    if not native_id and not url:
        return None
    return job_identity_key(native_id, url or "")


def normalize(provider_type: str, raw: RawPosting, source: JobSource) -> tuple[StandardizedJob | None, bool]:
    mapper = MAPPERS.get((provider_type or "").lower())
    if mapper is None:
        raise NormalizationError(f"no mapping for provider_type={provider_type}")
    if not isinstance(raw, dict):
        raise NormalizationError(f"{provider_type} posting is not an object: {type(raw).__name__}")

    fields, is_listed = mapper(raw)
    native_id = _text(fields.get("provider_native_id"))
    title = _text(fields.get("title"))
    url = _text(fields.get("original_url"))
    if not title:
        raise NormalizationError(f"{provider_type} posting {native_id or url or '?'} has no title")
    if not url:
        raise NormalizationError(f"{provider_type} posting {native_id or title!r} has no url")

    if not is_listed:
        return None, False
    location = fields.get("location")
    if not is_remote_posting(fields.get("is_remote"), location, title) or is_region_restricted(location):
        return None, False

    config = _dict(source.provider_config)
    company = _text(config.get("companyName")) or _text(fields.get("company_name")) or source.name
    job = StandardizedJob(
        title=title,
        description=fields.get("description") or "",
        original_url=url,
        company_name=company,
        provider_type=provider_type.lower(),
        provider_native_id=native_id,
        hiring_region=classify(location, fields.get("country")).value,
        location=location,
        country=fields.get("country"),
        is_remote=fields.get("is_remote"),
        employment_type=fields.get("employment_type"),
        posted_at=fields.get("posted_at"),
        salary=fields.get("salary"),
        raw_payload=raw,
    )
    return job, True
