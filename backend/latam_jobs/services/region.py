"""Hiring region classification from free-text location and country fields.

Rules are applied in order and the first match wins:

1. any Brazil token -> BRAZIL
2. any LATAM token, LATAM country name, or LATAM country code (country field only) -> LATAM
3. anything else -> WORLDWIDE

A posting without a region signal is treated as globally open.
"""
from __future__ import annotations

import re
import unicodedata
from enum import Enum


class HiringRegion(str, Enum):
    BRAZIL = "BRAZIL"
    LATAM = "LATAM"
    WORLDWIDE = "WORLDWIDE"


BRAZIL_TOKENS = ("brazil", "brasil")
BRAZIL_CODES = {"br", "bra"}

LATAM_TOKENS = ("latam", "latin america", "latinoamerica", "america latina", "south america", "central america")
LATAM_COUNTRIES = (
    "argentina",
    "bolivia",
    "chile",
    "colombia",
    "costa rica",
    "cuba",
    "dominican republic",
    "republica dominicana",
    "ecuador",
    "el salvador",
    "guatemala",
    "honduras",
    "mexico",
    "nicaragua",
    "panama",
    "paraguay",
    "peru",
    "puerto rico",
    "uruguay",
    "venezuela",
)
# Two-letter codes collide with US states ("CO", "PA") so they are only trusted in a country field.
LATAM_CODES = {
    "ar", "arg", "bo", "bol", "cl", "chl", "co", "col", "cr", "cri", "cu", "cub", "do", "dom",
    "ec", "ecu", "sv", "slv", "gt", "gtm", "hn", "hnd", "mx", "mex", "ni", "nic", "pa", "pan",
    "py", "pry", "pe", "per", "pr", "pri", "uy", "ury", "ve", "ven",
}


def _fold(text: str | None) -> str:
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def _pattern(tokens: tuple[str, ...]) -> re.Pattern:
    return re.compile(r"\b(" + "|".join(re.escape(t) for t in tokens) + r")\b")


_BRAZIL_RE = _pattern(BRAZIL_TOKENS)
_LATAM_RE = _pattern(LATAM_TOKENS + LATAM_COUNTRIES)


def mentions_brazil_or_latam(text: str | None) -> bool:
    folded = _fold(text)
    return bool(_BRAZIL_RE.search(folded) or _LATAM_RE.search(folded))


def classify(location: str | None, country: str | None = None) -> HiringRegion:
    # "New Mexico" is a US state
    text = _fold(f"{location or ''} {country or ''}").replace("new mexico", "")
    country_code = _fold(country)

    if _BRAZIL_RE.search(text) or country_code in BRAZIL_CODES:
        return HiringRegion.BRAZIL
    if _LATAM_RE.search(text) or country_code in LATAM_CODES:
        return HiringRegion.LATAM
    return HiringRegion.WORLDWIDE
