from __future__ import annotations
import hashlib


def url_identity_hash(original_url: str) -> str:
    raw = original_url.strip().lower().rstrip("/")
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def job_identity_key(provider_native_id: str | None, original_url: str) -> str:
    """Stable per-provider key: the provider's own id, else a hash of the posting URL."""
    native = (provider_native_id or "").strip()
    if native:
        return native
    return f"url:{url_identity_hash(original_url)}"
