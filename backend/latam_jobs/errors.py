"""Error taxonomy for the ingestion pipeline.

Source-level errors (configuration, transport) fail a whole source run.
Posting-level errors (normalization, persistence) only skip one posting.
"""
from __future__ import annotations


class IngestError(Exception):
    """Base error that carries retryability information."""

    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(IngestError):
    """Missing or invalid per-source configuration. Operator-fixable, never retried."""


class TransportError(IngestError):
    """Network, HTTP status, timeout or malformed body. Eligible for the next run."""

    retryable = True


class NormalizationError(IngestError):
    """One posting could not be mapped into a StandardizedJob."""


class PersistenceError(IngestError):
    """The store rejected one job."""


class SourceNotFoundError(IngestError):
    pass


class SourceDisabledError(IngestError):
    pass
