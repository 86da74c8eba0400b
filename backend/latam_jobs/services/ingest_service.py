from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from latam_jobs.core.config import settings
from latam_jobs.core.logging import get_logger
from latam_jobs.db.database import SessionLocal
from latam_jobs.errors import (
    IngestError,
    NormalizationError,
    PersistenceError,
    SourceDisabledError,
    SourceNotFoundError,
    TransportError,
)
from latam_jobs.fetchers.base import RawPosting, SourceFetcher
from latam_jobs.fetchers.http_helpers import deadline_after
from latam_jobs.fetchers.registry import get_fetcher
from latam_jobs.models.run_record import RunRecord, RunStatus
from latam_jobs.models.source import JobSource
from latam_jobs.services.job_store import JobStore, identity_for
from latam_jobs.services.normalizer import identity_hint, normalize
from latam_jobs.services.run_stats import RunStatsRecorder
from latam_jobs.services.source_registry import SourceRegistry

logger = get_logger(__name__)


class SourceRunOrchestrator:
    """Runs sources through fetch -> normalize -> persist and records one RunRecord per attempt.

    Every run gets its own session from ``session_factory`` so that batch runs
    can execute on a bounded thread pool.
    """

    def __init__(
        self,
        session_factory: sessionmaker | Callable[[], Session] = SessionLocal,
        fetcher_factory: Callable[[str], SourceFetcher] = get_fetcher,
        max_workers: int | None = None,
        fetch_timeout: float | None = None,
        close_after_missed_runs: int | None = None,
    ):
        self.session_factory = session_factory
        self.fetcher_factory = fetcher_factory
        self.max_workers = max_workers or settings.max_concurrent_sources
        self.fetch_timeout = fetch_timeout or settings.fetch_timeout_seconds
        self.close_after_missed_runs = close_after_missed_runs or settings.close_after_missed_runs

    def _fetch(self, source: JobSource) -> list[RawPosting]:
        fetcher = self.fetcher_factory(source.provider_type)
        postings = fetcher.fetch(source, deadline_after(self.fetch_timeout))
        if not isinstance(postings, list):
            raise TransportError(f"fetcher for {source.provider_type} returned {type(postings).__name__}")
        return postings

    def run_source(self, source_id: int) -> RunRecord | None:
        db = self.session_factory()
        try:
            return self._run_source(db, source_id)
        finally:
            db.close()

    def _run_source(self, db: Session, source_id: int) -> RunRecord | None:
        store = JobStore(db)
        source = SourceRegistry(db).get_source(source_id)
        if source is None:
            logger.warning("source_id=%s not found, nothing to run", source_id)
            return None
        if not source.is_enabled:
            logger.info("source=%s is disabled, skipping", source.name)
            return None
        # Detached so per-job commits don't expire it mid-run.
        db.expunge(source)

        source_name = source.name
        recorder = RunStatsRecorder(source.id)
        seen_keys: set[str] = set()
        last_error: str | None = None
        logger.info("source=%s provider=%s run started", source_name, source.provider_type)

        try:
            postings = self._fetch(source)
        except IngestError as exc:
            recorder.fail(f"{type(exc).__name__}: {exc.message}")
            logger.warning(
                "source=%s fetch failed (%s): %s",
                source_name,
                "retried next run" if exc.retryable else "needs a config fix",
                exc.message,
            )
        except Exception as exc:  # noqa: BLE001
            recorder.fail(f"unexpected fetch error: {exc}")
        else:
            recorder.found = len(postings)
            for raw in postings:
                try:
                    job, relevant = normalize(source.provider_type, raw, source)
                except Exception as exc:  # noqa: BLE001
                    recorder.posting_errored()
                    # Still listed upstream, so it must not age towards closing.
                    hint = identity_hint(source.provider_type, raw)
                    if hint:
                        seen_keys.add(hint)
                    if isinstance(exc, NormalizationError):
                        logger.warning("source=%s skipped malformed posting: %s", source_name, exc)
                    else:
                        logger.warning("source=%s posting failed to normalize: %r", source_name, exc)
                    continue
                if not relevant:
                    continue

                recorder.relevant += 1
                seen_keys.add(identity_for(job))
                try:
                    recorder.record_outcome(store.upsert_job(job, source_id))
                except PersistenceError as exc:
                    recorder.persist_errored()
                    last_error = exc.message
                    logger.warning("source=%s %s", source_name, exc)

            if recorder.status() != RunStatus.FAILURE:
                try:
                    recorder.closed = store.close_unseen_jobs(source_id, seen_keys, self.close_after_missed_runs)
                except PersistenceError as exc:
                    logger.warning("source=%s %s", source_name, exc)

        record = recorder.finish(last_error)
        self._persist_run(db, store, record)

        log = logger.error if record.status == RunStatus.FAILURE.value else logger.info
        log(
            "source=%s run finished status=%s found=%s relevant=%s processed=%s "
            "created=%s updated=%s skipped=%s errored=%s closed=%s error=%s",
            source_name,
            record.status,
            record.jobs_found,
            record.jobs_relevant,
            record.jobs_processed,
            record.jobs_created,
            record.jobs_updated,
            record.jobs_skipped,
            record.jobs_errored,
            record.jobs_closed,
            record.error_message or "",
        )
        return record

    def _persist_run(self, db: Session, store: JobStore, record: RunRecord) -> None:
        try:
            store.save_run_record(record)
            store.update_source_last_fetched(record.job_source_id, record.run_ended_at)
            db.refresh(record)
            db.expunge(record)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("failed to persist run record for source_id=%s", record.job_source_id)

    def run_all_enabled(self) -> dict:
        db = self.session_factory()
        try:
            sources = [(s.id, s.name) for s in SourceRegistry(db).list_enabled_sources()]
        finally:
            db.close()

        logger.info("running %s enabled sources with max_workers=%s", len(sources), self.max_workers)
        source_stats: list[dict] = []
        failed_sources: list[str] = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(self.run_source, source_id): (source_id, name) for source_id, name in sources}
            for future in as_completed(futures):
                source_id, name = futures[future]
                try:
                    record = future.result()
                except Exception as exc:  # noqa: BLE001
                    logger.exception("source=%s run crashed", name)
                    failed_sources.append(name)
                    source_stats.append({"source_id": source_id, "source": name, "status": "crashed", "error": str(exc)})
                    continue
                if record is None:
                    continue
                if record.status == RunStatus.FAILURE.value:
                    failed_sources.append(name)
                source_stats.append(
                    {
                        "source_id": source_id,
                        "source": name,
                        "status": record.status,
                        "found": record.jobs_found,
                        "relevant": record.jobs_relevant,
                        "processed": record.jobs_processed,
                        "created": record.jobs_created,
                        "updated": record.jobs_updated,
                        "skipped": record.jobs_skipped,
                        "errored": record.jobs_errored,
                        "closed": record.jobs_closed,
                        "error": record.error_message,
                    }
                )

        source_stats.sort(key=lambda x: x["source_id"])
        return {
            "sources": len(sources),
            "jobs_found": sum(s.get("found", 0) for s in source_stats),
            "jobs_relevant": sum(s.get("relevant", 0) for s in source_stats),
            "jobs_processed": sum(s.get("processed", 0) for s in source_stats),
            "jobs_created": sum(s.get("created", 0) for s in source_stats),
            "jobs_updated": sum(s.get("updated", 0) for s in source_stats),
            "jobs_skipped": sum(s.get("skipped", 0) for s in source_stats),
            "jobs_errored": sum(s.get("errored", 0) for s in source_stats),
            "failed_sources": sorted(failed_sources),
            "source_stats": source_stats,
        }


def request_rerun(db: Session, source_id: int, dispatch: Callable[[int], Any]) -> dict:
    """Validate and hand a single-source run to ``dispatch`` without waiting for it.

    The outcome is only observable through the RunRecord written afterwards.
    """
    source = SourceRegistry(db).get_source(source_id)
    if source is None:
        raise SourceNotFoundError(f"source_id={source_id} not found")
    if not source.is_enabled:
        raise SourceDisabledError(f"source {source.name} is disabled")

    dispatch(source.id)
    logger.info("re-run dispatched for source=%s", source.name)
    return {"success": True, "message": f"re-run dispatched for source {source.name}", "source_id": source.id}
