from __future__ import annotations
from datetime import datetime

from latam_jobs.models.run_record import RunRecord, RunStatus
from latam_jobs.services.job_store import UpsertOutcome


class RunStatsRecorder:
    """Accumulates the counters of one source run and produces its RunRecord."""

    def __init__(self, job_source_id: int):
        self.job_source_id = job_source_id
        self.started_at = datetime.utcnow()
        self.found = 0
        self.relevant = 0
        self.processed = 0
        self.errored = 0
        self.persist_errors = 0
        self.closed = 0
        self.outcomes: dict[str, int] = {o.value: 0 for o in UpsertOutcome}
        self.error_message: str | None = None
        self.failed = False

    def fail(self, message: str) -> None:
        # A source-level failure means nothing could be attempted.
        self.failed = True
        self.found = 0
        self.error_message = message[:2000]

    def posting_errored(self) -> None:
        self.errored += 1

    def persist_errored(self) -> None:
        self.errored += 1
        self.persist_errors += 1

    def record_outcome(self, outcome: UpsertOutcome) -> None:
        self.processed += 1
        self.outcomes[outcome.value] += 1

    def status(self) -> RunStatus:
        if self.failed:
            return RunStatus.FAILURE
        if self.relevant and self.persist_errors == self.relevant:
            # Every relevant job failed to persist: the store is down, not the postings.
            return RunStatus.FAILURE
        if self.errored:
            return RunStatus.PARTIAL_SUCCESS
        return RunStatus.SUCCESS

    def finish(self, last_error: str | None = None) -> RunRecord:
        status = self.status()
        error_message = self.error_message
        if status == RunStatus.FAILURE and not self.failed:
            error_message = f"persistence failed for all {self.relevant} relevant jobs: {last_error or 'unknown error'}"[:2000]
        return RunRecord(
            job_source_id=self.job_source_id,
            run_started_at=self.started_at,
            run_ended_at=datetime.utcnow(),
            status=status.value,
            jobs_found=self.found,
            jobs_relevant=self.relevant,
            jobs_processed=self.processed,
            jobs_errored=self.errored,
            jobs_created=self.outcomes[UpsertOutcome.CREATED.value],
            jobs_updated=self.outcomes[UpsertOutcome.UPDATED.value],
            jobs_skipped=self.outcomes[UpsertOutcome.SKIPPED.value],
            jobs_closed=self.closed,
            error_message=error_message,
        )
