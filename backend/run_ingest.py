from __future__ import annotations
import json
import sys

from latam_jobs.core.logging import configure_logging
from latam_jobs.db.init_db import init_db
from latam_jobs.services.ingest_service import SourceRunOrchestrator


if __name__ == "__main__":
    configure_logging()
    init_db()
    orchestrator = SourceRunOrchestrator()
    if len(sys.argv) > 1:
        record = orchestrator.run_source(int(sys.argv[1]))
        if record is None:
            print(f"source {sys.argv[1]} not found or disabled")
            sys.exit(1)
        print(f"status={record.status} found={record.jobs_found} relevant={record.jobs_relevant} "
              f"processed={record.jobs_processed} errored={record.jobs_errored} error={record.error_message or ''}")
    else:
        print(json.dumps(orchestrator.run_all_enabled(), indent=2, default=str))
