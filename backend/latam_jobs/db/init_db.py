from __future__ import annotations
from latam_jobs.db.database import Base, engine
from latam_jobs.models import job, run_record, source  # noqa: F401  (register tables)
from latam_jobs.services.seed import seed_sources_if_empty


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    seed_sources_if_empty()
