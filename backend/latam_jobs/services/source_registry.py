from __future__ import annotations
from sqlalchemy.orm import Session

from latam_jobs.models.source import JobSource


class SourceRegistry:
    def __init__(self, db: Session):
        self.db = db

    def list_enabled_sources(self) -> list[JobSource]:
        return self.db.query(JobSource).filter(JobSource.is_enabled.is_(True)).order_by(JobSource.id.asc()).all()

    def list_sources(self) -> list[JobSource]:
        return self.db.query(JobSource).order_by(JobSource.name.asc()).all()

    def get_source(self, source_id: int) -> JobSource | None:
        return self.db.get(JobSource, source_id)

    def toggle_source(self, source_id: int) -> JobSource | None:
        row = self.get_source(source_id)
        if row is None:
            return None
        row.is_enabled = not row.is_enabled
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row
