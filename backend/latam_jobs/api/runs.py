from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from latam_jobs.api.deps import require_user
from latam_jobs.db.database import get_db
from latam_jobs.schemas.run import RunRecordOut
from latam_jobs.services.job_store import JobStore

router = APIRouter(prefix="/runs", tags=["runs"])


@router.get("", response_model=list[RunRecordOut])
def get_runs(
    source_id: int | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return JobStore(db).list_runs(source_id=source_id, limit=limit)
