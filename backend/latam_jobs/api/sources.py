from __future__ import annotations
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from latam_jobs.api.deps import get_orchestrator, require_user
from latam_jobs.core.logging import get_logger
from latam_jobs.db.database import get_db
from latam_jobs.errors import SourceDisabledError, SourceNotFoundError
from latam_jobs.schemas.run import RunRecordOut
from latam_jobs.schemas.source import SourceHealthOut, SourceOut, TriggerAccepted
from latam_jobs.services.health import list_source_health
from latam_jobs.services.ingest_service import SourceRunOrchestrator, request_rerun
from latam_jobs.services.source_registry import SourceRegistry

router = APIRouter(prefix="/sources", tags=["sources"])
logger = get_logger(__name__)


@router.get("", response_model=list[SourceOut])
def list_sources(_: str = Depends(require_user), db: Session = Depends(get_db)):
    return SourceRegistry(db).list_sources()


@router.get("/health", response_model=list[SourceHealthOut])
def sources_health(_: str = Depends(require_user), db: Session = Depends(get_db)):
    rows = list_source_health(db)
    for row in rows:
        if row["latest_run"] is not None:
            row["latest_run"] = RunRecordOut.model_validate(row["latest_run"])
    return rows


@router.patch("/{source_id}/toggle", response_model=SourceOut)
def toggle_source(source_id: int, user: str = Depends(require_user), db: Session = Depends(get_db)):
    row = SourceRegistry(db).toggle_source(source_id)
    if not row:
        raise HTTPException(status_code=404, detail="source not found")
    logger.info("user=%s toggled source=%s is_enabled=%s", user, row.name, row.is_enabled)
    return row


@router.post("/{source_id}/rerun", response_model=TriggerAccepted, status_code=202)
def rerun_source(
    source_id: int,
    background_tasks: BackgroundTasks,
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
    orchestrator: SourceRunOrchestrator = Depends(get_orchestrator),
):
    try:
        ack = request_rerun(db, source_id, lambda sid: background_tasks.add_task(orchestrator.run_source, sid))
    except SourceNotFoundError:
        raise HTTPException(status_code=404, detail="source not found")
    except SourceDisabledError:
        raise HTTPException(status_code=400, detail="cannot re-run a disabled source")
    return TriggerAccepted(**ack)
