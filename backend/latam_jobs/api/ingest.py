from __future__ import annotations
from fastapi import APIRouter, BackgroundTasks, Depends

from latam_jobs.api.deps import get_orchestrator, require_user
from latam_jobs.schemas.source import TriggerAccepted
from latam_jobs.services.ingest_service import SourceRunOrchestrator

router = APIRouter(prefix="/ingest", tags=["ingest"])


@router.post("/trigger", response_model=TriggerAccepted, status_code=202)
def trigger(
    background_tasks: BackgroundTasks,
    _: str = Depends(require_user),
    orchestrator: SourceRunOrchestrator = Depends(get_orchestrator),
):
    background_tasks.add_task(orchestrator.run_all_enabled)
    return TriggerAccepted(success=True, message="ingest of all enabled sources dispatched")
