from __future__ import annotations
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from latam_jobs.api.deps import require_user
from latam_jobs.db.database import get_db
from latam_jobs.models.job import Job
from latam_jobs.schemas.job import JobOut
from latam_jobs.services.region import HiringRegion

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=list[JobOut])
def list_jobs(
    q: str | None = None,
    source_id: int | None = None,
    hiring_region: HiringRegion | None = None,
    status: str | None = "active",
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    query = db.query(Job)

    if q:
        like = f"%{q}%"
        query = query.filter((Job.title.ilike(like)) | (Job.company_name.ilike(like)) | (Job.description.ilike(like)))
    if source_id is not None:
        query = query.filter(Job.source_id == source_id)
    if hiring_region is not None:
        query = query.filter(Job.hiring_region == hiring_region.value)
    if status:
        query = query.filter(Job.status == status)
    if start:
        query = query.filter(Job.last_seen_at >= start)
    if end:
        query = query.filter(Job.last_seen_at <= end)

    return query.order_by(Job.last_seen_at.desc(), Job.id.desc()).offset(offset).limit(limit).all()


@router.get("/{job_id}", response_model=JobOut)
def get_job(job_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    row = db.get(Job, job_id)
    if not row:
        raise HTTPException(status_code=404, detail="job not found")
    return row
