from __future__ import annotations
from fastapi import APIRouter, HTTPException

from latam_jobs.api.deps import verify_login
from latam_jobs.core.logging import get_logger
from latam_jobs.schemas.auth import LoginRequest, TokenResponse
from latam_jobs.utils.auth import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest):
    if not verify_login(req.username, req.password):
        logger.warning("rejected admin login username=%s", req.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenResponse(access_token=create_access_token(req.username))
