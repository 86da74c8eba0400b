from __future__ import annotations
import secrets

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer

from latam_jobs.core.config import settings
from latam_jobs.services.ingest_service import SourceRunOrchestrator
from latam_jobs.utils.auth import verify_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/login")


def require_user(token: str = Depends(oauth2_scheme)) -> str:
    subject = verify_access_token(token)
    if not subject:
        raise HTTPException(status_code=401, detail="Invalid token")
    return subject


def verify_login(username: str, password: str) -> bool:
    user_ok = secrets.compare_digest(username.encode(), settings.auth_username.encode())
    password_ok = secrets.compare_digest(password.encode(), settings.auth_password.encode())
    return user_ok and password_ok


def get_orchestrator() -> SourceRunOrchestrator:
    return SourceRunOrchestrator()
