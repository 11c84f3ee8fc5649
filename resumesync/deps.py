# resumesync/deps.py
"""
FastAPI dependencies: the caller, and the service handles each operation
is given. Tests swap any of these through app.dependency_overrides.
"""
from __future__ import annotations

from datetime import datetime
from typing import AsyncIterator, Optional

import httpx
from fastapi import Cookie, Depends, Header, Request
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .errors import Unauthorized
from .models import AuthSession, User
from .services.export import PdfExporter, pick_exporter
from .services.github import GitHubClient, SyncLocks
from .services.storage import S3Storage
from .services.summarizer import SummarizerClient


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    session_token: Optional[str] = Cookie(default=None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller from a bearer session token or the session cookie."""
    token = _bearer(authorization) or session_token
    if not token:
        raise Unauthorized("Not signed in")
    sess = db.query(AuthSession).filter(AuthSession.session_token == token).first()
    if not sess or sess.expires < datetime.utcnow():
        raise Unauthorized("Invalid or expired session")
    user = db.get(User, sess.user_id)
    if not user:
        raise Unauthorized("Session user no longer exists")
    return user


def get_optional_user(
    authorization: Optional[str] = Header(default=None),
    session_token: Optional[str] = Cookie(default=None),
    db: Session = Depends(get_db),
) -> Optional[User]:
    try:
        return get_current_user(authorization, session_token, db)
    except Unauthorized:
        return None


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        yield client


def get_github_client(http: httpx.AsyncClient = Depends(get_http_client)) -> GitHubClient:
    return GitHubClient(
        http,
        base_url=settings.github_api_url,
        user_agent=settings.github_user_agent,
        server_token=settings.github_token,
    )


def get_summarizer(http: httpx.AsyncClient = Depends(get_http_client)) -> SummarizerClient:
    return SummarizerClient(http, settings.summarizer_url)


def get_storage(request: Request) -> S3Storage:
    """S3 handle built once in the app lifespan."""
    return request.app.state.storage


def get_pdf_exporter(
    http: httpx.AsyncClient = Depends(get_http_client),
    storage: S3Storage = Depends(get_storage),
) -> PdfExporter:
    return pick_exporter(settings.pdf_renderer, http, settings.export_service_url, storage)


def get_sync_locks(request: Request) -> SyncLocks:
    return request.app.state.sync_locks
