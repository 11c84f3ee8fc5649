"""
Server-rendered pages. Each button posts to one operation and redirects
back with the outcome in the query string.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..deps import (
    get_current_user, get_github_client, get_optional_user, get_summarizer, get_sync_locks,
)
from ..errors import AppError
from ..models import Resume, User
from ..schemas import load_content, summary_text
from ..services.github import (
    GitHubClient, SyncLocks, github_token_for, sync_github_activity,
)
from ..services.summarizer import SummarizerClient, generate_resume

router = APIRouter(tags=["pages"], include_in_schema=False)
templates = Jinja2Templates(directory=str(settings.template_path))


def _back(message: str = "", error: str = "") -> RedirectResponse:
    query = urlencode({"error": error} if error else {"message": message})
    return RedirectResponse(f"/ui/resumes?{query}", status_code=303)


@router.get("/")
def home(request: Request, user: Optional[User] = Depends(get_optional_user)):
    return templates.TemplateResponse(request, "home.html", {"user": user, "app_name": settings.app_name})


@router.get("/ui/github")
async def github_page(
    request: Request,
    username: str = "",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    github: GitHubClient = Depends(get_github_client),
):
    events, error = [], ""
    username = username.strip()
    if username:
        try:
            events = await github.public_events(username, per_page=20, token=github_token_for(db, user))
        except AppError as e:
            error = e.message
    return templates.TemplateResponse(
        request, "github.html", {"username": username, "events": events, "error": error}
    )


@router.get("/ui/resumes")
def resumes_page(
    request: Request,
    message: str = "",
    error: str = "",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(Resume)
        .filter(Resume.user_id == user.id)
        .order_by(Resume.created_at.desc(), Resume.id.desc())
        .all()
    )
    cards = [
        {"id": r.id, "summary": summary_text(load_content(r.content)) or "No summary.",
         "document_url": r.document_url}
        for r in rows
    ]
    return templates.TemplateResponse(
        request, "resumes.html", {"resumes": cards, "message": message, "error": error}
    )


@router.post("/ui/resumes/sync")
async def sync_action(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    github: GitHubClient = Depends(get_github_client),
    locks: SyncLocks = Depends(get_sync_locks),
):
    try:
        await sync_github_activity(db, user, github, locks, per_page=settings.github_events_per_page)
    except AppError as e:
        return _back(error=f"Error syncing GitHub: {e.message}")
    return _back(message="GitHub activities synced successfully!")


@router.post("/ui/resumes/generate")
async def generate_action(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    summarizer: SummarizerClient = Depends(get_summarizer),
):
    try:
        await generate_resume(db, user, summarizer)
    except AppError as e:
        return _back(error=f"Error generating resume: {e.message}")
    return _back(message="New resume generated successfully!")
