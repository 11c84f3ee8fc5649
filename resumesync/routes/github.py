from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..deps import get_current_user, get_github_client, get_sync_locks
from ..models import User
from ..schemas import GitHubEvent, SyncResult
from ..services.github import (
    GITHUB_LOGIN, GitHubClient, SyncLocks, github_token_for, sync_github_activity,
)

router = APIRouter(prefix="/github", tags=["github"])


@router.get("/activity", response_model=list[GitHubEvent])
async def get_activity(
    username: str = Query(..., pattern=GITHUB_LOGIN),
    per_page: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    github: GitHubClient = Depends(get_github_client),
):
    """Public events for any GitHub username. Nothing is stored."""
    return await github.public_events(username, per_page=per_page, token=github_token_for(db, user))


@router.post("/sync", response_model=SyncResult)
async def sync(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    github: GitHubClient = Depends(get_github_client),
    locks: SyncLocks = Depends(get_sync_locks),
):
    count = await sync_github_activity(
        db, user, github, locks, per_page=settings.github_events_per_page
    )
    return SyncResult(message="GitHub activity synced successfully.", synced_activities=count)
