# resumesync/services/github.py
from __future__ import annotations

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Dict, List, Optional

import httpx
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..errors import PreconditionFailed, UpstreamFailure, ValidationFailure
from ..models import Account, Activity, User
from ..schemas import GitHubEvent, github_events

logger = logging.getLogger(__name__)

# GitHub logins: letters, digits and hyphens, at most 39 characters
GITHUB_LOGIN = r"^[A-Za-z0-9-]{1,39}$"


def _check_login(username: str) -> str:
    if not re.fullmatch(GITHUB_LOGIN, username):
        raise ValidationFailure(f"Invalid GitHub username: {username!r}")
    return username


class GitHubClient:
    """
    Thin wrapper over the GitHub REST events endpoints.
    The httpx client is owned by the caller (see deps.get_github_client).
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str, user_agent: str,
                 server_token: Optional[str] = None):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.server_token = server_token

    def _headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/vnd.github.v3+json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _get_events(self, path: str, per_page: int, token: Optional[str]) -> List[GitHubEvent]:
        try:
            r = await self.http.get(
                f"{self.base_url}{path}",
                params={"per_page": per_page},
                headers=self._headers(token),
            )
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Failed to fetch GitHub events: {e}") from e

        if r.is_error:
            logger.warning("GitHub %s returned %s", path, r.status_code)
            raise UpstreamFailure(f"Failed to fetch GitHub events: {r.reason_phrase or r.status_code}")

        try:
            return github_events.validate_python(r.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamFailure(f"GitHub returned events in an unexpected shape: {e}") from e

    async def user_events(self, username: str, token: str, per_page: int = 100) -> List[GitHubEvent]:
        """Events for the token owner (includes private activity the token can see)."""
        return await self._get_events(f"/users/{_check_login(username)}/events", per_page, token)

    async def public_events(self, username: str, per_page: int = 20,
                            token: Optional[str] = None) -> List[GitHubEvent]:
        """Public events for any username; falls back to the server token, then anonymous."""
        return await self._get_events(
            f"/users/{_check_login(username)}/events/public", per_page, token or self.server_token
        )


class SyncLocks:
    """
    Per-user locks so overlapping syncs of one user run one after the other.
    An entry lives only while some task holds or waits on it.
    """

    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}
        self._users: Dict[int, int] = {}  # holders + waiters per user

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def for_user(self, user_id: int) -> AsyncIterator[None]:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[user_id] -= 1
            if not self._users[user_id]:
                del self._users[user_id]
                del self._locks[user_id]


def github_token_for(db: Session, user: User) -> Optional[str]:
    acct = (
        db.query(Account)
        .filter(Account.user_id == user.id, Account.provider == "github")
        .first()
    )
    return acct.access_token if acct else None


def replace_activities(db: Session, user_id: int, events: List[GitHubEvent]) -> int:
    """
    Delete the user's activities and insert `events`, all in one transaction.
    GitHub lists events newest first; rows are inserted oldest first so the
    newest event gets the highest id.
    """
    synced_at = datetime.utcnow()
    rows = [
        Activity(
            user_id=user_id,
            type=ev.type,
            created_at=synced_at,
            content={
                "id": ev.id,
                "repo": ev.repo.name,
                "payload": ev.payload,
                "created_at": ev.created_at,
            },
        )
        for ev in reversed(events)
    ]
    try:
        db.query(Activity).filter(Activity.user_id == user_id).delete(synchronize_session=False)
        db.add_all(rows)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return len(rows)


async def sync_github_activity(db: Session, user: User, github: GitHubClient,
                               locks: SyncLocks, per_page: int = 100) -> int:
    """
    Replace the caller's stored activity with their latest GitHub events.
    Returns the number of activities written.
    """
    token = github_token_for(db, user)
    if not token:
        raise PreconditionFailed("GitHub account not connected or access token is missing.")
    if not user.username:
        raise PreconditionFailed("GitHub username not found.")

    async with locks.for_user(user.id):
        events = await github.user_events(user.username, token, per_page=per_page)
        count = replace_activities(db, user.id, events)

    logger.info("synced %d GitHub events for user %s", count, user.id)
    return count
