# resumesync/services/summarizer.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

import httpx
from sqlalchemy.orm import Session

from ..errors import NotFound, UpstreamFailure
from ..models import Activity, Resume, User
from ..schemas import StructuredContent, dump_content

logger = logging.getLogger(__name__)

MAX_ACTIVITIES = 50


class SummarizerClient:
    """Client for the external summarization service (`POST /summarize`)."""

    def __init__(self, http: httpx.AsyncClient, url: str):
        self.http = http
        self.url = url

    async def summarize(self, activities: List[Dict[str, str]]) -> str:
        try:
            r = await self.http.post(self.url, json={"activities": activities})
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Failed to get summary from AI service: {e}") from e

        if r.is_error:
            logger.warning("summarizer returned %s", r.status_code)
            raise UpstreamFailure(f"Failed to get summary from AI service: {r.text}")

        try:
            summary = r.json().get("summary")
        except (ValueError, AttributeError) as e:
            raise UpstreamFailure("AI service returned a malformed response") from e
        if not isinstance(summary, str):
            raise UpstreamFailure("AI service response is missing a summary")
        return summary


def _serialize(a: Activity) -> Dict[str, str]:
    content: Any = a.content
    return {
        "type": a.type,
        "content": content if isinstance(content, str) else json.dumps(content),
    }


def latest_activities(db: Session, user_id: int, limit: int = MAX_ACTIVITIES) -> List[Activity]:
    return (
        db.query(Activity)
        .filter(Activity.user_id == user_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(limit)
        .all()
    )


async def generate_resume(db: Session, user: User, summarizer: SummarizerClient) -> Resume:
    """Summarize the caller's newest activities and store the summary as a new resume."""
    activities = latest_activities(db, user.id)
    if not activities:
        raise NotFound("No activities found to generate a resume from.")

    summary = await summarizer.summarize([_serialize(a) for a in activities])

    resume = Resume(user_id=user.id, content=dump_content(StructuredContent(summary=summary)))
    db.add(resume); db.commit(); db.refresh(resume)
    logger.info("generated resume %s from %d activities for user %s", resume.id, len(activities), user.id)
    return resume
