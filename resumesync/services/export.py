# resumesync/services/export.py
from __future__ import annotations

import logging
import time
from typing import Protocol

import httpx
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from ..errors import NotFound, PreconditionFailed, UpstreamFailure
from ..models import Resume, User
from ..schemas import UploadTicket, load_content, summary_text
from .doc_gen import html_to_pdf_bytes, render_resume_html
from .storage import S3Storage

logger = logging.getLogger(__name__)


class PdfExporter(Protocol):
    async def export(self, resume: Resume, summary: str) -> str:
        """Produce a hosted PDF for `resume` and return its URL."""
        ...


class ExportServiceClient:
    """Remote renderer: `POST /export-pdf {summary}` -> `{pdf_url}`."""

    def __init__(self, http: httpx.AsyncClient, url: str):
        self.http = http
        self.url = url

    async def export(self, resume: Resume, summary: str) -> str:
        try:
            r = await self.http.post(self.url, json={"summary": summary})
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Failed to export PDF: {e}") from e
        if r.is_error:
            logger.warning("export service returned %s", r.status_code)
            raise UpstreamFailure(f"Failed to export PDF: {r.text}")
        try:
            pdf_url = r.json().get("pdf_url")
        except (ValueError, AttributeError) as e:
            raise UpstreamFailure("Export service returned a malformed response") from e
        if not isinstance(pdf_url, str) or not pdf_url:
            raise UpstreamFailure("Export service response is missing pdf_url")
        return pdf_url


class LocalPdfExporter:
    """Renders the resume template to PDF in-process and uploads it to S3."""

    def __init__(self, storage: S3Storage):
        self.storage = storage

    async def export(self, resume: Resume, summary: str) -> str:
        html = render_resume_html({"summary": summary, "created_at": resume.created_at})
        try:
            pdf = await run_in_threadpool(html_to_pdf_bytes, html)
        except Exception as e:
            raise UpstreamFailure(f"Failed to render PDF: {e}") from e
        key = f"resumes/{resume.user_id}/{resume.id}-{int(time.time() * 1000)}.pdf"
        return await run_in_threadpool(self.storage.upload_pdf, key, pdf)


# ---------- resume lookups shared by the routes ----------

def get_owned_resume(db: Session, user: User, resume_id: int) -> Resume:
    resume = (
        db.query(Resume)
        .filter(Resume.id == resume_id, Resume.user_id == user.id)
        .first()
    )
    if not resume:
        raise NotFound("Resume not found")
    return resume


def attach_document(db: Session, resume: Resume, url: str) -> Resume:
    """created (no document) -> document attached; the second state is final."""
    if resume.document_url:
        raise PreconditionFailed("Resume already has a document attached.")
    resume.document_url = url
    db.add(resume); db.commit(); db.refresh(resume)
    return resume


def user_key(user: User, key: str) -> str:
    """Place a client-supplied object key under the caller's prefix."""
    return f"resumes/{user.id}/{key.lstrip('/')}"


def upload_ticket(storage: S3Storage, key: str, content_type: str) -> UploadTicket:
    return UploadTicket(
        key=key,
        upload_url=storage.presign_put(key, content_type),
        public_url=storage.public_url(key),
        expires_in=storage.expires_in,
    )


async def export_resume(db: Session, user: User, resume_id: int, exporter: PdfExporter) -> Resume:
    """Server-rendered export: row is only touched once the PDF URL exists."""
    resume = get_owned_resume(db, user, resume_id)
    if resume.document_url:
        raise PreconditionFailed("Resume already has a document attached.")
    summary = summary_text(load_content(resume.content))
    url = await exporter.export(resume, summary)
    logger.info("exported resume %s for user %s", resume.id, user.id)
    return attach_document(db, resume, url)


def presigned_export(db: Session, user: User, resume_id: int,
                     storage: S3Storage) -> tuple[Resume, UploadTicket]:
    """Client-driven export: hand back an upload ticket; the client calls update afterwards."""
    resume = get_owned_resume(db, user, resume_id)
    if resume.document_url:
        raise PreconditionFailed("Resume already has a document attached.")
    ticket = upload_ticket(storage, f"resumes/{user.id}/{resume.id}.pdf", "application/pdf")
    return resume, ticket


def pick_exporter(renderer: str, http: httpx.AsyncClient, url: str,
                  storage: S3Storage) -> PdfExporter:
    if renderer == "local":
        return LocalPdfExporter(storage)
    return ExportServiceClient(http, url)
