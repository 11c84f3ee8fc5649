"""
Resume endpoints: CRUD scoped to the caller, AI generation and PDF export.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..deps import get_current_user, get_pdf_exporter, get_storage, get_summarizer
from ..models import Resume, User
from ..schemas import ExportOut, ResumeCreate, ResumeOut, ResumeUpdate, UploadTicket, dump_content
from ..services.export import (
    PdfExporter, attach_document, export_resume, get_owned_resume, presigned_export,
    upload_ticket, user_key,
)
from ..services.storage import S3Storage
from ..services.summarizer import SummarizerClient, generate_resume

router = APIRouter(prefix="/resumes", tags=["resumes"])


@router.get("", response_model=list[ResumeOut])
def list_resumes(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(Resume)
        .filter(Resume.user_id == user.id)
        .order_by(Resume.created_at.desc(), Resume.id.desc())
        .all()
    )


@router.post("", response_model=ResumeOut, status_code=status.HTTP_201_CREATED)
def create_resume(body: ResumeCreate, user: User = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    row = Resume(user_id=user.id, content=dump_content(body.content))
    db.add(row); db.commit(); db.refresh(row)
    return row


@router.post("/generate", response_model=ResumeOut, status_code=status.HTTP_201_CREATED)
async def generate(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    summarizer: SummarizerClient = Depends(get_summarizer),
):
    """Summarize the caller's latest 50 activities into a new resume."""
    return await generate_resume(db, user, summarizer)


@router.get("/upload-url", response_model=UploadTicket)
def get_upload_url(
    key: str = Query(..., min_length=1, max_length=512),
    content_type: str = Query(..., min_length=1, max_length=120),
    user: User = Depends(get_current_user),
    storage: S3Storage = Depends(get_storage),
):
    """Pre-signed PUT URL under the caller's key prefix."""
    return upload_ticket(storage, user_key(user, key), content_type)


@router.patch("/{resume_id}", response_model=ResumeOut)
def update_resume(resume_id: int, body: ResumeUpdate, user: User = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    """Attach the uploaded document URL."""
    resume = get_owned_resume(db, user, resume_id)
    return attach_document(db, resume, body.url)


@router.post("/{resume_id}/export", response_model=ExportOut)
async def export(
    resume_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: S3Storage = Depends(get_storage),
    exporter: PdfExporter = Depends(get_pdf_exporter),
):
    """
    EXPORT_MODE=presigned: return an upload ticket; the client uploads, then PATCHes the URL.
    EXPORT_MODE=render: render the PDF server-side and attach its URL now.
    """
    if settings.export_mode == "presigned":
        resume, ticket = presigned_export(db, user, resume_id, storage)
        return ExportOut(mode="presigned", resume=ResumeOut.model_validate(resume),
                         upload_url=ticket.upload_url, public_url=ticket.public_url)

    resume = await export_resume(db, user, resume_id, exporter)
    return ExportOut(mode="render", resume=ResumeOut.model_validate(resume),
                     public_url=resume.document_url)
