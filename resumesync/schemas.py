# resumesync/schemas.py
from __future__ import annotations
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator,
)

from .errors import ValidationFailure

# --- GitHub events (shape checked on every fetch) ---

class GitHubRepo(BaseModel):
    name: str

class GitHubEvent(BaseModel):
    id: str
    type: str
    repo: GitHubRepo
    payload: Dict[str, Any]
    created_at: str

github_events = TypeAdapter(List[GitHubEvent])


# --- Resume content: tagged variant ---

class PlainTextContent(BaseModel):
    kind: Literal["text"] = "text"
    text: str

class StructuredContent(BaseModel):
    """Structured resume body; extra sections (experience, skills, ...) ride along."""
    model_config = ConfigDict(extra="allow")
    kind: Literal["structured"] = "structured"
    summary: str

ResumeContent = Annotated[Union[PlainTextContent, StructuredContent], Field(discriminator="kind")]
_content_adapter = TypeAdapter(ResumeContent)


def _tag(raw: Any) -> Any:
    # Untagged legacy shapes: bare string, or an object carrying a summary
    if isinstance(raw, str):
        return {"kind": "text", "text": raw}
    if isinstance(raw, dict) and "kind" not in raw and "summary" in raw:
        return {"kind": "structured", **raw}
    return raw


def load_content(raw: Any) -> PlainTextContent | StructuredContent:
    """Parse stored or submitted resume content into the tagged model."""
    if isinstance(raw, (PlainTextContent, StructuredContent)):
        return raw
    try:
        return _content_adapter.validate_python(_tag(raw))
    except ValidationError as e:
        raise ValidationFailure(f"Invalid resume content: {e.errors()[0]['msg']}") from e


def dump_content(content: PlainTextContent | StructuredContent) -> Dict[str, Any]:
    return content.model_dump(mode="json")


def summary_text(content: PlainTextContent | StructuredContent) -> str:
    if isinstance(content, PlainTextContent):
        return content.text
    return content.summary


# --- Requests ---

class ResumeCreate(BaseModel):
    content: ResumeContent

    @field_validator("content", mode="before")
    @classmethod
    def _accept_untagged(cls, v: Any) -> Any:
        return _tag(v)


_http_url = TypeAdapter(HttpUrl)

class ResumeUpdate(BaseModel):
    """`url` must parse as an http(s) URL; the string is stored exactly as sent."""
    url: str

    @field_validator("url")
    @classmethod
    def _must_be_http_url(cls, v: str) -> str:
        try:
            _http_url.validate_python(v)
        except ValidationError:
            raise ValueError("url must be an absolute http(s) URL") from None
        return v


# --- Responses ---

class ResumeOut(BaseModel):
    id: int
    content: ResumeContent
    document_url: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

    @field_validator("content", mode="before")
    @classmethod
    def _accept_untagged(cls, v: Any) -> Any:
        return _tag(v)

class SyncResult(BaseModel):
    message: str
    synced_activities: int

class UploadTicket(BaseModel):
    key: str
    upload_url: str
    public_url: str
    expires_in: int

class ExportOut(BaseModel):
    mode: Literal["presigned", "render"]
    resume: ResumeOut
    upload_url: Optional[str] = None
    public_url: Optional[str] = None
