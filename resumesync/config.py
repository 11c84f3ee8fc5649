# resumesync/config.py
from __future__ import annotations
from pathlib import Path
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_ROOT = Path(__file__).resolve().parent  # .../resumesync

class Settings(BaseSettings):
    # App
    app_name: str = Field(default="ResumeSync", alias="APP_NAME")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    template_dir: str = Field(default="templates", alias="TEMPLATE_DIR")

    # DB
    database_url: str = Field(default="sqlite:///./local.db", alias="DATABASE_URL")

    # GitHub
    github_api_url: str = Field(default="https://api.github.com", alias="GITHUB_API_URL")
    github_token: Optional[str] = Field(default=None, alias="GITHUB_TOKEN")
    github_user_agent: str = Field(default="Smart-Resume-Agent", alias="GITHUB_USER_AGENT")
    github_events_per_page: int = Field(default=100, ge=1, le=100, alias="GITHUB_EVENTS_PER_PAGE")

    # Outbound services
    http_timeout: float = Field(default=20.0, alias="HTTP_TIMEOUT")
    summarizer_url: str = Field(default="http://localhost:3000/summarize", alias="SUMMARIZER_URL")
    export_service_url: str = Field(default="http://localhost:3000/export-pdf", alias="EXPORT_SERVICE_URL")

    # Export variant: client upload via pre-signed URL, or server-side render
    export_mode: Literal["presigned", "render"] = Field(default="presigned", alias="EXPORT_MODE")
    pdf_renderer: Literal["service", "local"] = Field(default="service", alias="PDF_RENDERER")

    # Object storage (S3)
    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    aws_s3_bucket_name: str = Field(default="", alias="AWS_S3_BUCKET_NAME")
    aws_access_key_id: Optional[str] = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    s3_endpoint_url: Optional[str] = Field(default=None, alias="S3_ENDPOINT_URL")
    s3_public_base_url: Optional[str] = Field(default=None, alias="S3_PUBLIC_BASE_URL")
    upload_url_expires_in: int = Field(default=3600, alias="UPLOAD_URL_EXPIRES_IN")

    # .env loader
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Relative template dirs are resolved from the package
    @property
    def template_path(self) -> Path:
        p = Path(self.template_dir)
        return p if p.is_absolute() else (_PACKAGE_ROOT / p)

settings = Settings()
