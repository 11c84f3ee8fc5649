"""
SQLAlchemy ORM models: the auth provider's User/Account/Session tables
plus the Activity and Resume rows this app owns.
"""

from datetime import datetime
from typing import Any
from sqlalchemy import String, Text, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from .database import Base


class User(Base):
    """
    Identity record created by the auth provider.
    `username` is the GitHub login used for event lookups.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), default="")
    username: Mapped[str | None] = mapped_column(String(120), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Account(Base):
    """
    One linked external-provider credential per provider per user.
    """
    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("user_id", "provider", name="uq_accounts_user_provider"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    provider: Mapped[str] = mapped_column(String(60))               # "github"
    provider_account_id: Mapped[str] = mapped_column(String(120), default="")
    access_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    token_type: Mapped[str | None] = mapped_column(String(60), nullable=True)
    scope: Mapped[str | None] = mapped_column(String(500), nullable=True)


class AuthSession(Base):
    """Session token issued by the auth provider at sign-in."""
    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    session_token: Mapped[str] = mapped_column(String(255), unique=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    expires: Mapped[datetime] = mapped_column(DateTime)


class Activity(Base):
    """
    One ingested GitHub event. The whole set for a user is replaced on sync;
    rows are never updated in place.
    """
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    type: Mapped[str] = mapped_column(String(120))
    content: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)  # {id, repo, payload, created_at}
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Resume(Base):
    """
    A generated or user-authored resume.
    content holds the tagged form from schemas.dump_content.
    document_url is set once, after upload/export.
    """
    __tablename__ = "resumes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    content: Mapped[Any] = mapped_column(JSON)
    document_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
