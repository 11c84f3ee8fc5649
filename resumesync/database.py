"""
SQLAlchemy engine/session setup and a FastAPI dependency to get a DB session.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from .config import settings

# SQLite needs check_same_thread off because FastAPI runs sync deps in a threadpool
_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=_connect_args, future=True)

# Session factory (autoflush False avoids surprising implicit writes)
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)

# Declarative Base for models to inherit from
class Base(DeclarativeBase):
    pass


def init_db() -> None:
    """Create any missing tables."""
    from . import models  # noqa: F401  (registers tables on Base.metadata)
    Base.metadata.create_all(bind=engine)


def get_db():
    """
    FastAPI dependency that yields a SQLAlchemy session.
    Ensures the session is closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
