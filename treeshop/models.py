"""
Database models and SQLAlchemy setup for TreeShop Ops.

Records are stored as opaque JSON documents keyed by collection name; the
database is only a key -> bytes store.
"""
from datetime import datetime, timezone

from sqlalchemy import create_engine, Column, String, LargeBinary, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

from treeshop.config import get_config


def _engine_for(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


DATABASE_URL = get_config().database_url
engine = _engine_for(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredDocument(Base):
    """One JSON payload per key (e.g. 'leads', 'invoices', 'pricing')."""
    __tablename__ = "documents"

    key = Column(String(100), primary_key=True)
    payload = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


def init_db(bind=None):
    """Initialize the database and create all tables."""
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Database session dependency for FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
