"""
Plugin metadata database
SQLAlchemy table and session factory backing the plugin info repository
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column, DateTime, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive values read back from backends without tz support (SQLite)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PluginInfoRecord(Base):  # type: ignore[valid-type, misc]
    """One plugin metadata record; releases live inside the JSON body"""

    __tablename__ = "plugin_info"

    id = Column(String(255), primary_key=True)
    service = Column(String(255), nullable=True, index=True)
    body = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_modified = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the metadata database.

    In-memory SQLite shares a single connection so every session sees the
    same database.
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(database_url, echo=echo, pool_pre_ping=True, pool_recycle=3600)


def init_db(engine: Engine) -> None:
    """Create the plugin_info table if it does not exist"""
    Base.metadata.create_all(bind=engine)
    logger.info("Plugin metadata schema ready")


def create_session_factory(settings: Optional[Settings] = None) -> sessionmaker:
    """
    Build a session factory from settings, creating the schema on first use.

    Args:
        settings: Application settings (defaults to get_settings())

    Returns:
        Configured sessionmaker bound to a fresh engine
    """
    settings = settings or get_settings()
    engine = create_db_engine(settings.database_url, echo=settings.database_echo)
    init_db(engine)
    return sessionmaker(autoflush=False, bind=engine, expire_on_commit=False)
