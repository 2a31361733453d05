"""SQLAlchemy models and async database engine."""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, ForeignKey,
    Index, JSON,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from fitout.config import get_settings

Base = declarative_base()

# ─── MODELS ──────────────────────────────────────────────────────────────────

class CustomPattern(Base):
    """An administrator-authored matching rule."""
    __tablename__ = "patterns"

    # Primary key doubles as the uniqueness constraint that serializes racing creates
    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    pattern = Column(String(500), nullable=False)
    match_type = Column(String(20), nullable=False, default="contains")  # contains, equals, startsWith, endsWith, regex
    category = Column(String(20), nullable=False, default="service")     # service, trade, location, supply, intent
    maps_to = Column(String(255), nullable=True)
    notes = Column(Text, default="")
    enabled = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_patterns_category", "category"),
    )


class Trade(Base):
    """Canonical profession record."""
    __tablename__ = "trades"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), unique=True, nullable=False, index=True)
    category = Column(String(20), default="contractor")  # contractor, company, reseller, general
    profession_type = Column(String(50), default="contractor")
    aliases = Column(JSON, default=list)
    description = Column(Text, default="")
    enabled = Column(Boolean, default=True)
    featured = Column(Boolean, default=False)
    sort_order = Column(Integer, default=999)
    usage_count = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    service_mappings = relationship("ServiceMapping", back_populates="trade", cascade="all, delete-orphan")


class ServiceMapping(Base):
    """Direct keyword → trade edge used for fast lookups."""
    __tablename__ = "service_mappings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    keyword = Column(String(255), unique=True, nullable=False, index=True)
    trade_id = Column(Integer, ForeignKey("trades.id"), nullable=False)
    enabled = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    trade = relationship("Trade", back_populates="service_mappings")


# ─── DATABASE ENGINE ─────────────────────────────────────────────────────────

def get_engine():
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.app_env == "development",
    )


_engine = None
_session_factory = None


def get_session_factory():
    global _engine, _session_factory
    if _session_factory is None:
        _engine = get_engine()
        _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    return _session_factory


async def init_db():
    """Create all tables."""
    get_session_factory()  # ensures _engine is initialized
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db():
    """Close pooled connections and forget the engine."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_db():
    """FastAPI dependency for database sessions."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
