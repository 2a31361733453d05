"""Fitout Hub matching API: FastAPI application with scheduled pattern reloads.

Starts the API server, seeds the trade catalogue, loads the pattern snapshot,
and keeps it fresh with a background job.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from fitout.config import get_settings
from fitout.models.database import dispose_db, get_session_factory, init_db
from fitout.routers import intent_router, locations_router, patterns_router, trades_router
from fitout.services.pattern_store import pattern_store
from fitout.services.seed import seed_trades

# ─── LOGGING ─────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-25s | %(levelname)-7s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("fitout")

# ─── SCHEDULER ───────────────────────────────────────────────────────────────

scheduler = AsyncIOScheduler()


async def refresh_patterns():
    """Reload custom patterns so edits from other workers become visible."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        await pattern_store.refresh(session)


# ─── APP LIFECYCLE ───────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()

    # Initialize database
    logger.info("Initializing database...")
    await init_db()
    logger.info("Database ready")

    if settings.seed_on_startup:
        session_factory = get_session_factory()
        async with session_factory() as session:
            await seed_trades(session)
            await session.commit()

    await refresh_patterns()

    # Start scheduler
    if settings.scheduler_enabled:
        scheduler.add_job(
            refresh_patterns,
            trigger=IntervalTrigger(minutes=settings.pattern_refresh_minutes),
            id="pattern_refresh",
            name="Custom pattern reload",
            replace_existing=True,
        )
        scheduler.start()
        logger.info(f"Scheduler started, reloading patterns every {settings.pattern_refresh_minutes} minutes")

    yield

    # Shutdown
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
    await dispose_db()


# ─── APP ─────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Fitout Hub Matching API",
    description=(
        "Renovation marketplace matching API. Resolves free-text project "
        "descriptions and searches to trades, Hong Kong locations, work intent "
        "and navigation actions, and manages the custom matching rules."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# CORS: allow frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(intent_router, prefix="/api/v1")
app.include_router(patterns_router, prefix="/api/v1")
app.include_router(trades_router, prefix="/api/v1")
app.include_router(locations_router, prefix="/api/v1")


# ─── HEALTH CHECK ────────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    snapshot = pattern_store.snapshot()
    db = get_settings().database_url
    return {
        "status": "ok",
        "service": "fitout-api",
        "version": "1.0.0",
        "db_type": "postgres" if "postgres" in db else "sqlite",
        "patterns": {
            "core": len(snapshot.core()),
            "user": len(snapshot.user()),
            "broken": len(snapshot.broken),
        },
    }


@app.get("/")
async def root():
    return {
        "name": "Fitout Hub Matching API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }
