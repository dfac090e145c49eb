"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from . import __version__
from .api import rooms_router, notes_router
from .core.config import settings, ConfigurationError, Environment, DEFAULT_JWT_SECRET
from .core.logging_config import setup_logging
from .database import engine, get_db, init_db, SessionLocal, DATABASE_URL
from .exceptions import NoteriaException
from .middleware.exception_handler import noteria_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .repositories import NoteRepository, RoomRepository
from .services.maintenance_service import sweep_orphans

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _validate_database_connection() -> None:
    """Test that the database is reachable. Exits with a clear message on failure."""
    masked = _mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        if settings.is_sqlite():
            hint = "Check that the directory exists and is writable."
        else:
            hint = "Verify the server is running and DATABASE_URL credentials are correct."
        logger.critical(
            "Database connection failed.\n"
            f"  DATABASE_URL: {masked}\n"
            f"  {hint}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e


_validate_database_connection()
init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the Noteria API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        if settings.jwt_secret_key == DEFAULT_JWT_SECRET and settings.auth_enabled:
            logger.warning(
                "SECURITY: JWT_SECRET_KEY is the default. "
                "Anyone can forge tokens. Generate a secure key: openssl rand -hex 32"
            )
        if not settings.auth_enabled:
            logger.warning(
                "SECURITY: Authentication is disabled (AUTH_ENABLED=false). "
                "Every request acts as '%s'.",
                settings.dev_user_id,
            )

    if settings.orphan_sweep_on_startup:
        db = SessionLocal()
        try:
            result = sweep_orphans(db)
            if result.rooms or result.notes:
                logger.info(
                    f"Startup sweep removed {result.rooms} orphaned rooms and {result.notes} orphaned notes"
                )
        except NoteriaException as e:
            logger.warning(f"Orphan sweep failed (non-fatal): {e.message}")
        finally:
            db.close()

    yield


app = FastAPI(
    title="Noteria API",
    description=(
        "REST API for Noteria: nested rooms and the notes inside them. "
        "Deleting a room deletes its whole subtree of subrooms and notes.\n\n"
        "**Authentication:** every `/api/rooms` and `/api/notes` endpoint requires a "
        "`Bearer` token whose subject is the owner id."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(NoteriaException, noteria_exception_handler)

logger.info(
    "Noteria API started | env=%s | db=%s | auth=%s | cors=%s",
    settings.environment.value,
    "SQLite" if settings.is_sqlite() else "PostgreSQL",
    "enabled" if settings.auth_enabled else "disabled",
    ",".join(settings.get_cors_origins()),
)

app.include_router(rooms_router)
app.include_router(notes_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "Noteria API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
@app.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    """Database status, uptime and record counts.

    Never raises: a failing database yields ``degraded`` so load balancers
    can keep probing without receiving 5xx.
    """
    db_status = "ok"
    room_count = 0
    note_count = 0
    try:
        db.execute(text("SELECT 1"))
        room_count = RoomRepository(db).count()
        note_count = NoteRepository(db).count()
    except Exception:
        logger.warning("Health check database probe failed", exc_info=True)
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
        "room_count": room_count,
        "note_count": note_count,
    }
