import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .config import settings, setup_logging
from .database import engine
from .routes.users import router as users_router

setup_logging()
logger = logging.getLogger(__name__)

# Source checkout root, holding alembic.ini
PROJECT_ROOT = Path(__file__).resolve().parents[2]
ALEMBIC_INI = PROJECT_ROOT / "alembic.ini"


async def _run_migrations() -> None:
    """Run Alembic migrations on startup."""
    if not ALEMBIC_INI.is_file():
        raise RuntimeError(f"Database migration failed: {ALEMBIC_INI} not found")

    logger.info("Running database migrations...")
    try:
        proc = await asyncio.create_subprocess_exec(
            sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI), "upgrade", "head",
            cwd=ALEMBIC_INI.parent,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise RuntimeError(f"Database migration failed: {e}") from e
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        logger.error("Migration failed: %s", stderr.decode())
        raise RuntimeError(f"Database migration failed: {stderr.decode()}")
    logger.info("Migrations applied: %s", stdout.decode().strip())


async def _connect() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Connected to %s", settings.sqlalchemy_url.render_as_string(hide_password=True))


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.migrate_on_startup:
        await _run_migrations()
    await _connect()
    yield
    await engine.dispose()
    logger.info("Database connections closed")


app = FastAPI(title="User Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users_router)


@app.get("/health")
async def health():
    db_status = "disconnected"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check failed: %s", e)

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
    }
