"""Shared pytest fixtures.

The app's engine is built from settings at import time, so the SQLite URL
must be in the environment before anything under ``user_api`` is imported.
"""

import asyncio
import os
import shutil
import tempfile
from pathlib import Path

_DB_DIR = Path(tempfile.mkdtemp(prefix="user-service-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'test.db'}"
os.environ["MIGRATE_ON_STARTUP"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from user_api.database import async_session, engine  # noqa: E402
from user_api.main import app  # noqa: E402
from user_api.models import Base  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _remove_db_dir():
    yield
    shutil.rmtree(_DB_DIR, ignore_errors=True)


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _reset_schema_and_dispose() -> None:
    await _reset_schema()
    # Pooled connections are bound to this loop; TestClient runs its own.
    await engine.dispose()


@pytest.fixture
def client():
    """TestClient over a freshly created schema, with lifespan events run."""
    asyncio.run(_reset_schema_and_dispose())
    with TestClient(app) as c:
        yield c


@pytest_asyncio.fixture
async def session():
    """An AsyncSession over a freshly created schema."""
    await _reset_schema()
    async with async_session() as s:
        yield s
    await engine.dispose()
