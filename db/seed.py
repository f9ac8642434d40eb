"""Seed the database with dev users.

Expects the schema to exist already (``alembic upgrade head``). Users whose
email is already present are skipped, so the script can be re-run safely.
Pass ``--reset`` to empty the users table first.
This is a dev-only script — not for production use.

Usage: python db/seed.py [--reset]
"""

import argparse
import asyncio
from datetime import datetime, timezone

import asyncpg

from user_api.config import settings

USERS = [
    ("alice@example.com", "Alice"),
    ("bob@example.com", "Bob"),
    ("carol@example.com", None),
]


def _dsn() -> str:
    # asyncpg uses postgresql:// not postgresql+asyncpg://
    url = settings.sqlalchemy_url.set(drivername="postgresql")
    return url.render_as_string(hide_password=False)


async def seed(reset: bool = False) -> None:
    server_settings = {}
    if settings.database_schema:
        server_settings["search_path"] = settings.database_schema
    conn = await asyncpg.connect(_dsn(), server_settings=server_settings)

    try:
        if reset:
            await conn.execute("TRUNCATE TABLE users RESTART IDENTITY")
            print("Emptied users table")

        now = datetime.now(timezone.utc)
        inserted = 0
        for email, name in USERS:
            row = await conn.fetchrow(
                "INSERT INTO users (email, name, created_at) VALUES ($1, $2, $3) "
                "ON CONFLICT (email) DO NOTHING RETURNING id",
                email, name, now,
            )
            if row:
                inserted += 1
        print(f"Inserted {inserted} users ({len(USERS) - inserted} already present)")
        print("Seed complete!")
    finally:
        await conn.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--reset", action="store_true", help="empty the users table first")
    args = parser.parse_args()
    asyncio.run(seed(reset=args.reset))
