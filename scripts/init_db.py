"""Database initialization helper for local development.

Creates the configured database when missing, then the improvement job table.
Content tables normally belong to the main platform; pass
``--with-content-tables`` to create minimal versions for a standalone setup.
The database name is validated before use because CREATE DATABASE cannot be
parameterized in PostgreSQL.
"""

import argparse
import asyncio
import os
import re
import sys

from sqlalchemy import text
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import create_async_engine

# Add the project root to the path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


_DB_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def _validate_database_name(db_name: str) -> str:
  """Validate a PostgreSQL database name used as an identifier."""
  if not db_name:
    raise ValueError("Target database name is empty.")

  if not _DB_NAME_PATTERN.fullmatch(db_name):
    raise ValueError("Target database name contains invalid characters (allowed: A-Z, a-z, 0-9, _).")

  return db_name


def _async_url(dsn: str):  # type: ignore
  url = make_url(dsn)
  if url.drivername.startswith("postgresql") and "+asyncpg" not in url.drivername:
    url = url.set(drivername="postgresql+asyncpg")
  return url


async def create_database_if_not_exists(dsn: str) -> None:
  """Create the configured database if it does not already exist."""
  url = _async_url(dsn)
  target_db = _validate_database_name(url.database or "")
  postgres_url = url.set(database="postgres")

  print(f"Connecting to postgres to check for database '{target_db}'...")

  # CREATE DATABASE cannot run inside a transaction.
  engine = create_async_engine(postgres_url, isolation_level="AUTOCOMMIT")
  try:
    async with engine.connect() as conn:
      result = await conn.execute(text("SELECT 1 FROM pg_database WHERE datname = :name"), {"name": target_db})
      if result.scalar() == 1:
        print(f"Database '{target_db}' already exists.")
      else:
        print(f"Database '{target_db}' does not exist. Creating...")
        await conn.execute(text(f'CREATE DATABASE "{target_db}"'))
        print(f"Database '{target_db}' created successfully.")
  finally:
    await engine.dispose()


async def create_tables(dsn: str, *, with_content_tables: bool) -> None:
  """Create the job table, and optionally the content tables, when missing."""
  from app.core.database import Base
  from app.schema import ContentAIImprovement, Listing, NewsArticle

  tables = [ContentAIImprovement.__table__]
  if with_content_tables:
    tables.extend([NewsArticle.__table__, Listing.__table__])

  engine = create_async_engine(_async_url(dsn))
  try:
    async with engine.begin() as conn:
      await conn.run_sync(lambda sync_conn: Base.metadata.create_all(sync_conn, tables=tables, checkfirst=True))
  finally:
    await engine.dispose()
  print(f"Ensured tables: {', '.join(table.name for table in tables)}")


async def main(with_content_tables: bool) -> int:
  from app.config import get_database_settings

  dsn = get_database_settings().pg_dsn
  if not dsn:
    print("Error: KARASU_PG_DSN is not set.")
    return 1

  try:
    await create_database_if_not_exists(dsn)
    await create_tables(dsn, with_content_tables=with_content_tables)
  except Exception as e:  # noqa: BLE001
    print(f"Error initializing database: {e}")
    return 1
  return 0


if __name__ == "__main__":
  parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
  parser.add_argument("--with-content-tables", action="store_true", help="Also create news_articles and listings.")
  args = parser.parse_args()
  if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
  sys.exit(asyncio.run(main(args.with_content_tables)))
