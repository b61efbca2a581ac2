"""Repository factories, swapped out by tests via monkeypatch."""

from __future__ import annotations

from app.config import Settings
from app.storage.content_store import ContentStore
from app.storage.jobs_repo import ImprovementJobsRepository


def _get_jobs_repo(settings: Settings) -> ImprovementJobsRepository:
  """Return the job record repository."""
  _ = settings
  from app.storage.postgres_jobs_repo import PostgresImprovementJobsRepository

  return PostgresImprovementJobsRepository()


def _get_content_store(settings: Settings) -> ContentStore:
  """Return the content store."""
  _ = settings
  from app.storage.postgres_content_store import PostgresContentStore

  return PostgresContentStore()
