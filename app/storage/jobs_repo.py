"""Storage interfaces for improvement job records."""

from __future__ import annotations

from typing import Any, Protocol

from app.jobs.models import ImprovementJob


class ImprovementJobsRepository(Protocol):
  """Repository contract for improvement job persistence."""

  async def create_job(self, job: ImprovementJob) -> None:
    """Persist an initial job record."""

  async def get_job(self, job_id: str) -> ImprovementJob | None:
    """Fetch a job by identifier."""

  async def update_job(self, job_id: str, **patch: Any) -> ImprovementJob | None:
    """Apply a partial update to a job; returns None when the job is unknown."""

  async def find_active(self, *, content_type: str, content_id: str, field: str) -> list[ImprovementJob]:
    """Return processing jobs for the same content field."""

  async def list_jobs(self, *, limit: int, offset: int = 0, status: str | None = None, content_type: str | None = None) -> tuple[list[ImprovementJob], int]:
    """Return a page of jobs, newest first, and the total count."""

  async def count_by_status(self) -> dict[str, int]:
    """Return job counts keyed by status value."""
