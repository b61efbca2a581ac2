"""Postgres-backed repository for improvement job records using SQLAlchemy."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select

from app.core.database import get_session_factory
from app.jobs.models import ImprovementJob, ImprovementResult, JobStatus, QualityAnalysis
from app.schema.jobs import ContentAIImprovement
from app.storage.jobs_repo import ImprovementJobsRepository

_UPDATABLE_COLUMNS = frozenset({"status", "progress", "progress_message", "original_content", "quality_analysis", "improvement_result", "improved_content", "error_message", "completed_at"})


def _to_column_value(value: Any) -> Any:
  """Flatten domain values into column values."""
  if isinstance(value, JobStatus):
    return value.value
  if isinstance(value, QualityAnalysis | ImprovementResult):
    return value.as_dict()
  return value


class PostgresImprovementJobsRepository(ImprovementJobsRepository):
  """Persist improvement jobs to the content_ai_improvements table."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  async def create_job(self, job: ImprovementJob) -> None:
    async with self._session_factory() as session:
      row = ContentAIImprovement(
        id=job.job_id,
        content_type=job.content_type,
        content_id=job.content_id,
        field=job.field,
        status=job.status.value,
        progress=job.progress,
        progress_message=job.progress_message,
        original_content=job.original_content,
        quality_analysis=job.quality_analysis.as_dict() if job.quality_analysis else None,
        improvement_result=job.improvement_result.as_dict() if job.improvement_result else None,
        improved_content=job.improved_content,
        error_message=job.error_message,
        started_at=job.started_at,
        completed_at=job.completed_at,
      )
      session.add(row)
      await session.commit()

  async def get_job(self, job_id: str) -> ImprovementJob | None:
    async with self._session_factory() as session:
      row = await session.get(ContentAIImprovement, job_id)
      if row is None:
        return None
      return self._model_to_record(row)

  async def update_job(self, job_id: str, **patch: Any) -> ImprovementJob | None:
    unknown = set(patch) - _UPDATABLE_COLUMNS
    if unknown:
      raise ValueError(f"Unsupported job record fields: {sorted(unknown)}")

    async with self._session_factory() as session:
      row = await session.get(ContentAIImprovement, job_id)
      if row is None:
        return None
      for key, value in patch.items():
        if value is not None:
          setattr(row, key, _to_column_value(value))
      await session.commit()
      await session.refresh(row)
      return self._model_to_record(row)

  async def find_active(self, *, content_type: str, content_id: str, field: str) -> list[ImprovementJob]:
    async with self._session_factory() as session:
      stmt = select(ContentAIImprovement).where(
        ContentAIImprovement.content_type == content_type,
        ContentAIImprovement.content_id == content_id,
        ContentAIImprovement.field == field,
        ContentAIImprovement.status == JobStatus.PROCESSING.value,
      )
      result = await session.execute(stmt)
      return [self._model_to_record(row) for row in result.scalars().all()]

  async def list_jobs(self, *, limit: int, offset: int = 0, status: str | None = None, content_type: str | None = None) -> tuple[list[ImprovementJob], int]:
    async with self._session_factory() as session:
      filters = []
      if status:
        filters.append(ContentAIImprovement.status == status)
      if content_type:
        filters.append(ContentAIImprovement.content_type == content_type)

      count_stmt = select(func.count()).select_from(ContentAIImprovement).where(*filters)
      total = int((await session.execute(count_stmt)).scalar_one())

      stmt = select(ContentAIImprovement).where(*filters).order_by(ContentAIImprovement.started_at.desc()).limit(limit).offset(offset)
      rows = (await session.execute(stmt)).scalars().all()
      return [self._model_to_record(row) for row in rows], total

  async def count_by_status(self) -> dict[str, int]:
    async with self._session_factory() as session:
      stmt = select(ContentAIImprovement.status, func.count()).group_by(ContentAIImprovement.status)
      result = await session.execute(stmt)
      return {str(status): int(count) for status, count in result.all()}

  def _model_to_record(self, row: ContentAIImprovement) -> ImprovementJob:
    return ImprovementJob(
      job_id=row.id,
      content_type=row.content_type,
      content_id=row.content_id,
      field=row.field,
      status=JobStatus(row.status),
      progress=int(row.progress or 0),
      progress_message=row.progress_message or "",
      original_content=row.original_content,
      quality_analysis=QualityAnalysis.from_dict(row.quality_analysis) if row.quality_analysis else None,
      improvement_result=ImprovementResult.from_dict(row.improvement_result) if row.improvement_result else None,
      improved_content=row.improved_content,
      error_message=row.error_message,
      started_at=row.started_at,
      completed_at=row.completed_at,
    )
