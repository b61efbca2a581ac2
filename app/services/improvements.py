"""Start improvement jobs, track running tasks and read job records."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import HTTPException, status

from app.ai.quality import GenerativeQualityAnalyzer
from app.ai.rewriter import GenerativeRewriter
from app.ai.router import build_text_providers
from app.config import Settings
from app.jobs.channel import ProgressChannel
from app.jobs.executor import ImprovementJobExecutor
from app.jobs.models import ImprovementJob, ImprovementTarget, JobStatus
from app.storage.content_store import get_content_type
from app.storage.factory import _get_content_store, _get_jobs_repo

logger = logging.getLogger(__name__)

_JOB_NOT_FOUND_MSG = "Job not found."

# Strong references keep fire-and-forget job tasks alive until they finish.
_RUNNING_JOBS: set[asyncio.Task[ImprovementJob]] = set()


def build_executor(settings: Settings) -> ImprovementJobExecutor:
  """Wire the executor to the configured store, repository and providers."""
  providers = build_text_providers(settings)
  analyzer = GenerativeQualityAnalyzer(providers, pass_threshold=settings.quality_pass_threshold, char_limit=settings.content_char_limit)
  rewriter = GenerativeRewriter(providers, score_gain=settings.estimated_score_gain, char_limit=settings.content_char_limit)
  return ImprovementJobExecutor(content_store=_get_content_store(settings), analyzer=analyzer, rewriter=rewriter, jobs_repo=_get_jobs_repo(settings), settings=settings)


def resolve_target(content_type: str, content_id: str, field: str | None) -> ImprovementTarget:
  """Validate the content type and field before any job is created."""
  definition = get_content_type(content_type)
  return ImprovementTarget(content_type=definition.name, content_id=content_id, field=definition.resolve_field(field))


async def _warn_on_concurrent_jobs(job: ImprovementJob, settings: Settings) -> None:
  repo = _get_jobs_repo(settings)
  try:
    active = await asyncio.wait_for(repo.find_active(content_type=job.content_type, content_id=job.content_id, field=job.field), timeout=settings.persistence_timeout_seconds)
  except Exception as exc:  # noqa: BLE001
    logger.warning("Active job lookup failed job_id=%s error=%s", job.job_id, exc)
    return

  others = [record.job_id for record in active if record.job_id != job.job_id]
  if others:
    # Both jobs run; the last one to finish overwrites the shared record fields.
    logger.warning("Concurrent improvement for content_type=%s content_id=%s field=%s job_id=%s other_jobs=%s", job.content_type, job.content_id, job.field, job.job_id, ",".join(others))


def _log_task_error(task: asyncio.Task[ImprovementJob]) -> None:
  _RUNNING_JOBS.discard(task)
  if task.cancelled():
    logger.warning("Improvement task %s was cancelled", task.get_name())
    return
  exc = task.exception()
  if exc is not None:
    logger.error("Improvement task %s crashed", task.get_name(), exc_info=exc)


async def start_improvement(target: ImprovementTarget, settings: Settings, *, executor: ImprovementJobExecutor | None = None) -> tuple[ImprovementJob, ProgressChannel]:
  """Launch an executor task for the target and return its live channel.

  The task is independent of the caller: it keeps running when nobody reads
  the channel.
  """
  executor = executor or build_executor(settings)
  job = executor.new_job(target)
  await _warn_on_concurrent_jobs(job, settings)

  channel = ProgressChannel()
  task = asyncio.create_task(executor.run(target, channel, job=job), name=f"improvement-{job.job_id}")
  _RUNNING_JOBS.add(task)
  task.add_done_callback(_log_task_error)
  return job, channel


def running_job_count() -> int:
  return len(_RUNNING_JOBS)


async def drain_running_jobs(timeout: float) -> int:
  """Wait up to ``timeout`` seconds for running jobs; return how many are still running."""
  pending = set(_RUNNING_JOBS)
  if not pending:
    return 0

  logger.info("Waiting up to %.1fs for %d running improvement jobs", timeout, len(pending))
  _done, still_running = await asyncio.wait(pending, timeout=timeout)
  if still_running:
    logger.warning("%d improvement jobs still running at shutdown", len(still_running))
  return len(still_running)


async def get_improvement(job_id: str, settings: Settings) -> dict[str, Any]:
  """Return the persisted job record for polling clients."""
  repo = _get_jobs_repo(settings)
  record = await repo.get_job(job_id)
  if record is None:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_JOB_NOT_FOUND_MSG)
  return record.as_dict()


async def get_improvement_queue(settings: Settings, *, limit: int, offset: int = 0, status_filter: str | None = None, content_type: str | None = None) -> dict[str, Any]:
  """Return per-status counts and a page of recent job records."""
  if status_filter is not None:
    try:
      JobStatus(status_filter)
    except ValueError as exc:
      raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown status: {status_filter}") from exc

  repo = _get_jobs_repo(settings)
  counts = await repo.count_by_status()
  records, total = await repo.list_jobs(limit=limit, offset=offset, status=status_filter, content_type=content_type)

  stats = {state.value: int(counts.get(state.value, 0)) for state in JobStatus}
  stats["total"] = sum(stats.values())
  return {"stats": stats, "recent": [record.as_dict() for record in records], "total": total, "limit": limit, "offset": offset}
