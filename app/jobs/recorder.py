"""Best-effort, ordered persistence of one job's milestones."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from app.jobs.errors import PersistenceError
from app.jobs.models import ImprovementJob
from app.storage.jobs_repo import ImprovementJobsRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersistResult:
  """Outcome of one job record write."""

  ok: bool
  operation: str
  error: str | None = None


@dataclass(frozen=True)
class _Write:
  operation: str
  job: ImprovementJob | None = None
  patch: dict[str, Any] | None = None


_CLOSE = _Write(operation="close")


class JobRecorder:
  """Apply job record writes in order on a background task.

  The executor enqueues writes and keeps emitting frames; nothing here raises
  into the caller. Each write is bounded by ``timeout`` seconds. When the
  initial insert fails, later patches are skipped because there is no row to
  update.
  """

  def __init__(self, repo: ImprovementJobsRepository, job_id: str, *, timeout: float) -> None:
    self._repo = repo
    self._job_id = job_id
    self._timeout = timeout
    self._queue: asyncio.Queue[_Write] = asyncio.Queue()
    self._created = False
    self._results: list[PersistResult] = []
    self._task: asyncio.Task[None] | None = None

  @property
  def results(self) -> list[PersistResult]:
    return list(self._results)

  @property
  def failures(self) -> list[PersistResult]:
    return [result for result in self._results if not result.ok]

  def _ensure_started(self) -> None:
    if self._task is None:
      self._task = asyncio.create_task(self._drain(), name=f"job-recorder-{self._job_id}")

  def create(self, job: ImprovementJob) -> None:
    """Queue the initial insert."""
    self._ensure_started()
    self._queue.put_nowait(_Write(operation="create", job=job))

  def update(self, **patch: Any) -> None:
    """Queue a partial update."""
    self._ensure_started()
    self._queue.put_nowait(_Write(operation="update", patch=patch))

  async def close(self) -> list[PersistResult]:
    """Flush pending writes and stop the background task."""
    if self._task is None:
      return self.results
    self._queue.put_nowait(_CLOSE)
    await self._task
    return self.results

  async def _drain(self) -> None:
    while True:
      write = await self._queue.get()
      if write is _CLOSE:
        return
      result = await self._apply(write)
      self._results.append(result)

  async def _apply(self, write: _Write) -> PersistResult:
    if write.operation == "update" and not self._created:
      return PersistResult(ok=False, operation="update", error="job record was never created")

    try:
      if write.operation == "create":
        await asyncio.wait_for(self._repo.create_job(write.job), timeout=self._timeout)
        self._created = True
      else:
        record = await asyncio.wait_for(self._repo.update_job(self._job_id, **(write.patch or {})), timeout=self._timeout)
        if record is None:
          raise PersistenceError(f"Job record {self._job_id} not found for update.")
    except Exception as exc:  # noqa: BLE001
      # Job records are telemetry; failures never reach the live stream.
      error = str(exc) or type(exc).__name__
      logger.warning("Job record %s failed job_id=%s error=%s", write.operation, self._job_id, error)
      return PersistResult(ok=False, operation=write.operation, error=error)

    return PersistResult(ok=True, operation=write.operation)
