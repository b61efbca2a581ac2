from __future__ import annotations

import asyncio
from typing import Any

import pytest

from app.jobs.models import ImprovementJob, ImprovementTarget, JobStatus
from app.jobs.recorder import JobRecorder
from tests.fakes import InMemoryJobsRepo


def _job(job_id: str = "job-1") -> ImprovementJob:
  return ImprovementJob.start(job_id, ImprovementTarget(content_type="listing", content_id="l-1", field="description"))


class FailingCreateRepo(InMemoryJobsRepo):
  async def create_job(self, job: ImprovementJob) -> None:
    raise RuntimeError("connection refused")


class SlowUpdateRepo(InMemoryJobsRepo):
  async def update_job(self, job_id: str, **patch: Any) -> ImprovementJob | None:
    await asyncio.sleep(1)
    return await super().update_job(job_id, **patch)


@pytest.mark.anyio
async def test_writes_are_applied_in_order() -> None:
  repo = InMemoryJobsRepo()
  recorder = JobRecorder(repo, "job-1", timeout=1.0)

  recorder.create(_job())
  recorder.update(progress=5, progress_message="İlan yükleniyor...")
  recorder.update(progress=15, original_content="Geniş bahçeli villa.")
  recorder.update(status=JobStatus.FAILED, error_message="İçerik analizi başarısız")
  results = await recorder.close()

  assert [result.ok for result in results] == [True, True, True, True]
  assert [call[0] for call in repo.calls] == ["create", "update", "update", "update"]
  record = repo.jobs["job-1"]
  assert record.progress == 15
  assert record.original_content == "Geniş bahçeli villa."
  assert record.status is JobStatus.FAILED


@pytest.mark.anyio
async def test_failed_create_skips_later_updates_without_raising() -> None:
  repo = FailingCreateRepo()
  recorder = JobRecorder(repo, "job-1", timeout=1.0)

  recorder.create(_job())
  recorder.update(progress=5)
  results = await recorder.close()

  assert [result.ok for result in results] == [False, False]
  assert results[0].error == "connection refused"
  assert results[1].error == "job record was never created"
  assert len(recorder.failures) == 2


@pytest.mark.anyio
async def test_update_of_unknown_record_counts_as_failure() -> None:
  repo = InMemoryJobsRepo()
  recorder = JobRecorder(repo, "job-1", timeout=1.0)

  recorder.create(_job())
  repo.jobs.clear()
  recorder.update(progress=5)
  results = await recorder.close()

  assert results[0].ok is True
  assert results[1].ok is False
  assert "not found" in (results[1].error or "")


@pytest.mark.anyio
async def test_slow_write_is_bounded_by_timeout() -> None:
  repo = SlowUpdateRepo()
  recorder = JobRecorder(repo, "job-1", timeout=0.05)

  recorder.create(_job())
  recorder.update(progress=5)
  results = await recorder.close()

  assert results[0].ok is True
  assert results[1].ok is False
  assert results[1].operation == "update"


@pytest.mark.anyio
async def test_close_without_writes_returns_empty() -> None:
  recorder = JobRecorder(InMemoryJobsRepo(), "job-1", timeout=1.0)

  assert await recorder.close() == []
