"""In-memory collaborators for the improvement pipeline tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from app.config import Settings, get_settings
from app.jobs.models import ImprovementJob, ImprovementResult, JobStatus, QualityAnalysis, QualityIssue
from app.storage.content_store import ContentItem, get_content_type


class InMemoryJobsRepo:
  """In-memory job record repository that mimics the Postgres patch semantics."""

  def __init__(self) -> None:
    self.jobs: dict[str, ImprovementJob] = {}
    self.calls: list[tuple[str, dict[str, Any]]] = []

  async def create_job(self, job: ImprovementJob) -> None:
    self.calls.append(("create", {"job_id": job.job_id}))
    self.jobs[job.job_id] = job

  async def get_job(self, job_id: str) -> ImprovementJob | None:
    return self.jobs.get(job_id)

  async def update_job(self, job_id: str, **patch: Any) -> ImprovementJob | None:
    self.calls.append(("update", dict(patch)))
    record = self.jobs.get(job_id)
    if record is None:
      return None
    updated = replace(record, **{key: value for key, value in patch.items() if value is not None})
    self.jobs[job_id] = updated
    return updated

  async def find_active(self, *, content_type: str, content_id: str, field: str) -> list[ImprovementJob]:
    return [job for job in self.jobs.values() if job.status is JobStatus.PROCESSING and (job.content_type, job.content_id, job.field) == (content_type, content_id, field)]

  async def list_jobs(self, *, limit: int, offset: int = 0, status: str | None = None, content_type: str | None = None) -> tuple[list[ImprovementJob], int]:
    records = [job for job in self.jobs.values() if (status is None or job.status.value == status) and (content_type is None or job.content_type == content_type)]
    records.sort(key=lambda job: job.started_at, reverse=True)
    return records[offset : offset + limit], len(records)

  async def count_by_status(self) -> dict[str, int]:
    counts: dict[str, int] = {}
    for job in self.jobs.values():
      counts[job.status.value] = counts.get(job.status.value, 0) + 1
    return counts


class InMemoryContentStore:
  """Content store over plain dicts keyed by (content_type, id)."""

  def __init__(self) -> None:
    self.rows: dict[tuple[str, str], dict[str, Any]] = {}
    self.writes: list[tuple[str, str, str, str]] = []

  def add(self, content_type: str, content_id: str, **fields: Any) -> None:
    self.rows[(content_type, content_id)] = {"id": content_id, "deleted_at": None, **fields}

  async def get_by_id(self, content_type: str, content_id: str) -> ContentItem | None:
    definition = get_content_type(content_type)
    row = self.rows.get((content_type, content_id))
    if row is None or (definition.soft_delete and row.get("deleted_at")):
      return None
    keywords = definition.keyword_hints(row)
    return ContentItem(content_type=content_type, id=content_id, title=row.get("title") or "", fields=dict(row), keywords=keywords)

  async def update_field(self, content_type: str, content_id: str, field: str, value: str, extra: dict[str, Any] | None = None) -> dict[str, Any] | None:
    definition = get_content_type(content_type)
    definition.resolve_field(field)
    row = self.rows.get((content_type, content_id))
    if row is None or (definition.soft_delete and row.get("deleted_at")):
      return None
    row[field] = value
    row.update(extra or {})
    row["updated_at"] = "2026-01-01T00:00:00+00:00"
    self.writes.append((content_type, content_id, field, value))
    return dict(row)


class FakeAnalyzer:
  """Returns a fixed analysis, raises, or stalls."""

  def __init__(self, analysis: QualityAnalysis | None = None, *, error: Exception | None = None, delay: float = 0.0) -> None:
    self.analysis = analysis or sample_analysis()
    self.error = error
    self.delay = delay
    self.calls: list[tuple[str, str, Sequence[str] | None]] = []

  async def analyze(self, text: str, title: str, hints: Sequence[str] | None = None) -> QualityAnalysis:
    self.calls.append((text, title, hints))
    if self.delay:
      await asyncio.sleep(self.delay)
    if self.error is not None:
      raise self.error
    return self.analysis


class FakeRewriter:
  """Upper-cases the text unless told to fail."""

  def __init__(self, *, error: Exception | None = None, delay: float = 0.0, score_gain: int = 20) -> None:
    self.error = error
    self.delay = delay
    self.score_gain = score_gain
    self.calls: list[tuple[str, str, QualityAnalysis]] = []

  async def rewrite(self, text: str, title: str, analysis: QualityAnalysis) -> ImprovementResult:
    self.calls.append((text, title, analysis))
    if self.delay:
      await asyncio.sleep(self.delay)
    if self.error is not None:
      raise self.error
    return ImprovementResult(improved_text=text.upper(), score_before=analysis.score, score_after=min(100, analysis.score + self.score_gain))


def sample_analysis(score: int = 55) -> QualityAnalysis:
  return QualityAnalysis(
    score=score,
    passed=False,
    issues=(QualityIssue(message="Kalıp ifadeler var", type="ai-pattern", severity="high", suggestion="Özgün ifadeler kullan"),),
    suggestions=("Cümleleri kısalt",),
    ai_generated=True,
    human_like_score=40,
    seo_score=60,
  )


def make_settings(**overrides: Any) -> Settings:
  """Build settings from the environment, then apply overrides."""
  base = get_settings.__wrapped__()
  defaults: dict[str, Any] = {"gemini_api_key": "test-gemini-key", "openai_api_key": None, "ai_timeout_seconds": 5.0, "persistence_timeout_seconds": 1.0}
  defaults.update(overrides)
  return replace(base, **defaults)

