"""Domain models for content improvement jobs."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from app.jobs.errors import InvalidTransitionError

_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def now_iso() -> str:
  """Return the current UTC time as an ISO-8601 string."""
  return time.strftime(_DATE_FORMAT, time.gmtime())


class JobStatus(str, Enum):
  """Closed set of job states."""

  PROCESSING = "processing"
  COMPLETED = "completed"
  FAILED = "failed"

  @property
  def is_terminal(self) -> bool:
    return self is not JobStatus.PROCESSING


_ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
  JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
  JobStatus.COMPLETED: frozenset(),
  JobStatus.FAILED: frozenset(),
}


def transition(current: JobStatus, target: JobStatus) -> JobStatus:
  """Validate a status change and return the new status."""
  if target not in _ALLOWED_TRANSITIONS[current]:
    raise InvalidTransitionError(f"Cannot transition job from {current.value} to {target.value}.")
  return target


def _clamp_score(raw: Any) -> int:
  try:
    number = float(raw or 0)
  except (TypeError, ValueError):
    return 0
  if math.isnan(number):
    return 0
  if math.isinf(number):
    return 100 if number > 0 else 0
  return max(0, min(100, int(round(number))))


@dataclass(frozen=True)
class QualityIssue:
  """One problem reported by the quality analyzer."""

  message: str
  type: str = "general"
  severity: str = "medium"
  suggestion: str = ""

  def as_dict(self) -> dict[str, Any]:
    return {"type": self.type, "severity": self.severity, "message": self.message, "suggestion": self.suggestion}

  @classmethod
  def from_raw(cls, raw: Any) -> QualityIssue:
    """Coerce a model-provided issue (object or bare string) into an issue."""
    if isinstance(raw, dict):
      severity = str(raw.get("severity") or "medium").lower()
      if severity not in {"low", "medium", "high"}:
        severity = "medium"
      return cls(message=str(raw.get("message") or ""), type=str(raw.get("type") or "general"), severity=severity, suggestion=str(raw.get("suggestion") or ""))
    return cls(message=str(raw))


@dataclass(frozen=True)
class QualityAnalysis:
  """Quality scores and findings for one piece of text."""

  score: int
  passed: bool
  issues: tuple[QualityIssue, ...] = ()
  suggestions: tuple[str, ...] = ()
  ai_generated: bool = False
  human_like_score: int = 0
  seo_score: int = 0

  def as_dict(self) -> dict[str, Any]:
    return {
      "score": self.score,
      "passed": self.passed,
      "issues": [issue.as_dict() for issue in self.issues],
      "suggestions": list(self.suggestions),
      "aiGenerated": self.ai_generated,
      "humanLikeScore": self.human_like_score,
      "seoScore": self.seo_score,
    }

  @classmethod
  def from_payload(cls, payload: dict[str, Any], *, pass_threshold: int = 70) -> QualityAnalysis:
    """Normalize a raw analyzer payload, clamping scores into 0..100."""
    score = _clamp_score(payload.get("score"))
    raw_issues = payload.get("issues")
    raw_suggestions = payload.get("suggestions")
    issues = tuple(QualityIssue.from_raw(item) for item in raw_issues) if isinstance(raw_issues, list) else ()
    suggestions = tuple(str(item) for item in raw_suggestions) if isinstance(raw_suggestions, list) else ()
    return cls(
      score=score,
      passed=payload.get("passed") is not False and score >= pass_threshold,
      issues=issues,
      suggestions=suggestions,
      ai_generated=payload.get("aiGenerated") is True,
      human_like_score=_clamp_score(payload.get("humanLikeScore")),
      seo_score=_clamp_score(payload.get("seoScore")),
    )

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> QualityAnalysis:
    """Rebuild a persisted analysis without re-deriving any value."""
    return cls(
      score=int(data["score"]),
      passed=bool(data["passed"]),
      issues=tuple(QualityIssue.from_raw(item) for item in data.get("issues") or []),
      suggestions=tuple(data.get("suggestions") or []),
      ai_generated=bool(data.get("aiGenerated")),
      human_like_score=int(data.get("humanLikeScore") or 0),
      seo_score=int(data.get("seoScore") or 0),
    )


@dataclass(frozen=True)
class ImprovementChange:
  """One edit the rewriter claims to have made."""

  improved: str
  reason: str
  type: str = "replaced"

  def as_dict(self) -> dict[str, Any]:
    return {"type": self.type, "improved": self.improved, "reason": self.reason}


@dataclass(frozen=True)
class ImprovementResult:
  """Rewritten text plus before/after score estimates."""

  improved_text: str
  score_before: int
  score_after: int
  changes: tuple[ImprovementChange, ...] = ()

  @property
  def score_delta(self) -> int:
    return self.score_after - self.score_before

  def as_dict(self) -> dict[str, Any]:
    return {
      "improved": self.improved_text,
      "score": {"before": self.score_before, "after": self.score_after, "improvement": self.score_delta},
      "changes": [change.as_dict() for change in self.changes],
    }

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> ImprovementResult:
    score = data.get("score") or {}
    changes = tuple(ImprovementChange(improved=str(item.get("improved") or ""), reason=str(item.get("reason") or ""), type=str(item.get("type") or "replaced")) for item in data.get("changes") or [])
    return cls(improved_text=str(data.get("improved") or ""), score_before=int(score.get("before") or 0), score_after=int(score.get("after") or 0), changes=changes)


@dataclass(frozen=True)
class ImprovementTarget:
  """Identifies the content field a job improves."""

  content_type: str
  content_id: str
  field: str


@dataclass(frozen=True)
class ImprovementJob:
  """Durable record of one improvement run.

  Instances are immutable; each step derives the next state through the
  methods below so invalid changes fail loudly instead of being persisted.
  """

  job_id: str
  content_type: str
  content_id: str
  field: str
  status: JobStatus = JobStatus.PROCESSING
  progress: int = 0
  progress_message: str = ""
  original_content: str | None = None
  quality_analysis: QualityAnalysis | None = None
  improvement_result: ImprovementResult | None = None
  improved_content: str | None = None
  error_message: str | None = None
  started_at: str = field(default_factory=now_iso)
  completed_at: str | None = None

  @classmethod
  def start(cls, job_id: str, target: ImprovementTarget, *, message: str = "") -> ImprovementJob:
    """Create a job that is already processing."""
    return cls(job_id=job_id, content_type=target.content_type, content_id=target.content_id, field=target.field, progress_message=message)

  @property
  def target(self) -> ImprovementTarget:
    return ImprovementTarget(content_type=self.content_type, content_id=self.content_id, field=self.field)

  def _require_processing(self) -> None:
    if self.status.is_terminal:
      raise InvalidTransitionError(f"Job {self.job_id} is already {self.status.value}.")

  def advance(self, percent: int, message: str) -> ImprovementJob:
    """Move progress forward; progress never decreases."""
    self._require_processing()
    if not 0 <= percent <= 100:
      raise InvalidTransitionError(f"Progress {percent} is outside 0..100.")
    if percent < self.progress:
      raise InvalidTransitionError(f"Progress cannot go from {self.progress} back to {percent}.")
    return replace(self, progress=percent, progress_message=message)

  def with_original_content(self, text: str) -> ImprovementJob:
    self._require_processing()
    if self.original_content is not None:
      raise InvalidTransitionError("Original content is captured once.")
    return replace(self, original_content=text)

  def with_analysis(self, analysis: QualityAnalysis) -> ImprovementJob:
    self._require_processing()
    if self.quality_analysis is not None:
      raise InvalidTransitionError("Quality analysis is set once.")
    return replace(self, quality_analysis=analysis)

  def with_improvement(self, result: ImprovementResult) -> ImprovementJob:
    self._require_processing()
    if self.improvement_result is not None:
      raise InvalidTransitionError("Improvement result is set once.")
    return replace(self, improvement_result=result)

  def complete(self, message: str) -> ImprovementJob:
    status = transition(self.status, JobStatus.COMPLETED)
    improved = self.improvement_result.improved_text if self.improvement_result else None
    return replace(self, status=status, progress=100, progress_message=message, improved_content=improved, completed_at=now_iso())

  def fail(self, error_message: str) -> ImprovementJob:
    status = transition(self.status, JobStatus.FAILED)
    return replace(self, status=status, error_message=error_message, completed_at=now_iso())

  def as_dict(self) -> dict[str, Any]:
    return {
      "id": self.job_id,
      "contentType": self.content_type,
      "contentId": self.content_id,
      "field": self.field,
      "status": self.status.value,
      "progress": self.progress,
      "progressMessage": self.progress_message,
      "originalContent": self.original_content,
      "qualityAnalysis": self.quality_analysis.as_dict() if self.quality_analysis else None,
      "improvementResult": self.improvement_result.as_dict() if self.improvement_result else None,
      "improvedContent": self.improved_content,
      "errorMessage": self.error_message,
      "startedAt": self.started_at,
      "completedAt": self.completed_at,
    }
