"""Frames pushed from the job executor to live observers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from app.jobs.models import QualityAnalysis

FrameType = Literal["progress", "complete", "error"]


@dataclass(frozen=True)
class ProgressFrame:
  """Intermediate step update."""

  step: str
  percent: int
  data: dict[str, Any] = field(default_factory=dict)

  type: FrameType = field(default="progress", init=False)
  terminal: bool = field(default=False, init=False)

  def as_dict(self) -> dict[str, Any]:
    return {"type": self.type, "step": self.step, "progress": self.percent, "data": dict(self.data)}


@dataclass(frozen=True)
class CompleteFrame:
  """Terminal frame carrying the full before/after comparison."""

  result: dict[str, Any]

  type: FrameType = field(default="complete", init=False)
  terminal: bool = field(default=True, init=False)

  @property
  def percent(self) -> int:
    return 100

  def as_dict(self) -> dict[str, Any]:
    return {"type": self.type, "success": True, "progress": self.percent, **self.result}


@dataclass(frozen=True)
class ErrorFrame:
  """Terminal frame carrying the failure message and any partial analysis."""

  message: str
  analysis: QualityAnalysis | None = None

  type: FrameType = field(default="error", init=False)
  terminal: bool = field(default=True, init=False)

  def as_dict(self) -> dict[str, Any]:
    payload: dict[str, Any] = {"type": self.type, "error": self.message}
    if self.analysis is not None:
      payload["analysis"] = self.analysis.as_dict()
    return payload


Frame = ProgressFrame | CompleteFrame | ErrorFrame
