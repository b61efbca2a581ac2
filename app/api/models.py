from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ImproveRequest(BaseModel):
  """Request payload for starting an improvement job."""

  field: StrictStr | None = Field(default=None, description="Text field to improve; defaults to the content type's main field.", examples=["emlak_analysis"])
  model_config = ConfigDict(extra="ignore")


class CommitRequest(BaseModel):
  """Request payload for writing an accepted improvement back to the item."""

  field: StrictStr | None = Field(default=None, description="Text field to overwrite; defaults to the content type's main field.")
  improved_content: StrictStr | None = Field(default=None, alias="improvedContent", description="Accepted improved text.")
  quality_score: float | None = Field(default=None, alias="qualityScore", description="Optional score stored alongside the text (clamped to 0..100).")
  model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CommitResponse(BaseModel):
  success: Literal[True] = True
  entity: dict[str, Any]


class CommitErrorResponse(BaseModel):
  success: Literal[False] = False
  error: str


class QueueStats(BaseModel):
  processing: int = 0
  completed: int = 0
  failed: int = 0
  total: int = 0


class ImprovementJobResponse(BaseModel):
  """Job record snapshot returned to polling clients."""

  id: str
  content_type: str = Field(alias="contentType")
  content_id: str = Field(alias="contentId")
  field: str
  status: Literal["processing", "completed", "failed"]
  progress: int
  progress_message: str | None = Field(default=None, alias="progressMessage")
  original_content: str | None = Field(default=None, alias="originalContent")
  quality_analysis: dict[str, Any] | None = Field(default=None, alias="qualityAnalysis")
  improvement_result: dict[str, Any] | None = Field(default=None, alias="improvementResult")
  improved_content: str | None = Field(default=None, alias="improvedContent")
  error_message: str | None = Field(default=None, alias="errorMessage")
  started_at: str = Field(alias="startedAt")
  completed_at: str | None = Field(default=None, alias="completedAt")
  model_config = ConfigDict(populate_by_name=True)


class ImprovementQueueResponse(BaseModel):
  stats: QueueStats
  recent: list[ImprovementJobResponse]
  total: int
  limit: int
  offset: int
