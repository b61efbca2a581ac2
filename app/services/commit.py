"""Write an accepted improvement back to its content item."""

from __future__ import annotations

import logging
from typing import Any

from app.jobs.errors import ContentNotFoundError, PersistenceError, ValidationError
from app.storage.content_store import ContentStore, get_content_type

logger = logging.getLogger(__name__)

MSG_IMPROVED_CONTENT_REQUIRED = "İyileştirilmiş içerik gerekli"


def _clamp_quality_score(raw: Any) -> int | None:
  if raw is None:
    return None
  try:
    value = int(round(float(raw)))
  except (TypeError, ValueError, OverflowError) as exc:
    raise ValidationError("qualityScore sayısal olmalı") from exc
  return max(0, min(100, value))


async def commit_improvement(store: ContentStore, content_type: str, content_id: str, field: str | None, improved_text: str | None, quality_score: Any = None) -> dict[str, Any]:
  """Persist the accepted text into the item's field and return the updated entity.

  Committing the same text twice leaves the item in the same state.
  """
  definition = get_content_type(content_type)
  resolved_field = definition.resolve_field(field)
  if improved_text is None or not improved_text.strip():
    raise ValidationError(MSG_IMPROVED_CONTENT_REQUIRED)

  extra: dict[str, Any] = {}
  score = _clamp_quality_score(quality_score)
  if score is not None:
    extra["quality_score"] = score

  try:
    entity = await store.update_field(definition.name, content_id, resolved_field, improved_text, extra or None)
  except ValidationError:
    raise
  except Exception as exc:  # noqa: BLE001
    logger.error("Commit failed content_type=%s content_id=%s field=%s", definition.name, content_id, resolved_field, exc_info=True)
    raise PersistenceError(str(exc) or type(exc).__name__) from exc

  if entity is None:
    raise ContentNotFoundError(definition.not_found_message)

  logger.info("Improvement committed content_type=%s content_id=%s field=%s quality_score=%s", definition.name, content_id, resolved_field, score)
  return entity
