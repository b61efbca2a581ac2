"""Postgres-backed content store for news articles and listings."""

from __future__ import annotations

import datetime
from datetime import UTC
from typing import Any

from sqlalchemy import inspect

from app.core.database import Base, get_session_factory
from app.schema.content import Listing, NewsArticle
from app.storage.content_store import ContentItem, ContentStore, get_content_type

_MODELS: dict[str, type[Base]] = {"news": NewsArticle, "listing": Listing}
_EXTRA_COLUMNS = frozenset({"quality_score"})


def _row_to_dict(row: Base) -> dict[str, Any]:
  """Convert a mapped row into a JSON-safe dict."""
  payload: dict[str, Any] = {}
  for column in inspect(row).mapper.column_attrs:
    value = getattr(row, column.key)
    if isinstance(value, datetime.datetime):
      value = value.isoformat()
    payload[column.key] = value
  return payload


class PostgresContentStore(ContentStore):
  """Read and write improvable content rows."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  async def get_by_id(self, content_type: str, content_id: str) -> ContentItem | None:
    definition = get_content_type(content_type)
    model = _MODELS[definition.name]
    async with self._session_factory() as session:
      row = await session.get(model, content_id)
      if row is None:
        return None
      if definition.soft_delete and getattr(row, "deleted_at", None) is not None:
        return None

      fields = _row_to_dict(row)
      keywords = definition.keyword_hints(fields)
      return ContentItem(content_type=definition.name, id=str(row.id), title=fields.get("title") or "", fields=fields, keywords=keywords)

  async def update_field(self, content_type: str, content_id: str, field: str, value: str, extra: dict[str, Any] | None = None) -> dict[str, Any] | None:
    definition = get_content_type(content_type)
    # Only allow-listed columns are writable through this path.
    definition.resolve_field(field)
    unknown = set(extra or {}) - _EXTRA_COLUMNS
    if unknown:
      raise ValueError(f"Unsupported extra columns: {sorted(unknown)}")

    model = _MODELS[definition.name]
    async with self._session_factory() as session:
      row = await session.get(model, content_id)
      if row is None:
        return None
      if definition.soft_delete and getattr(row, "deleted_at", None) is not None:
        return None

      setattr(row, field, value)
      for key, extra_value in (extra or {}).items():
        setattr(row, key, extra_value)
      row.updated_at = datetime.datetime.now(UTC)
      await session.commit()
      await session.refresh(row)
      return _row_to_dict(row)
