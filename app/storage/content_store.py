"""Content store contract and the registry of improvable content types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from app.jobs.errors import ValidationError


@dataclass(frozen=True)
class ContentType:
  """Describes one improvable content type."""

  name: str
  default_field: str
  text_fields: frozenset[str]
  keywords_field: str | None
  soft_delete: bool
  not_found_message: str
  loading_message: str

  def resolve_field(self, field_name: str | None) -> str:
    """Return the requested field, or the default, when it is allowed."""
    resolved = (field_name or "").strip() or self.default_field
    if resolved not in self.text_fields:
      raise ValidationError(f"'{resolved}' alanı {self.name} için desteklenmiyor")
    return resolved

  def keyword_hints(self, fields: dict[str, Any]) -> tuple[str, ...]:
    """Read analyzer hints from a row; array columns and scalar columns both work."""
    if self.keywords_field is None:
      return ()
    raw = fields.get(self.keywords_field)
    if raw is None:
      return ()
    if isinstance(raw, str):
      raw = (raw,)
    return tuple(str(value).strip() for value in raw if value is not None and str(value).strip())


CONTENT_TYPES: dict[str, ContentType] = {
  "news": ContentType(
    name="news",
    default_field="emlak_analysis",
    text_fields=frozenset({"emlak_analysis", "content", "summary", "original_summary"}),
    keywords_field="seo_keywords",
    soft_delete=True,
    not_found_message="Haber bulunamadı",
    loading_message="Haber yükleniyor...",
  ),
  "listing": ContentType(
    name="listing",
    default_field="description",
    text_fields=frozenset({"description", "description_short"}),
    keywords_field="property_type",
    soft_delete=False,
    not_found_message="İlan bulunamadı",
    loading_message="İlan yükleniyor...",
  ),
}


def get_content_type(name: str) -> ContentType:
  """Look up a content type or raise a ValidationError."""
  definition = CONTENT_TYPES.get(name)
  if definition is None:
    raise ValidationError(f"Desteklenmeyen içerik türü: {name}")
  return definition


@dataclass(frozen=True)
class ContentItem:
  """Read-only view of one content row."""

  content_type: str
  id: str
  title: str
  fields: dict[str, Any] = field(default_factory=dict)
  keywords: tuple[str, ...] = ()

  def text(self, field_name: str) -> str | None:
    """Return the named field when it holds text."""
    value = self.fields.get(field_name)
    if isinstance(value, str):
      return value
    return None


class ContentStore(Protocol):
  """Contract for reading and writing content items."""

  async def get_by_id(self, content_type: str, content_id: str) -> ContentItem | None:
    """Return the item, or None when missing or soft-deleted."""

  async def update_field(self, content_type: str, content_id: str, field: str, value: str, extra: dict[str, Any] | None = None) -> dict[str, Any] | None:
    """Write one field (plus extra columns and the update timestamp); None when missing."""
