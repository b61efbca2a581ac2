from __future__ import annotations

from typing import Any

import pytest

from app.jobs.errors import ContentNotFoundError, PersistenceError, ValidationError
from app.services.commit import MSG_IMPROVED_CONTENT_REQUIRED, commit_improvement
from tests.fakes import InMemoryContentStore


@pytest.mark.anyio
async def test_commit_writes_field_and_clamped_score(content_store: InMemoryContentStore) -> None:
  entity = await commit_improvement(content_store, "news", "news-1", None, "Yeni analiz metni.", quality_score=130)

  assert entity["emlak_analysis"] == "Yeni analiz metni."
  assert entity["quality_score"] == 100
  assert entity["updated_at"]
  assert content_store.writes == [("news", "news-1", "emlak_analysis", "Yeni analiz metni.")]


@pytest.mark.anyio
async def test_commit_twice_leaves_the_same_state(content_store: InMemoryContentStore) -> None:
  first = await commit_improvement(content_store, "listing", "listing-1", "description", "Bahçeli, denize yakın villa.")
  second = await commit_improvement(content_store, "listing", "listing-1", "description", "Bahçeli, denize yakın villa.")

  assert first == second
  assert "quality_score" not in second


@pytest.mark.anyio
@pytest.mark.parametrize("text", ["", "   \n", None])
async def test_empty_text_is_rejected(content_store: InMemoryContentStore, text: str | None) -> None:
  with pytest.raises(ValidationError) as exc_info:
    await commit_improvement(content_store, "news", "news-1", "content", text)

  assert exc_info.value.message == MSG_IMPROVED_CONTENT_REQUIRED
  assert content_store.writes == []


@pytest.mark.anyio
async def test_fields_outside_the_allow_list_are_rejected(content_store: InMemoryContentStore) -> None:
  with pytest.raises(ValidationError):
    await commit_improvement(content_store, "news", "news-1", "title", "Yeni başlık")
  with pytest.raises(ValidationError):
    await commit_improvement(content_store, "pages", "p-1", None, "metin")


@pytest.mark.anyio
@pytest.mark.parametrize("score", [float("inf"), float("-inf"), float("nan"), "yüksek"])
async def test_non_numeric_or_infinite_score_is_rejected(content_store: InMemoryContentStore, score: object) -> None:
  with pytest.raises(ValidationError):
    await commit_improvement(content_store, "news", "news-1", None, "metin", quality_score=score)

  assert content_store.writes == []


@pytest.mark.anyio
async def test_missing_item_raises_not_found(content_store: InMemoryContentStore) -> None:
  with pytest.raises(ContentNotFoundError) as exc_info:
    await commit_improvement(content_store, "listing", "missing", None, "metin")

  assert exc_info.value.message == "İlan bulunamadı"


@pytest.mark.anyio
async def test_store_failure_becomes_persistence_error() -> None:
  class BrokenStore(InMemoryContentStore):
    async def update_field(self, content_type: str, content_id: str, field: str, value: str, extra: dict[str, Any] | None = None) -> dict[str, Any] | None:
      raise OSError("disk full")

  with pytest.raises(PersistenceError):
    await commit_improvement(BrokenStore(), "news", "news-1", None, "metin")
