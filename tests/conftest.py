"""Shared fixtures for the improvement pipeline tests."""

from __future__ import annotations

import os

# Ensure required settings are available before importing the app.
os.environ.setdefault("KARASU_ALLOWED_ORIGINS", "http://localhost")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.config import Settings  # noqa: E402
from tests.fakes import InMemoryContentStore, InMemoryJobsRepo, make_settings  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def jobs_repo() -> InMemoryJobsRepo:
  return InMemoryJobsRepo()


@pytest.fixture
def content_store() -> InMemoryContentStore:
  store = InMemoryContentStore()
  store.add("news", "news-1", title="Karasu'da konut fiyatları", emlak_analysis="Karasu bölgesinde fiyatlar yükseliyor.", content="Haber metni", seo_keywords=["karasu", "emlak"])
  store.add("listing", "listing-1", title="Denize sıfır villa", description="Geniş bahçeli villa.", description_short="", property_type="villa")
  return store


@pytest.fixture
def settings() -> Settings:
  return make_settings()


@pytest.fixture
async def async_client():
  from app.main import app

  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
