from __future__ import annotations

import datetime

from app.jobs.models import ImprovementResult, JobStatus, QualityAnalysis
from app.schema.content import Listing, NewsArticle
from app.schema.jobs import ContentAIImprovement
from app.storage.content_store import get_content_type
from app.storage.postgres_content_store import _row_to_dict
from app.storage.postgres_jobs_repo import PostgresImprovementJobsRepository, _to_column_value


def test_domain_values_flatten_to_column_values() -> None:
  analysis = QualityAnalysis(score=40, passed=False)

  assert _to_column_value(JobStatus.FAILED) == "failed"
  assert _to_column_value(analysis) == analysis.as_dict()
  assert _to_column_value(ImprovementResult(improved_text="x", score_before=40, score_after=60))["score"]["after"] == 60
  assert _to_column_value("İlan yükleniyor...") == "İlan yükleniyor..."


def test_job_row_rebuilds_domain_objects() -> None:
  analysis = QualityAnalysis(score=62, passed=False, suggestions=("Kısalt",))
  row = ContentAIImprovement(
    id="job-1",
    content_type="news",
    content_id="n-1",
    field="emlak_analysis",
    status="failed",
    progress=60,
    progress_message="İçerik iyileştiriliyor...",
    original_content="metin",
    quality_analysis=analysis.as_dict(),
    improvement_result=None,
    error_message="İçerik iyileştirme başarısız: timeout",
    started_at="2026-01-01T00:00:00Z",
    completed_at="2026-01-01T00:01:00Z",
  )
  repo = object.__new__(PostgresImprovementJobsRepository)

  job = repo._model_to_record(row)

  assert job.status is JobStatus.FAILED
  assert job.quality_analysis == analysis
  assert job.improvement_result is None
  assert job.progress == 60


def test_content_row_dict_is_json_safe() -> None:
  row = NewsArticle(id="n-1", title="Başlık", emlak_analysis="Analiz", seo_keywords=["karasu"], updated_at=datetime.datetime(2026, 1, 1, tzinfo=datetime.UTC))

  payload = _row_to_dict(row)

  assert payload["emlak_analysis"] == "Analiz"
  assert payload["seo_keywords"] == ["karasu"]
  assert payload["updated_at"] == "2026-01-01T00:00:00+00:00"
  assert payload["deleted_at"] is None


def test_listing_maps_property_type_and_no_keyword_column() -> None:
  columns = set(Listing.__table__.columns.keys())

  assert "property_type" in columns
  assert "keywords" not in columns


def test_keyword_hints_read_arrays_and_scalars() -> None:
  news = get_content_type("news")
  listing = get_content_type("listing")

  assert news.keyword_hints({"seo_keywords": ["karasu", " ", "emlak"]}) == ("karasu", "emlak")
  assert listing.keyword_hints({"property_type": "villa"}) == ("villa",)
  assert listing.keyword_hints({"property_type": None}) == ()
  assert listing.keyword_hints({}) == ()
