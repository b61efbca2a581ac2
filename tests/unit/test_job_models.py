from __future__ import annotations

import pytest

from app.jobs.errors import ExternalServiceError, InvalidTransitionError
from app.jobs.models import ImprovementJob, ImprovementResult, ImprovementTarget, JobStatus, QualityAnalysis, QualityIssue, transition


def _job() -> ImprovementJob:
  return ImprovementJob.start("job-1", ImprovementTarget(content_type="news", content_id="n-1", field="emlak_analysis"), message="Başlatılıyor...")


def test_processing_can_only_move_to_terminal_states() -> None:
  assert transition(JobStatus.PROCESSING, JobStatus.COMPLETED) is JobStatus.COMPLETED
  assert transition(JobStatus.PROCESSING, JobStatus.FAILED) is JobStatus.FAILED

  for terminal in (JobStatus.COMPLETED, JobStatus.FAILED):
    for target in JobStatus:
      with pytest.raises(InvalidTransitionError):
        transition(terminal, target)


def test_new_job_starts_processing_at_zero() -> None:
  job = _job()

  assert job.status is JobStatus.PROCESSING
  assert job.progress == 0
  assert job.started_at
  assert job.completed_at is None
  assert job.target == ImprovementTarget(content_type="news", content_id="n-1", field="emlak_analysis")


def test_progress_never_moves_backwards() -> None:
  job = _job().advance(50, "Analiz tamamlandı")

  assert job.advance(50, "tekrar").progress == 50
  with pytest.raises(InvalidTransitionError):
    job.advance(15, "geri")
  with pytest.raises(InvalidTransitionError):
    job.advance(101, "fazla")


def test_terminal_job_rejects_further_changes() -> None:
  job = _job().fail("Haber bulunamadı")

  assert job.status is JobStatus.FAILED
  assert job.error_message == "Haber bulunamadı"
  assert job.completed_at is not None
  with pytest.raises(InvalidTransitionError):
    job.advance(60, "devam")
  with pytest.raises(InvalidTransitionError):
    job.complete("Tamamlandı!")
  with pytest.raises(InvalidTransitionError):
    job.with_analysis(QualityAnalysis(score=10, passed=False))


def test_analysis_and_result_are_set_once() -> None:
  analysis = QualityAnalysis(score=40, passed=False)
  job = _job().with_original_content("metin").with_analysis(analysis)

  with pytest.raises(InvalidTransitionError):
    job.with_analysis(analysis)
  with pytest.raises(InvalidTransitionError):
    job.with_original_content("başka")

  result = ImprovementResult(improved_text="METİN", score_before=40, score_after=60)
  job = job.with_improvement(result)
  with pytest.raises(InvalidTransitionError):
    job.with_improvement(result)


def test_complete_copies_improved_text_and_sets_full_progress() -> None:
  job = _job().with_analysis(QualityAnalysis(score=40, passed=False)).with_improvement(ImprovementResult(improved_text="yeni", score_before=40, score_after=60))
  done = job.advance(95, "Sonuçlar kaydediliyor...").complete("Tamamlandı!")

  assert done.status is JobStatus.COMPLETED
  assert done.progress == 100
  assert done.improved_content == "yeni"
  assert done.quality_analysis == job.quality_analysis


def test_quality_analysis_normalizes_model_payload() -> None:
  payload = {
    "score": 142,
    "passed": True,
    "issues": ["Çok uzun cümleler", {"type": "seo", "severity": "critical", "message": "Anahtar kelime yok", "suggestion": "Ekle"}],
    "suggestions": ["Kısalt"],
    "aiGenerated": True,
    "humanLikeScore": "35",
    "seoScore": -4,
  }

  analysis = QualityAnalysis.from_payload(payload, pass_threshold=70)

  assert analysis.score == 100
  assert analysis.passed is True
  assert analysis.issues[0] == QualityIssue(message="Çok uzun cümleler")
  assert analysis.issues[1].severity == "medium"
  assert analysis.issues[1].type == "seo"
  assert analysis.human_like_score == 35
  assert analysis.seo_score == 0


def test_quality_analysis_fails_below_threshold_even_when_model_says_passed() -> None:
  analysis = QualityAnalysis.from_payload({"score": 65, "passed": True}, pass_threshold=70)

  assert analysis.passed is False
  assert analysis.issues == ()


def test_persisted_values_rebuild_to_the_same_objects() -> None:
  analysis = QualityAnalysis.from_payload({"score": 55, "issues": [{"message": "Tekrar", "suggestion": "Eş anlamlı kullan"}], "suggestions": ["A"]})
  result = ImprovementResult(improved_text="yeni", score_before=55, score_after=75)

  assert QualityAnalysis.from_dict(analysis.as_dict()) == analysis
  assert ImprovementResult.from_dict(result.as_dict()) == result
  assert result.as_dict()["score"] == {"before": 55, "after": 75, "improvement": 20}


def test_job_dict_uses_camel_case_keys() -> None:
  payload = _job().as_dict()

  assert payload["id"] == "job-1"
  assert payload["contentType"] == "news"
  assert payload["status"] == "processing"
  assert payload["qualityAnalysis"] is None


@pytest.mark.parametrize(("raw", "expected"), [(float("inf"), 100), (float("-inf"), 0), ("1e400", 100), (float("nan"), 0)])
def test_non_finite_scores_clamp_to_bounds(raw: object, expected: int) -> None:
  analysis = QualityAnalysis.from_payload({"score": raw, "seoScore": raw, "humanLikeScore": raw})

  assert analysis.score == expected
  assert analysis.seo_score == expected
  assert analysis.human_like_score == expected


def test_domain_errors_carry_only_their_message() -> None:
  error = ExternalServiceError("openai: 500")

  assert error.message == "openai: 500"
  assert str(error) == "openai: 500"
  with pytest.raises(TypeError):
    ExternalServiceError("openai: 500", partial={"score": 55})  # type: ignore[call-arg]
