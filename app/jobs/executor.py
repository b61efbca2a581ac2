"""Run one content improvement job and stream its progress."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any

from app.ai.quality import QualityAnalyzer
from app.ai.rewriter import Rewriter
from app.config import Settings
from app.jobs.channel import ProgressChannel
from app.jobs.errors import ConfigurationError, ContentNotFoundError, ExternalServiceError, ImprovementError, ValidationError
from app.jobs.frames import CompleteFrame, ErrorFrame, ProgressFrame
from app.jobs.models import ImprovementJob, ImprovementTarget, JobStatus
from app.jobs.recorder import JobRecorder
from app.storage.content_store import ContentItem, ContentStore, get_content_type
from app.storage.jobs_repo import ImprovementJobsRepository
from app.utils.ids import generate_job_id

logger = logging.getLogger(__name__)

MSG_INITIALIZING = "Başlatılıyor..."
MSG_ANALYZING = "İçerik kalitesi analiz ediliyor..."
MSG_ANALYZED = "Analiz tamamlandı"
MSG_IMPROVING = "İçerik iyileştiriliyor..."
MSG_IMPROVED = "İyileştirme tamamlandı"
MSG_SAVING = "Sonuçlar kaydediliyor..."
MSG_COMPLETED = "Tamamlandı!"
MSG_MISSING_CREDENTIALS = "GEMINI_API_KEY veya OPENAI_API_KEY yapılandırılmamış"
MSG_SERVER_ERROR = "Sunucu hatası"


@dataclass(frozen=True)
class _Run:
  """Everything one job has produced so far, threaded from step to step."""

  job: ImprovementJob
  item: ContentItem | None = None
  text: str = ""


_Step = Callable[[_Run, ProgressChannel, JobRecorder], Awaitable[_Run]]


class ImprovementJobExecutor:
  """Orchestrate fetch, validate, analyze, rewrite and finalize for one job.

  The executor is the only writer of its job record. It publishes frames to a
  ProgressChannel and never touches a wire format, so it runs the same way with
  or without a connected client.
  """

  def __init__(self, *, content_store: ContentStore, analyzer: QualityAnalyzer, rewriter: Rewriter, jobs_repo: ImprovementJobsRepository, settings: Settings, job_id_factory: Callable[[], str] = generate_job_id) -> None:
    self._content_store = content_store
    self._analyzer = analyzer
    self._rewriter = rewriter
    self._jobs_repo = jobs_repo
    self._settings = settings
    self._job_id_factory = job_id_factory
    self._steps: tuple[_Step, ...] = (self._fetch, self._validate, self._check_capability, self._analyze, self._rewrite, self._finalize)

  def new_job(self, target: ImprovementTarget) -> ImprovementJob:
    """Build the initial job value for a target."""
    return ImprovementJob.start(self._job_id_factory(), target, message=MSG_INITIALIZING)

  async def run(self, target: ImprovementTarget, channel: ProgressChannel, *, job: ImprovementJob | None = None) -> ImprovementJob:
    """Execute every step in order and return the terminal job state."""
    job = job or self.new_job(target)
    recorder = JobRecorder(self._jobs_repo, job.job_id, timeout=self._settings.persistence_timeout_seconds)
    logger.info("Improvement job started job_id=%s content_type=%s content_id=%s field=%s", job.job_id, job.content_type, job.content_id, job.field)

    recorder.create(job)
    channel.publish(ProgressFrame(step="initializing", percent=0, data={"message": MSG_INITIALIZING}))
    state = _Run(job=job)

    try:
      for step in self._steps:
        state = await step(state, channel, recorder)
    except ImprovementError as exc:
      state = self._fail(state, exc.message, channel, recorder)
    except Exception:  # noqa: BLE001
      logger.error("Improvement job crashed job_id=%s", job.job_id, exc_info=True)
      state = self._fail(state, MSG_SERVER_ERROR, channel, recorder)
    finally:
      failures = [result for result in await recorder.close() if not result.ok]
      if failures:
        logger.warning("Improvement job %s finished with %d job record write failures", job.job_id, len(failures))

    logger.info("Improvement job finished job_id=%s status=%s", state.job.job_id, state.job.status.value)
    return state.job

  def _progress(self, state: _Run, channel: ProgressChannel, recorder: JobRecorder, *, step: str, percent: int, message: str, data: dict[str, Any] | None = None, **patch: Any) -> _Run:
    job = state.job.advance(percent, message)
    channel.publish(ProgressFrame(step=step, percent=percent, data={"message": message, **(data or {})}))
    recorder.update(progress=percent, progress_message=message, **patch)
    return replace(state, job=job)

  def _fail(self, state: _Run, message: str, channel: ProgressChannel, recorder: JobRecorder) -> _Run:
    job = state.job.fail(message)
    analysis = job.quality_analysis
    logger.warning("Improvement job failed job_id=%s progress=%s error=%s", job.job_id, job.progress, message)
    channel.publish(ErrorFrame(message=message, analysis=analysis))

    patch: dict[str, Any] = {"status": JobStatus.FAILED, "error_message": message, "completed_at": job.completed_at}
    if analysis is not None:
      patch["quality_analysis"] = analysis
    recorder.update(**patch)
    return replace(state, job=job)

  async def _fetch(self, state: _Run, channel: ProgressChannel, recorder: JobRecorder) -> _Run:
    content_type = get_content_type(state.job.content_type)
    state = self._progress(state, channel, recorder, step="fetching", percent=5, message=content_type.loading_message)

    item = await self._content_store.get_by_id(content_type.name, state.job.content_id)
    if item is None:
      raise ContentNotFoundError(content_type.not_found_message)
    return replace(state, item=item)

  async def _validate(self, state: _Run, channel: ProgressChannel, recorder: JobRecorder) -> _Run:
    field = state.job.field
    text = state.item.text(field) if state.item else None
    if text is None or not text.strip():
      raise ValidationError(f"{field} alanı boş")
    return replace(state, text=text)

  async def _check_capability(self, state: _Run, channel: ProgressChannel, recorder: JobRecorder) -> _Run:
    if not self._settings.has_generative_credentials:
      raise ConfigurationError(MSG_MISSING_CREDENTIALS)
    return state

  async def _call_service(self, label: str, call: Awaitable[Any]) -> Any:
    timeout = self._settings.ai_timeout_seconds
    try:
      return await asyncio.wait_for(call, timeout=timeout)
    except TimeoutError as exc:
      raise ExternalServiceError(f"{label}: zaman aşımı ({timeout:g} sn)") from exc
    except ConfigurationError:
      raise
    except ImprovementError as exc:
      raise ExternalServiceError(f"{label}: {exc.message}") from exc
    except Exception as exc:  # noqa: BLE001
      raise ExternalServiceError(f"{label}: {exc or type(exc).__name__}") from exc

  async def _analyze(self, state: _Run, channel: ProgressChannel, recorder: JobRecorder) -> _Run:
    # Snapshot the analyzed text before any external call.
    state = replace(state, job=state.job.with_original_content(state.text))
    state = self._progress(state, channel, recorder, step="analyzing", percent=15, message=MSG_ANALYZING, original_content=state.text)

    item = state.item
    analysis = await self._call_service("İçerik analizi başarısız", self._analyzer.analyze(state.text, item.title, list(item.keywords) or None))
    logger.info("Quality analysis stored job_id=%s score=%s", state.job.job_id, analysis.score)

    state = replace(state, job=state.job.with_analysis(analysis))
    return self._progress(state, channel, recorder, step="analyzing", percent=50, message=MSG_ANALYZED, data={"score": analysis.score}, quality_analysis=analysis)

  async def _rewrite(self, state: _Run, channel: ProgressChannel, recorder: JobRecorder) -> _Run:
    state = self._progress(state, channel, recorder, step="improving", percent=60, message=MSG_IMPROVING)

    analysis = state.job.quality_analysis
    result = await self._call_service("İçerik iyileştirme başarısız", self._rewriter.rewrite(state.text, state.item.title, analysis))
    logger.info("Rewrite stored job_id=%s estimated_score=%s", state.job.job_id, result.score_after)

    state = replace(state, job=state.job.with_improvement(result))
    return self._progress(state, channel, recorder, step="improving", percent=90, message=MSG_IMPROVED, data={"newScore": result.score_after}, improvement_result=result)

  async def _finalize(self, state: _Run, channel: ProgressChannel, recorder: JobRecorder) -> _Run:
    state = self._progress(state, channel, recorder, step="saving", percent=95, message=MSG_SAVING)

    job = state.job.complete(MSG_COMPLETED)
    recorder.update(status=JobStatus.COMPLETED, progress=100, progress_message=MSG_COMPLETED, improved_content=job.improved_content, completed_at=job.completed_at)
    channel.publish(CompleteFrame(result=build_result_payload(job)))
    return replace(state, job=job)


def build_result_payload(job: ImprovementJob) -> dict[str, Any]:
  """Assemble the before/after comparison for a completed job."""
  analysis = job.quality_analysis
  result = job.improvement_result
  if analysis is None or result is None:
    raise ValueError(f"Job {job.job_id} has no analysis or improvement result.")

  return {
    "improvementId": job.job_id,
    "field": job.field,
    "original": {"content": job.original_content, "score": analysis.score},
    "improved": {"content": result.improved_text, "score": result.score_after},
    "analysis": analysis.as_dict(),
    "improvement": {"scoreIncrease": result.score_delta, "changes": [change.as_dict() for change in result.changes]},
  }
