"""Rewriter adapter over the generative-text providers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from app.ai.prompts import REWRITER_SYSTEM, render_rewrite_prompt
from app.ai.providers import GenerationRequest, TextProvider
from app.jobs.errors import ConfigurationError, ExternalServiceError
from app.jobs.models import ImprovementChange, ImprovementResult, QualityAnalysis

logger = logging.getLogger(__name__)


class Rewriter(Protocol):
  """Produces an improved version of text, informed by the analysis."""

  async def rewrite(self, text: str, title: str, analysis: QualityAnalysis) -> ImprovementResult:
    """Return the rewrite or raise ExternalServiceError."""


def estimate_result(improved_text: str, analysis: QualityAnalysis, *, score_gain: int) -> ImprovementResult:
  """Attach the estimated score and one change entry per analysis issue."""
  score_after = min(100, analysis.score + score_gain)
  changes = tuple(ImprovementChange(improved=issue.suggestion, reason=issue.message) for issue in analysis.issues)
  return ImprovementResult(improved_text=improved_text, score_before=analysis.score, score_after=score_after, changes=changes)


class GenerativeRewriter:
  """Ask each provider in order for a rewritten text."""

  def __init__(self, providers: Sequence[TextProvider], *, score_gain: int = 20, char_limit: int = 4000) -> None:
    self._providers = list(providers)
    self._score_gain = score_gain
    self._char_limit = char_limit

  async def rewrite(self, text: str, title: str, analysis: QualityAnalysis) -> ImprovementResult:
    if not self._providers:
      raise ConfigurationError("No generative provider is configured for rewriting.")

    request = GenerationRequest(prompt=render_rewrite_prompt(text, title, analysis, limit=self._char_limit), system=REWRITER_SYSTEM, temperature=0.7, max_output_tokens=4000)
    errors: list[str] = []

    for provider in self._providers:
      try:
        response = await provider.generate(request)
      except RuntimeError as exc:
        logger.warning("Rewrite failed on provider=%s: %s", provider.name, exc)
        errors.append(f"{provider.name}: {exc}")
        continue

      result = estimate_result(response.content, analysis, score_gain=self._score_gain)
      logger.info("Rewrite completed provider=%s estimated_score=%s", provider.name, result.score_after)
      return result

    raise ExternalServiceError("; ".join(errors))
