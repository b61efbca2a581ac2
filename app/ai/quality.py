"""Quality analyzer adapter over the generative-text providers."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Protocol

from app.ai.json_parser import parse_json_with_fallback
from app.ai.prompts import ANALYZER_SYSTEM, render_analysis_prompt
from app.ai.providers import GenerationRequest, TextProvider
from app.jobs.errors import ConfigurationError, ExternalServiceError
from app.jobs.models import QualityAnalysis

logger = logging.getLogger(__name__)


class QualityAnalyzer(Protocol):
  """Scores text against editorial and SEO heuristics."""

  async def analyze(self, text: str, title: str, hints: Sequence[str] | None = None) -> QualityAnalysis:
    """Return the analysis or raise ExternalServiceError."""


class GenerativeQualityAnalyzer:
  """Ask each provider in order for a JSON quality report."""

  def __init__(self, providers: Sequence[TextProvider], *, pass_threshold: int = 70, char_limit: int = 4000) -> None:
    self._providers = list(providers)
    self._pass_threshold = pass_threshold
    self._char_limit = char_limit

  async def analyze(self, text: str, title: str, hints: Sequence[str] | None = None) -> QualityAnalysis:
    if not self._providers:
      raise ConfigurationError("No generative provider is configured for quality analysis.")

    request = GenerationRequest(prompt=render_analysis_prompt(text, title, hints, limit=self._char_limit), system=ANALYZER_SYSTEM, temperature=0.3, max_output_tokens=2000, json_output=True)
    errors: list[str] = []

    for provider in self._providers:
      try:
        response = await provider.generate(request)
        payload = parse_json_with_fallback(response.content)
      except (RuntimeError, json.JSONDecodeError) as exc:
        logger.warning("Quality analysis failed on provider=%s: %s", provider.name, exc)
        errors.append(f"{provider.name}: {exc}")
        continue

      if not isinstance(payload, dict):
        logger.warning("Quality analysis on provider=%s returned a non-object payload", provider.name)
        errors.append(f"{provider.name}: unexpected payload")
        continue

      analysis = QualityAnalysis.from_payload(payload, pass_threshold=self._pass_threshold)
      logger.info("Quality analysis completed provider=%s score=%s", provider.name, analysis.score)
      return analysis

    raise ExternalServiceError("; ".join(errors))
