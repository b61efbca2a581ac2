"""Gemini provider implementation using the google-genai SDK."""

from __future__ import annotations

import logging
import warnings
from typing import Any

from pydantic.warnings import ArbitraryTypeWarning

with warnings.catch_warnings():
  warnings.filterwarnings("ignore", message=r"<built-in function any> is not a Python type.*", category=ArbitraryTypeWarning)
  from google import genai

from app.ai.providers.base import GenerationRequest, ProviderError, SimpleModelResponse, TextProvider

logger = logging.getLogger("app.ai.providers.gemini")


class GeminiProvider(TextProvider):
  """Gemini provider that walks a model fallback chain."""

  def __init__(self, api_key: str, models: tuple[str, ...], client: Any | None = None) -> None:
    if not api_key:
      raise ValueError("GEMINI_API_KEY is required for the Gemini provider.")
    if not models:
      raise ValueError("At least one Gemini model is required.")
    self.name: str = "gemini"
    self._models = models
    self._client = client or genai.Client(api_key=api_key)

  def _config(self, request: GenerationRequest) -> dict[str, Any]:
    config: dict[str, Any] = {"temperature": request.temperature, "max_output_tokens": request.max_output_tokens}
    if request.system:
      config["system_instruction"] = request.system
    if request.json_output:
      config["response_mime_type"] = "application/json"
    return config

  async def generate(self, request: GenerationRequest) -> SimpleModelResponse:
    """Try each configured model in order and return the first success."""
    last_error: Exception | None = None

    for model_name in self._models:
      try:
        # Use the async client to avoid blocking the asyncio event loop.
        response = await self._client.aio.models.generate_content(model=model_name, contents=request.prompt, config=self._config(request))
      except Exception as exc:  # noqa: BLE001
        logger.warning("Gemini model %s failed, trying next: %s", model_name, exc)
        last_error = exc
        continue

      text = (response.text or "").strip()
      if not text:
        logger.warning("Gemini model %s returned an empty response", model_name)
        last_error = ProviderError(f"Gemini model {model_name} returned an empty response.")
        continue

      usage = None
      if response.usage_metadata:
        usage = {"prompt_tokens": response.usage_metadata.prompt_token_count, "completion_tokens": response.usage_metadata.candidates_token_count, "total_tokens": response.usage_metadata.total_token_count}
      logger.info("Gemini response model=%s chars=%d", model_name, len(text))
      return SimpleModelResponse(content=text, model=model_name, usage=usage)

    raise ProviderError(f"All Gemini models failed: {last_error}") from last_error
