"""OpenAI provider implementation using the openai SDK."""

from __future__ import annotations

import logging
from typing import Any

from openai import AsyncOpenAI

from app.ai.providers.base import GenerationRequest, ProviderError, SimpleModelResponse, TextProvider

logger = logging.getLogger("app.ai.providers.openai")


class OpenAIProvider(TextProvider):
  """OpenAI chat-completions provider."""

  def __init__(self, api_key: str, model: str, client: Any | None = None) -> None:
    if not api_key:
      raise ValueError("OPENAI_API_KEY is required for the OpenAI provider.")
    self.name: str = "openai"
    self._model = model
    self._client = client or AsyncOpenAI(api_key=api_key)

  async def generate(self, request: GenerationRequest) -> SimpleModelResponse:
    """Generate a chat completion, requesting JSON mode when asked."""
    messages: list[dict[str, str]] = []
    if request.system:
      messages.append({"role": "system", "content": request.system})
    messages.append({"role": "user", "content": request.prompt})

    kwargs: dict[str, Any] = {"model": self._model, "messages": messages, "temperature": request.temperature, "max_tokens": request.max_output_tokens}
    if request.json_output:
      kwargs["response_format"] = {"type": "json_object"}

    try:
      response = await self._client.chat.completions.create(**kwargs)
    except Exception as exc:  # noqa: BLE001
      raise ProviderError(f"OpenAI request failed: {exc}") from exc

    content = (response.choices[0].message.content or "").strip() if response.choices else ""
    if not content:
      raise ProviderError(f"OpenAI model {self._model} returned an empty response.")

    usage = None
    if response.usage:
      usage = {"prompt_tokens": response.usage.prompt_tokens, "completion_tokens": response.usage.completion_tokens, "total_tokens": response.usage.total_tokens}
    logger.info("OpenAI response model=%s chars=%d", self._model, len(content))
    return SimpleModelResponse(content=content, model=self._model, usage=usage)
