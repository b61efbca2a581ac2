"""Resolve the ordered provider chain from configuration."""

from __future__ import annotations

from app.ai.providers import GeminiProvider, OpenAIProvider, TextProvider
from app.config import Settings


def build_text_providers(settings: Settings) -> list[TextProvider]:
  """Return configured providers, Gemini first and OpenAI as the fallback."""
  providers: list[TextProvider] = []

  if settings.gemini_api_key:
    providers.append(GeminiProvider(settings.gemini_api_key, settings.gemini_models))

  if settings.openai_api_key:
    providers.append(OpenAIProvider(settings.openai_api_key, settings.openai_model))

  return providers
