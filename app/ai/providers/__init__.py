"""Provider implementations."""

from app.ai.providers.base import GenerationRequest, ProviderError, SimpleModelResponse, TextProvider
from app.ai.providers.gemini import GeminiProvider
from app.ai.providers.openai import OpenAIProvider

__all__ = ["GenerationRequest", "ProviderError", "SimpleModelResponse", "TextProvider", "GeminiProvider", "OpenAIProvider"]
