"""Base interfaces for generative-text providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GenerationRequest:
  """Provider-neutral description of one completion call."""

  prompt: str
  system: str | None = None
  temperature: float = 0.7
  max_output_tokens: int = 2000
  json_output: bool = False


@dataclass
class SimpleModelResponse:
  """Minimal model response structure."""

  content: str
  model: str
  usage: dict[str, int] | None = None


class ProviderError(RuntimeError):
  """Raised when a provider cannot produce a completion."""


class TextProvider(ABC):
  """Abstract base class for generative-text providers."""

  name: str

  @abstractmethod
  async def generate(self, request: GenerationRequest) -> SimpleModelResponse:
    """Return a completion for the request or raise ProviderError."""
