"""Error taxonomy for the content improvement pipeline."""

from __future__ import annotations


class ImprovementError(Exception):
  """Base class for failures that end an improvement job or commit."""

  def __init__(self, message: str) -> None:
    super().__init__(message)
    self.message = message


class ValidationError(ImprovementError):
  """Raised for missing content, empty fields, or empty submitted text."""


class ContentNotFoundError(ValidationError):
  """Raised when the target content item does not exist or was soft-deleted."""


class ConfigurationError(ImprovementError):
  """Raised when no generative-service credential is configured."""


class ExternalServiceError(ImprovementError):
  """Raised when the analyzer or rewriter fails or times out."""


class PersistenceError(ImprovementError):
  """Raised when a job record write fails; callers log it and move on."""


class InvalidTransitionError(Exception):
  """Raised when a job state change violates the state machine."""
