"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from app.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

_DEFAULT_GEMINI_MODELS = "gemini-2.5-flash,gemini-2.0-flash"


@dataclass(frozen=True)
class Settings:
  """Typed settings for the content improvement service."""

  environment: str
  allowed_origins: tuple[str, ...]
  debug: bool
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  pg_dsn: str | None
  pg_connect_timeout: int
  gemini_api_key: str | None
  openai_api_key: str | None
  gemini_models: tuple[str, ...]
  openai_model: str
  ai_timeout_seconds: float
  persistence_timeout_seconds: float
  content_char_limit: int
  quality_pass_threshold: int
  estimated_score_gain: int
  shutdown_drain_seconds: float

  @property
  def has_generative_credentials(self) -> bool:
    """Return True when at least one generative-text service can be called."""
    return bool(self.gemini_api_key or self.openai_api_key)


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  if not raw:
    raise ValueError("KARASU_ALLOWED_ORIGINS must be set to one or more origins.")

  origins = [origin.strip() for origin in raw.split(",") if origin.strip()]

  if not origins:
    raise ValueError("KARASU_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("KARASU_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _parse_models(raw: str | None) -> tuple[str, ...]:
  models = tuple(name.strip() for name in (raw or _DEFAULT_GEMINI_MODELS).split(",") if name.strip())
  if not models:
    raise ValueError("KARASU_GEMINI_MODELS must list at least one model.")
  return models


def _positive_float(name: str, default: str) -> float:
  value = float(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive number.")
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("KARASU_ENV", "development").lower()
  debug = _parse_bool(os.getenv("KARASU_DEBUG"))

  log_max_bytes = int(os.getenv("KARASU_LOG_MAX_BYTES", "5242880"))  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("KARASU_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = int(os.getenv("KARASU_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("KARASU_LOG_BACKUP_COUNT must be zero or a positive integer.")

  # Allow opt-in logging of 4xx HTTPExceptions for diagnostics.
  log_http_4xx = _parse_bool(os.getenv("KARASU_LOG_HTTP_4XX"))

  content_char_limit = int(os.getenv("KARASU_CONTENT_CHAR_LIMIT", "4000"))
  if content_char_limit <= 0:
    raise ValueError("KARASU_CONTENT_CHAR_LIMIT must be a positive integer.")

  quality_pass_threshold = int(os.getenv("KARASU_QUALITY_PASS_THRESHOLD", "70"))
  if not 0 <= quality_pass_threshold <= 100:
    raise ValueError("KARASU_QUALITY_PASS_THRESHOLD must be between 0 and 100.")

  estimated_score_gain = int(os.getenv("KARASU_ESTIMATED_SCORE_GAIN", "20"))
  if estimated_score_gain < 0:
    raise ValueError("KARASU_ESTIMATED_SCORE_GAIN must be zero or a positive integer.")

  return Settings(
    environment=environment,
    allowed_origins=_parse_origins(os.getenv("KARASU_ALLOWED_ORIGINS")),
    debug=debug,
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    log_http_4xx=log_http_4xx,
    pg_dsn=os.getenv("KARASU_PG_DSN") or os.getenv("DATABASE_URL"),
    pg_connect_timeout=int(os.getenv("KARASU_PG_CONNECT_TIMEOUT", "5")),
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    openai_api_key=_optional_str(os.getenv("OPENAI_API_KEY")),
    gemini_models=_parse_models(os.getenv("KARASU_GEMINI_MODELS")),
    openai_model=(os.getenv("KARASU_OPENAI_MODEL") or "gpt-4o-mini").strip(),
    ai_timeout_seconds=_positive_float("KARASU_AI_TIMEOUT_SECONDS", "60"),
    persistence_timeout_seconds=_positive_float("KARASU_PERSISTENCE_TIMEOUT_SECONDS", "5"),
    content_char_limit=content_char_limit,
    quality_pass_threshold=quality_pass_threshold,
    estimated_score_gain=estimated_score_gain,
    shutdown_drain_seconds=_positive_float("KARASU_SHUTDOWN_DRAIN_SECONDS", "30"),
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring web-runtime configuration like CORS."""
  # Keep database configuration isolated so scripts don't require unrelated env vars.
  debug = _parse_bool(os.getenv("KARASU_DEBUG"))
  pg_connect_timeout = int(os.getenv("KARASU_PG_CONNECT_TIMEOUT", "5"))
  if pg_connect_timeout <= 0:
    raise ValueError("KARASU_PG_CONNECT_TIMEOUT must be a positive integer.")

  pg_dsn = os.getenv("KARASU_PG_DSN") or os.getenv("DATABASE_URL")

  return DatabaseSettings(debug=debug, pg_dsn=pg_dsn, pg_connect_timeout=pg_connect_timeout)


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value
