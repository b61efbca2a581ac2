from __future__ import annotations

import pytest

from app.config import get_settings


def _load(monkeypatch: pytest.MonkeyPatch, **env: str):
  for key in ("GEMINI_API_KEY", "OPENAI_API_KEY", "KARASU_GEMINI_MODELS", "KARASU_AI_TIMEOUT_SECONDS"):
    monkeypatch.delenv(key, raising=False)
  monkeypatch.setenv("KARASU_ALLOWED_ORIGINS", "http://localhost, https://admin.karasuemlak.net")
  for key, value in env.items():
    monkeypatch.setenv(key, value)
  return get_settings.__wrapped__()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
  settings = _load(monkeypatch)

  assert settings.allowed_origins == ("http://localhost", "https://admin.karasuemlak.net")
  assert settings.gemini_models == ("gemini-2.5-flash", "gemini-2.0-flash")
  assert settings.openai_model == "gpt-4o-mini"
  assert settings.ai_timeout_seconds == 60
  assert settings.content_char_limit == 4000
  assert settings.quality_pass_threshold == 70
  assert settings.has_generative_credentials is False


def test_blank_keys_do_not_count_as_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
  assert _load(monkeypatch, GEMINI_API_KEY="  ").has_generative_credentials is False
  assert _load(monkeypatch, OPENAI_API_KEY="sk-test").has_generative_credentials is True


def test_wildcard_origin_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
  with pytest.raises(ValueError):
    _load(monkeypatch, KARASU_ALLOWED_ORIGINS="*")


def test_invalid_numbers_fail_at_load_time(monkeypatch: pytest.MonkeyPatch) -> None:
  with pytest.raises(ValueError):
    _load(monkeypatch, KARASU_AI_TIMEOUT_SECONDS="0")
  with pytest.raises(ValueError):
    _load(monkeypatch, KARASU_QUALITY_PASS_THRESHOLD="140")


def test_database_module_only_exposes_the_repository_session_path() -> None:
  from app.core import database

  assert not hasattr(database, "get_db")
  assert callable(database.get_session_factory)
  assert callable(database.dispose_engine)
