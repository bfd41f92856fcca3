"""Tests for environment-driven settings."""

import pytest

from chat_orchestrator.config import OrchestratorSettings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    settings = OrchestratorSettings(_env_file=None)

    assert settings.max_retries == 3
    assert settings.retry_delays == [1.0, 2.0, 4.0]
    assert settings.request_timeout == 30.0
    assert settings.health_check_timeout == 10.0
    assert settings.unhealthy_threshold == 3
    assert settings.error_log_size == 10
    assert settings.conversation_history_size == 20
    assert settings.non_retryable_codes == ["invalid_api_key", "insufficient_quota"]
    assert settings.seed_default_corpus is True


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CHAT_ORCHESTRATOR_PRIMARY_MODEL", "gpt-4o")
    monkeypatch.setenv("CHAT_ORCHESTRATOR_FALLBACK_MODELS", '["gpt-4o-mini", "gpt-3.5-turbo"]')
    monkeypatch.setenv("CHAT_ORCHESTRATOR_MAX_RETRIES", "5")

    settings = OrchestratorSettings(_env_file=None)

    assert settings.primary_model == "gpt-4o"
    assert settings.max_retries == 5
    assert settings.model_chain == ["gpt-4o", "gpt-4o-mini", "gpt-3.5-turbo"]


def test_model_chain_deduplicates():
    settings = OrchestratorSettings(
        primary_model="gpt-4o-mini",
        fallback_models=["gpt-4o-mini", "gpt-3.5-turbo", "gpt-3.5-turbo"],
        _env_file=None,
    )

    assert settings.model_chain == ["gpt-4o-mini", "gpt-3.5-turbo"]


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        OrchestratorSettings(max_retries=0, _env_file=None)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
