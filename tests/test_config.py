"""Tests for engine configuration."""

import pytest
from pydantic import ValidationError

from whisper_hub.post_actions.config import EngineConfig


ENV_VARS = (
    "POST_ACTIONS_ENABLED",
    "POST_ACTION_TIMEOUT",
    "POST_ACTION_DEFAULT_MODEL",
    "POST_ACTION_MAX_ATTEMPTS",
    "OPENAI_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_values(self) -> None:
        config = EngineConfig(_env_file=None)

        assert config.enabled is True
        assert config.openai_api_key is None
        assert config.default_model == "gpt-3.5-turbo"
        assert config.default_temperature == 0.3
        assert config.default_max_tokens == 1000
        assert config.request_timeout == 60
        assert config.max_attempts == 3
        assert config.remote_available is False

    def test_key_not_in_repr(self) -> None:
        assert "sk-secret" not in repr(EngineConfig(_env_file=None, openai_api_key="sk-secret"))


class TestEnvironment:
    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POST_ACTION_TIMEOUT", "15")
        monkeypatch.setenv("POST_ACTION_MAX_ATTEMPTS", "2")
        monkeypatch.setenv("POST_ACTION_DEFAULT_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

        config = EngineConfig(_env_file=None)

        assert config.request_timeout == 15
        assert config.max_attempts == 2
        assert config.default_model == "gpt-4o-mini"
        assert config.openai_api_key == "sk-env"
        assert config.remote_available is True

    def test_disabled_switch(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POST_ACTIONS_ENABLED", "false")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

        config = EngineConfig(_env_file=None)

        assert config.enabled is False
        assert config.remote_available is False


class TestValidation:
    def test_unknown_default_model(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(_env_file=None, default_model="not-a-model")

    def test_attempt_bounds(self) -> None:
        with pytest.raises(ValidationError):
            EngineConfig(_env_file=None, max_attempts=0)

    def test_frozen(self) -> None:
        config = EngineConfig(_env_file=None)
        with pytest.raises(ValidationError):
            config.max_attempts = 5
