# whisper_hub/post_actions/config.py
"""
Engine configuration.

Defaults live in one immutable EngineConfig value that is passed into the
service at construction. Nothing inside the engine reads process-wide
globals, so engines with different defaults can coexist.

Environment variables (prefix POST_ACTION_, plus POST_ACTIONS_ENABLED and
OPENAI_API_KEY) and an optional .env file are read when the config is built.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from whisper_hub.post_actions.presets import AVAILABLE_MODELS


class EngineConfig(BaseSettings):
    """Defaults and retry policy for the post-action engine."""

    enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices("enabled", "POST_ACTIONS_ENABLED"),
        description="Allow remote-completion actions to call the API",
    )
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("openai_api_key", "OPENAI_API_KEY"),
        repr=False,
    )

    default_model: str = Field(default="gpt-3.5-turbo")
    default_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    default_max_tokens: int = Field(default=1000, gt=0, le=4000)

    request_timeout: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices("request_timeout", "POST_ACTION_TIMEOUT"),
        description="Per-attempt timeout in seconds",
    )
    max_attempts: int = Field(default=3, ge=1, le=5, description="Total adapter calls per action")
    backoff_base_seconds: float = Field(default=0.2, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1.0)
    backoff_max_seconds: float = Field(default=2.0, ge=0)
    deadline_seconds: float = Field(
        default=180.0,
        gt=0,
        description="Overall budget for one action when the caller supplies no deadline",
    )

    model_config = SettingsConfigDict(
        env_prefix="POST_ACTION_",
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("default_model")
    @classmethod
    def check_default_model(cls, value: str) -> str:
        if value not in AVAILABLE_MODELS:
            raise ValueError(f"default model must be one of {', '.join(AVAILABLE_MODELS)}")
        return value

    @property
    def remote_available(self) -> bool:
        """True when remote-completion actions may reach the API."""
        return self.enabled and bool(self.openai_api_key)
