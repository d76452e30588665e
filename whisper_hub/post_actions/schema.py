# whisper_hub/post_actions/schema.py
"""
Authoritative schema definitions for the post-transcription action engine.

This module defines:
- ActionDefinition, a tagged union of TemplateAction and RemoteCompletionAction
- ActionContext, the per-run transcript data fed into an action
- ActionResult, the engine's sole output type
- CompletionRequest / CompletionResponse, the completion adapter contract
- Typed completion failure categories

Length and range bounds are NOT enforced here; the validator owns them so that
an out-of-range definition can still be loaded and reported on.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel


class ActionKind(str, Enum):
    """Supported action kinds."""
    TEMPLATE = "template"
    REMOTE_COMPLETION = "remote-completion"


class CompletionErrorKind(str, Enum):
    """Typed failure categories reported by a completion adapter."""
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class _ActionBase(_Model):
    """Fields shared by every action kind."""
    id: str = ""
    name: str = ""
    description: str = ""
    variables: List[str] = Field(default_factory=list)
    created: Optional[datetime] = None
    last_used: Optional[datetime] = None


class TemplateAction(_ActionBase):
    """Action rendered purely by variable/function substitution."""
    kind: Literal["template"] = "template"
    template: str = ""


class RemoteCompletionAction(_ActionBase):
    """Action rendered by a remote LLM completion endpoint."""
    kind: Literal["remote-completion"] = "remote-completion"
    prompt: str = ""
    model: str = ""  # blank: use the configured default
    temperature: Optional[float] = None  # None: use the configured default
    max_tokens: Optional[int] = None  # None or 0: use the configured default


ActionDefinition = Annotated[
    Union[TemplateAction, RemoteCompletionAction],
    Field(discriminator="kind"),
]

ACTION_ADAPTER: TypeAdapter[ActionDefinition] = TypeAdapter(ActionDefinition)


class ActionContext(_Model):
    """
    Ephemeral per-run data built from an upstream transcription result.

    Date and time values are derived at evaluation time, never stored here.
    """
    transcript: str = ""
    filename: str = ""
    file_type: str = "audio"
    word_count: int = 0
    char_count: int = 0
    duration_seconds: Optional[float] = None
    processing_time_seconds: Optional[float] = None


class ActionResult(_Model):
    """
    Result of a single action run.

    output is present iff success; error is present iff not success.
    A fallback is still a success: the underlying remote failure is kept in
    fallback_reason for observability and never surfaces as error.
    """
    success: bool
    output: Optional[str] = None
    error: Optional[str] = None
    action_name: str = ""
    action_type: str = ""
    model: str = ""
    tokens_used: int = 0
    processed_at: datetime
    used_fallback: bool = False
    fallback_reason: Optional[str] = None
    attempts: int = 0
    execution_time_ms: Optional[float] = None

    @model_validator(mode="after")
    def check_output_error_exclusive(self) -> "ActionResult":
        if self.success and self.error is not None:
            raise ValueError("successful result must not carry an error")
        if self.success and self.output is None:
            raise ValueError("successful result requires output")
        if not self.success and not self.error:
            raise ValueError("failed result requires an error message")
        if not self.success and self.output is not None:
            raise ValueError("failed result must not carry output")
        return self


class CompletionRequest(_Model):
    """Structured chat request sent through a completion adapter."""
    system_message: str
    user_message: str
    model: str
    temperature: float
    max_tokens: int


class CompletionResponse(_Model):
    """Adapter response; model is the one the endpoint reports, if any."""
    output_text: str
    tokens_used: int = 0
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    model: Optional[str] = None


# High-Level Intent
# schema.py is the contract for the whole engine. Every other module imports
# its types from here.

# Architecture

# ActionDefinition is a pydantic discriminated union on "kind", so a
# remote-completion action with a populated template cannot be represented.
# All models are frozen and accept both snake_case and camelCase keys
# (maxTokens, lastUsed) so user-authored JSON loads directly.
# ActionResult enforces the output/error exclusivity at construction.

# Edge Cases

# Unknown kind in raw JSON -> ACTION_ADAPTER raises; validator reports it first.
# temperature 0.0 is honoured; only None selects the default.
