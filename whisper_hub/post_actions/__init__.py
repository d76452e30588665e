"""Post-transcription action engine."""

from whisper_hub.post_actions.config import EngineConfig
from whisper_hub.post_actions.context import build_context
from whisper_hub.post_actions.errors import CompletionError, InvalidActionDefinition, TemplateError
from whisper_hub.post_actions.schema import (
    ActionContext,
    ActionDefinition,
    ActionKind,
    ActionResult,
    RemoteCompletionAction,
    TemplateAction,
)
from whisper_hub.post_actions.service import ActionProcessingService
from whisper_hub.post_actions.validator import parse_action, validate

__all__ = [
    "ActionContext",
    "ActionDefinition",
    "ActionKind",
    "ActionProcessingService",
    "ActionResult",
    "CompletionError",
    "EngineConfig",
    "InvalidActionDefinition",
    "RemoteCompletionAction",
    "TemplateAction",
    "TemplateError",
    "build_context",
    "parse_action",
    "validate",
]
