# whisper_hub/post_actions/validator.py
"""
Action definition validation.

Responsibility:
- Enforce field presence, length bounds and numeric ranges per action kind
- Collect every violation, not just the first
- Never raise: malformed input (None, wrong types, hostile objects) becomes
  violations or is treated as "all fields absent"

Runs at save time, before any processing. Pure and deterministic.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, List

from pydantic import BaseModel, ValidationError

from whisper_hub.logging_core.logger import get_logger, log_event
from whisper_hub.post_actions.errors import InvalidActionDefinition
from whisper_hub.post_actions.presets import AVAILABLE_MODELS
from whisper_hub.post_actions.schema import ACTION_ADAPTER, ActionDefinition, ActionKind
from whisper_hub.post_actions.templating.evaluator import check_syntax
import logging


MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_TEMPLATE_LENGTH = 10_000
MAX_PROMPT_LENGTH = 5_000
MIN_TEMPERATURE, MAX_TEMPERATURE = 0.0, 2.0
MIN_MAX_TOKENS, MAX_MAX_TOKENS = 0, 4000

_ABSENT = object()


def _as_mapping(definition: Any) -> Mapping:
    if isinstance(definition, BaseModel):
        return definition.model_dump()
    if isinstance(definition, Mapping):
        return definition
    return {}


def _get(data: Mapping, *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return _ABSENT


def _text(data: Mapping, field: str, violations: List[str], *keys: str) -> str:
    value = _get(data, field, *keys)
    if value is _ABSENT or value is None:
        return ""
    if not isinstance(value, str):
        violations.append(f"{field} must be a string")
        return ""
    return value


def _number(data: Mapping, field: str, violations: List[str], *keys: str) -> float | None:
    value = _get(data, field, *keys)
    if value is _ABSENT or value is None:
        return None
    # bool is an int subclass but never a meaningful number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        violations.append(f"{field} must be a number")
        return None
    return value


def _check_template(data: Mapping, violations: List[str]) -> None:
    template = _text(data, "template", violations)
    if not template.strip():
        violations.append("template required")
        return
    if len(template) > MAX_TEMPLATE_LENGTH:
        violations.append(f"template too long (max {MAX_TEMPLATE_LENGTH} characters)")
        return
    error = check_syntax(template)
    if error is not None:
        violations.append(f"invalid template: {error}")


def _check_remote(data: Mapping, violations: List[str]) -> None:
    prompt = _text(data, "prompt", violations)
    if not prompt.strip():
        violations.append("prompt required")
    elif len(prompt) > MAX_PROMPT_LENGTH:
        violations.append(f"prompt too long (max {MAX_PROMPT_LENGTH} characters)")

    model = _text(data, "model", violations)
    if model and model not in AVAILABLE_MODELS:
        violations.append(f"invalid model: {model}")

    temperature = _number(data, "temperature", violations)
    if temperature is not None and not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE:
        violations.append("temperature must be between 0 and 2")

    max_tokens = _number(data, "max_tokens", violations, "maxTokens")
    if max_tokens is not None and not MIN_MAX_TOKENS <= max_tokens <= MAX_MAX_TOKENS:
        violations.append(f"max tokens must be between {MIN_MAX_TOKENS} and {MAX_MAX_TOKENS}")


def _collect(definition: Any) -> List[str]:
    violations: List[str] = []
    data = _as_mapping(definition)

    name = _text(data, "name", violations)
    if not name.strip():
        violations.append("name required")
    elif len(name) > MAX_NAME_LENGTH:
        violations.append(f"name too long (max {MAX_NAME_LENGTH} characters)")

    description = _text(data, "description", violations)
    if len(description) > MAX_DESCRIPTION_LENGTH:
        violations.append(f"description too long (max {MAX_DESCRIPTION_LENGTH} characters)")

    kind = _get(data, "kind")
    if kind == ActionKind.TEMPLATE.value:
        _check_template(data, violations)
    elif kind == ActionKind.REMOTE_COMPLETION.value:
        _check_remote(data, violations)
    else:
        shown = "" if kind is _ABSENT or kind is None else kind
        violations.append(f"invalid action type: {shown}")

    return violations


def validate(definition: Any) -> List[str]:
    """
    Validate an action definition.

    Accepts a typed ActionDefinition, a plain mapping (user-authored JSON) or
    anything else. Always returns a list; empty means valid.
    """
    try:
        return _collect(definition)
    except Exception:  # pylint: disable=broad-except
        return ["malformed action definition"]


def parse_action(raw: Mapping[str, Any] | BaseModel) -> ActionDefinition:
    """
    Validate and build a typed action definition.

    Raises InvalidActionDefinition carrying every violation when invalid.
    """
    violations = validate(raw)
    if violations:
        log_event(
            get_logger(uuid.uuid4()),
            logging.WARNING,
            "Action definition rejected",
            event_type="validation_failure",
            metadata={"violations": violations},
        )
        raise InvalidActionDefinition(violations)
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    try:
        return ACTION_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise InvalidActionDefinition([err["msg"] for err in exc.errors()]) from exc


# Edge Cases & Failure Scenarios

# None / non-mapping definition -> "name required" + "invalid action type: "
# name of exactly 100 characters -> valid; 101 -> "name too long"
# temperature 2.0 -> valid; 2.01 -> violation
# self-referential dict -> only top-level scalars are read, no recursion
# object whose __getitem__ raises -> "malformed action definition"
