# whisper_hub/post_actions/service.py
"""
Public entry point for the post-transcription action engine.

Responsibilities:
- Dispatch an action to the template evaluator or the remote completion
  processor by kind
- Stamp every result with processed_at and execution_time_ms
- Expose validation and the editor catalogues (variables, functions, models,
  predefined actions)

No business logic lives here, only dispatch and result wrapping. Nothing
raised inside the engine escapes process().
"""

from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from whisper_hub.logging_core.logger import get_logger, log_event
from whisper_hub.post_actions import presets
from whisper_hub.post_actions.completion.adapter import CompletionClient
from whisper_hub.post_actions.completion.processor import RemoteCompletionProcessor
from whisper_hub.post_actions.config import EngineConfig
from whisper_hub.post_actions.errors import InvalidActionDefinition
from whisper_hub.post_actions.schema import (
    ActionContext,
    ActionResult,
    RemoteCompletionAction,
    TemplateAction,
)
from whisper_hub.post_actions.templating import evaluator
from whisper_hub.post_actions.timing import timer
from whisper_hub.post_actions.validator import parse_action, validate as validate_definition
import logging


class ActionProcessingService:
    """
    Stateless action runner. One instance may serve many concurrent calls.

    Args:
        config: Engine defaults and retry policy
        client: Completion adapter; None means remote actions always fall back
        clock/sleep/wait: Injected into the processor for deterministic tests
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        client: Optional[CompletionClient] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        wait: Callable[[threading.Event, float], bool] = threading.Event.wait,
    ) -> None:
        self.config = config or EngineConfig()
        self._clock = clock
        self._processor = RemoteCompletionProcessor(
            self.config, client=client, clock=clock, sleep=sleep, wait=wait
        )

    @classmethod
    def from_config(cls, config: EngineConfig | None = None) -> "ActionProcessingService":
        """Build a service with the openai adapter when remote actions are available."""
        config = config or EngineConfig()
        client = None
        if config.remote_available:
            from whisper_hub.post_actions.completion.openai_client import OpenAICompletionClient

            client = OpenAICompletionClient(api_key=config.openai_api_key)
        return cls(config, client=client)

    def validate(self, definition: Any) -> List[str]:
        return validate_definition(definition)

    def process(
        self,
        definition: Any,
        context: ActionContext,
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> ActionResult:
        """
        Run one action against one transcript context.

        definition may be a typed action or a raw mapping (user-authored JSON);
        mappings are validated first and their violations become the error.
        deadline is an absolute time on the service clock; when omitted the
        configured deadline_seconds applies from now.
        """
        run_id = uuid.uuid4()
        logger = get_logger(run_id)
        action_name = _label(definition, "name")
        action_type = _label(definition, "kind")

        with timer() as end:
            try:
                log_event(
                    logger,
                    logging.INFO,
                    "Processing custom action",
                    action_name=action_name,
                    event_type="action_start",
                    metadata={
                        "action_id": _label(definition, "id") or None,
                        "action_type": action_type,
                        "filename": getattr(context, "filename", None),
                    },
                )
                result = self._dispatch(definition, context, deadline, cancel, run_id, logger, action_name, action_type)
            except Exception as exc:  # pylint: disable=broad-except
                log_event(
                    logger,
                    logging.ERROR,
                    "Unhandled exception while processing action",
                    action_name=action_name,
                    event_type="failure",
                    metadata={"exception": str(exc)},
                )
                result = _failure(action_name, action_type, f"action processing failed: {exc}")

            return _stamped(result, end())

    def _dispatch(
        self,
        definition: Any,
        context: Any,
        deadline: Optional[float],
        cancel: Optional[threading.Event],
        run_id: uuid.UUID,
        logger: logging.LoggerAdapter,
        action_name: str,
        action_type: str,
    ) -> ActionResult:
        if not isinstance(context, ActionContext):
            log_event(
                logger,
                logging.ERROR,
                "Invalid action context",
                action_name=action_name,
                event_type="failure",
                metadata={"context_type": type(context).__name__},
            )
            return _failure(action_name, action_type, f"invalid action context: {type(context).__name__}")

        if isinstance(definition, Mapping):
            try:
                definition = parse_action(definition)
            except InvalidActionDefinition as exc:
                return _failure(action_name, action_type, str(exc))

        if isinstance(definition, TemplateAction):
            return self._process_template(definition, context, logger)
        if isinstance(definition, RemoteCompletionAction):
            if deadline is None:
                deadline = self._clock() + self.config.deadline_seconds
            return self._processor.run(definition, context, deadline=deadline, cancel=cancel, run_id=run_id)

        log_event(
            logger,
            logging.ERROR,
            "Unsupported action type",
            action_name=action_name,
            event_type="failure",
            metadata={"action_type": action_type},
        )
        return _failure(action_name, action_type, f"unsupported action type: {action_type}")

    def process_predefined(self, action_id: str, context: ActionContext, **kwargs: Any) -> ActionResult:
        """Run a built-in action by id; unknown ids yield "Action not found"."""
        action = presets.find_predefined_action(action_id)
        if action is None:
            with timer() as end:
                log_event(
                    get_logger(uuid.uuid4()),
                    logging.WARNING,
                    "Action not found",
                    event_type="failure",
                    metadata={"action_id": action_id},
                )
                return _stamped(_failure(action_id, "", "Action not found"), end())
        return self.process(action, context, **kwargs)

    def _process_template(
        self,
        definition: TemplateAction,
        context: ActionContext,
        logger: logging.LoggerAdapter,
    ) -> ActionResult:
        if not definition.template:
            log_event(logger, logging.WARNING, "Empty action template", action_name=definition.name, event_type="failure")
            return _failure(definition.name, definition.kind, "action template is empty")

        output, error = evaluator.render(definition.template, context)
        if error is not None:
            log_event(
                logger,
                logging.ERROR,
                "Template processing failed",
                action_name=definition.name,
                event_type="failure",
                metadata={"error": str(error)},
            )
            return _failure(definition.name, definition.kind, f"template processing failed: {error}")

        log_event(
            logger,
            logging.INFO,
            "Template action processed successfully",
            action_name=definition.name,
            event_type="success",
            metadata={"output_length": len(output)},
        )
        return ActionResult(
            success=True,
            output=output,
            action_name=definition.name,
            action_type=definition.kind,
            processed_at=datetime.now(timezone.utc),
        )

    # Editor catalogues

    def available_variables(self) -> List[str]:
        return evaluator.available_variables()

    def available_functions(self) -> Dict[str, str]:
        return evaluator.available_functions()

    def available_models(self) -> List[str]:
        return list(presets.AVAILABLE_MODELS)

    def predefined_actions(self) -> List[RemoteCompletionAction]:
        return presets.predefined_actions()

    def find_predefined_action(self, action_id: str) -> Optional[RemoteCompletionAction]:
        return presets.find_predefined_action(action_id)


def _failure(action_name: str, action_type: str, error: str) -> ActionResult:
    return ActionResult(
        success=False,
        error=error,
        action_name=action_name,
        action_type=action_type,
        processed_at=datetime.now(timezone.utc),
    )


def _stamped(result: ActionResult, elapsed_ms: float) -> ActionResult:
    return result.model_copy(update={"processed_at": datetime.now(timezone.utc), "execution_time_ms": elapsed_ms})


def _label(definition: Any, key: str) -> str:
    """Best-effort name/kind/id for logs and failure results; never raises."""
    try:
        if isinstance(definition, Mapping):
            value = definition.get(key)
        else:
            value = getattr(definition, key, None)
        return "" if value is None else str(value)
    except Exception:  # pylint: disable=broad-except
        return ""


# High-Level Intent
# service.py is the only surface callers need: validate() at save time,
# process() at run time.

# Data Flow
# caller -> process(definition, context)
# -> context not an ActionContext -> success=False "invalid action context"
# -> raw mapping -> parse_action -> typed action, or success=False with violations
# -> TemplateAction -> evaluator.render -> ActionResult
# -> RemoteCompletionAction -> RemoteCompletionProcessor.run -> ActionResult
# -> anything else -> success=False "unsupported action type"
# -> processed_at / execution_time_ms stamped on the way out

# Edge Cases & Failure Scenarios

# Template syntax error -> success=False, never retried
# Empty template -> success=False "action template is empty"
# Unexpected exception anywhere -> success=False, logged with the exception text
