# whisper_hub/post_actions/completion/processor.py
"""
Remote completion processor: runs one remote-completion action.

States:
    Building -> Attempting -> Success
                           -> RetryWait -> Attempting
                           -> Exhausted -> Fallback
                           -> AuthFailure -> Fallback

Responsibility:
- Build the chat request (fixed system instruction + prompt + transcript)
- Classify adapter failures and drive the bounded retry loop
- Respect the caller's deadline and cancel signal during calls and waits
- Degrade to a template rendering of the prompt instead of failing

A remote failure never surfaces as success=False. Only a failure of the
fallback rendering itself does.
"""

from __future__ import annotations

import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from whisper_hub.logging_core.logger import get_logger, log_event
from whisper_hub.post_actions.completion.adapter import CompletionClient
from whisper_hub.post_actions.completion.retry import AttemptCollector, AttemptRecord, BackoffPolicy
from whisper_hub.post_actions.config import EngineConfig
from whisper_hub.post_actions.errors import CompletionError
from whisper_hub.post_actions.schema import (
    ActionContext,
    ActionResult,
    CompletionErrorKind,
    CompletionRequest,
    CompletionResponse,
    RemoteCompletionAction,
)
from whisper_hub.post_actions.templating.evaluator import render
import logging


# Versioned prompt framing; change only with intent
SYSTEM_MESSAGE = "You are a helpful assistant that processes transcribed text according to user instructions."

USER_MESSAGE_TEMPLATE = (
    "{prompt}\n\n"
    "Transcript:\n{transcript}\n\n"
    "Please process this transcript according to the instructions above."
)


class RemoteCompletionProcessor:
    """
    Orchestrates one logical "run this AI action" call.

    clock, sleep and wait are injectable so tests can simulate elapsed time.
    wait(event, seconds) is used instead of sleep when a cancel event is given
    and returns True when the event fired. Deadlines are absolute values on
    `clock`.
    """

    def __init__(
        self,
        config: EngineConfig,
        client: Optional[CompletionClient] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        policy: Optional[BackoffPolicy] = None,
        wait: Callable[[threading.Event, float], bool] = threading.Event.wait,
    ) -> None:
        self._config = config
        self._client = client
        self._clock = clock
        self._sleep = sleep
        self._event_wait = wait
        self._policy = policy or BackoffPolicy.from_config(config)

    @property
    def has_client(self) -> bool:
        return self._client is not None

    def build_request(self, definition: RemoteCompletionAction, context: ActionContext) -> CompletionRequest:
        """Compose the chat request and resolve defaults."""
        temperature = definition.temperature
        if temperature is None:
            temperature = self._config.default_temperature

        return CompletionRequest(
            system_message=SYSTEM_MESSAGE,
            user_message=USER_MESSAGE_TEMPLATE.format(prompt=definition.prompt, transcript=context.transcript),
            model=definition.model or self._config.default_model,
            temperature=temperature,
            max_tokens=definition.max_tokens or self._config.default_max_tokens,
        )

    def run(
        self,
        definition: RemoteCompletionAction,
        context: ActionContext,
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
        run_id: Optional[uuid.UUID] = None,
    ) -> ActionResult:
        """Run the action; always returns a well-formed ActionResult."""
        logger = get_logger(run_id or uuid.uuid4())
        action_name = definition.name

        if not definition.prompt.strip():
            log_event(logger, logging.WARNING, "Empty action prompt", action_name=action_name, event_type="failure")
            return self._result(definition, success=False, error="action prompt is empty")

        if deadline is None:
            deadline = self._clock() + self._config.deadline_seconds

        request = self.build_request(definition, context)
        collector = AttemptCollector()
        attempts = 0

        log_event(
            logger,
            logging.INFO,
            "Sending completion request",
            action_name=action_name,
            event_type="action_start",
            metadata={
                "model": request.model,
                "temperature": request.temperature,
                "max_tokens": request.max_tokens,
                "prompt_length": len(definition.prompt),
                "transcript_length": len(context.transcript),
            },
        )

        if self._client is None:
            return self._fallback(definition, context, request, collector, attempts, "no completion client configured", logger)

        while True:
            if cancel is not None and cancel.is_set():
                stop_reason = "cancelled"
                break
            remaining = deadline - self._clock()
            if remaining <= 0:
                stop_reason = "deadline exceeded"
                break

            attempts += 1
            try:
                response = self._client.send(request, timeout=min(self._config.request_timeout, remaining))
            except CompletionError as exc:
                kind, message = exc.kind, exc.message
            except Exception as exc:  # pylint: disable=broad-except
                kind, message = CompletionErrorKind.UNKNOWN, f"unexpected adapter error: {exc}"
            else:
                if response.output_text.strip():
                    return self._success(definition, request, response, attempts, logger)
                kind, message = CompletionErrorKind.UNKNOWN, "empty completion received"

            log_event(
                logger,
                logging.WARNING,
                "Completion attempt failed",
                action_name=action_name,
                event_type="attempt_failed",
                metadata={
                    "attempt": attempts,
                    "max_attempts": self._policy.max_attempts,
                    "kind": kind.value,
                    "error": message,
                },
            )

            if not self._policy.should_retry(attempts, kind):
                collector.add(AttemptRecord(attempt=attempts, kind=kind, message=message))
                stop_reason = "authentication failed" if kind is CompletionErrorKind.AUTH else "retries exhausted"
                break

            delay = self._policy.delay(attempts)
            collector.add(AttemptRecord(attempt=attempts, kind=kind, message=message, retry_delay=delay))
            if self._clock() + delay >= deadline:
                stop_reason = "deadline exceeded"
                break

            log_event(
                logger,
                logging.INFO,
                "Retrying completion request",
                action_name=action_name,
                event_type="retry",
                metadata={"attempt": attempts, "backoff_seconds": delay},
            )
            if self._wait(delay, cancel):
                stop_reason = "cancelled"
                break

        return self._fallback(definition, context, request, collector, attempts, stop_reason, logger)

    def _wait(self, delay: float, cancel: Optional[threading.Event]) -> bool:
        """Sleep for the backoff delay; True when cancelled while waiting."""
        if cancel is not None:
            return bool(self._event_wait(cancel, delay))
        self._sleep(delay)
        return False

    def _success(
        self,
        definition: RemoteCompletionAction,
        request: CompletionRequest,
        response: CompletionResponse,
        attempts: int,
        logger: logging.LoggerAdapter,
    ) -> ActionResult:
        model = response.model or request.model
        log_event(
            logger,
            logging.INFO,
            "Completion action processed successfully",
            action_name=definition.name,
            event_type="success",
            metadata={
                "model": model,
                "tokens_used": response.tokens_used,
                "prompt_tokens": response.prompt_tokens,
                "completion_tokens": response.completion_tokens,
                "output_length": len(response.output_text),
                "attempts": attempts,
            },
        )
        return self._result(
            definition,
            success=True,
            output=response.output_text.strip(),
            model=model,
            tokens_used=response.tokens_used,
            attempts=attempts,
        )

    def _fallback(
        self,
        definition: RemoteCompletionAction,
        context: ActionContext,
        request: CompletionRequest,
        collector: AttemptCollector,
        attempts: int,
        stop_reason: str,
        logger: logging.LoggerAdapter,
    ) -> ActionResult:
        reason = collector.fallback_reason(stop_reason)
        try:
            output = render_fallback(definition.prompt, context)
        except Exception as exc:  # pylint: disable=broad-except
            log_event(
                logger,
                logging.ERROR,
                "Fallback rendering failed",
                action_name=definition.name,
                event_type="failure",
                metadata={"reason": reason, "exception": str(exc), **collector.summary()},
            )
            return self._result(
                definition,
                success=False,
                error=f"AI processing failed ({reason}) and fallback rendering failed: {exc}",
                model=request.model,
                attempts=attempts,
            )

        log_event(
            logger,
            logging.WARNING,
            "Falling back to template rendering",
            action_name=definition.name,
            event_type="fallback",
            metadata={"reason": reason, "attempts": attempts, **collector.summary()},
        )
        return self._result(
            definition,
            success=True,
            output=output,
            model=request.model,
            attempts=attempts,
            used_fallback=True,
            fallback_reason=reason,
        )

    @staticmethod
    def _result(definition: RemoteCompletionAction, **fields) -> ActionResult:
        return ActionResult(
            action_name=definition.name,
            action_type=definition.kind,
            processed_at=datetime.now(timezone.utc),
            **fields,
        )


def render_fallback(prompt: str, context: ActionContext) -> str:
    """
    Deterministic stand-in for a failed completion.

    The prompt is rendered as a template against the context; a prompt that is
    not valid template syntax, or renders blank, is used verbatim.
    """
    output, error = render(prompt, context)
    if error is not None or not output.strip():
        return prompt
    return output


# High-Level Intent
# processor.py is the engine's state machine. It turns one remote-completion
# action into exactly one ActionResult, whatever the remote side does.

# Failure classification (CompletionError.kind)

# auth        -> no retry, straight to fallback
# rate_limit  -> retry with backoff
# server      -> retry with backoff
# timeout     -> retry with backoff, bounded by the overall deadline
# unknown     -> retry with backoff (also used for non-typed adapter exceptions
#                and empty completions)

# Edge Cases & Failure Scenarios

# No client configured -> fallback without any adapter call
# Deadline passes mid-retry -> stop, fallback
# Cancel event set -> stop promptly (checked before each attempt, wakes the wait)
# Blank prompt -> success=False "action prompt is empty", no adapter call
