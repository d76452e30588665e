"""Pytest fixtures for post-action engine tests."""

from __future__ import annotations

import io
import logging
import threading
from typing import Any, Callable, List, Union

import pytest

from whisper_hub.logging_core.logger import configure_logging
from whisper_hub.post_actions.config import EngineConfig
from whisper_hub.post_actions.context import build_context
from whisper_hub.post_actions.errors import CompletionError
from whisper_hub.post_actions.schema import (
    ActionContext,
    CompletionErrorKind,
    CompletionRequest,
    CompletionResponse,
)


Outcome = Union[CompletionResponse, BaseException, Callable[[CompletionRequest], CompletionResponse]]


class FakeClock:
    """Monotonic clock whose sleep() advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def wait(self, event: threading.Event, seconds: float) -> bool:
        """Cancel-aware wait: returns at once if the event is set, else advances time."""
        if event.is_set():
            return True
        self.sleep(seconds)
        return event.is_set()


class ScriptedClient:
    """
    Completion client returning scripted outcomes in order.

    The last outcome repeats once the script runs out. An outcome may be a
    response, an exception to raise, or a callable taking the request.
    """

    def __init__(self, *outcomes: Outcome) -> None:
        assert outcomes, "at least one outcome is required"
        self._outcomes = list(outcomes)
        self.requests: List[CompletionRequest] = []
        self.timeouts: List[float] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def send(self, request: CompletionRequest, timeout: float) -> CompletionResponse:
        self.requests.append(request)
        self.timeouts.append(timeout)
        outcome: Any = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(request)
        return outcome


def completion_error(kind: CompletionErrorKind, message: str = "scripted failure") -> CompletionError:
    return CompletionError(kind, message)


@pytest.fixture(autouse=True)
def quiet_logs() -> io.StringIO:
    """Route engine logs to an in-memory stream for every test."""
    stream = io.StringIO()
    configure_logging(logging.DEBUG, stream)
    return stream


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(_env_file=None, enabled=True, openai_api_key="sk-test")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def context() -> ActionContext:
    return build_context(
        "This is a test transcript with multiple sentences. It contains important information.",
        "call.mp3",
        duration_seconds=42.0,
        processing_time_seconds=1.5,
    )
