"""Tests for the openai-backed completion adapter."""

from types import SimpleNamespace
from typing import Any, Dict, List

import httpx
import openai
import pytest

from whisper_hub.post_actions.completion.openai_client import OpenAICompletionClient, classify_openai_error
from whisper_hub.post_actions.errors import CompletionError
from whisper_hub.post_actions.schema import CompletionErrorKind, CompletionRequest


REQUEST = CompletionRequest(
    system_message="system",
    user_message="user",
    model="gpt-3.5-turbo",
    temperature=0.3,
    max_tokens=1000,
)

_HTTP_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def status_error(cls: type, status: int) -> openai.APIStatusError:
    response = httpx.Response(status, request=_HTTP_REQUEST)
    return cls(f"HTTP {status}", response=response, body=None)


class StubCompletions:
    """Stands in for client.chat.completions."""

    def __init__(self, outcome: Any) -> None:
        self.outcome = outcome
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


def stub_client(outcome: Any) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=StubCompletions(outcome)))


def chat_response(content: str, total: int = 42, model: str = "gpt-3.5-turbo-0125") -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=total, prompt_tokens=30, completion_tokens=total - 30),
        model=model,
    )


class TestSend:
    def test_request_shape(self) -> None:
        stub = stub_client(chat_response("  done  "))
        OpenAICompletionClient(client=stub).send(REQUEST, timeout=12.5)

        call = stub.chat.completions.calls[0]
        assert call["model"] == "gpt-3.5-turbo"
        assert call["temperature"] == 0.3
        assert call["max_tokens"] == 1000
        assert call["timeout"] == 12.5
        assert call["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ]

    def test_response_mapping(self) -> None:
        response = OpenAICompletionClient(client=stub_client(chat_response("  done  "))).send(REQUEST, timeout=5)

        assert response.output_text == "done"
        assert response.tokens_used == 42
        assert response.prompt_tokens == 30
        assert response.completion_tokens == 12
        assert response.model == "gpt-3.5-turbo-0125"

    def test_missing_usage(self) -> None:
        raw = chat_response("ok")
        raw.usage = None
        response = OpenAICompletionClient(client=stub_client(raw)).send(REQUEST, timeout=5)

        assert response.tokens_used == 0
        assert response.prompt_tokens is None

    def test_no_choices(self) -> None:
        raw = SimpleNamespace(choices=[], usage=None, model="gpt-3.5-turbo")
        with pytest.raises(CompletionError) as exc_info:
            OpenAICompletionClient(client=stub_client(raw)).send(REQUEST, timeout=5)

        assert exc_info.value.kind is CompletionErrorKind.UNKNOWN
        assert "no response choices" in exc_info.value.message

    def test_sdk_error_is_typed(self) -> None:
        stub = stub_client(status_error(openai.RateLimitError, 429))
        with pytest.raises(CompletionError) as exc_info:
            OpenAICompletionClient(client=stub).send(REQUEST, timeout=5)

        assert exc_info.value.kind is CompletionErrorKind.RATE_LIMIT
        assert isinstance(exc_info.value.__cause__, openai.RateLimitError)


class TestClassification:
    @pytest.mark.parametrize(
        "exc,kind",
        [
            (status_error(openai.AuthenticationError, 401), CompletionErrorKind.AUTH),
            (status_error(openai.PermissionDeniedError, 403), CompletionErrorKind.AUTH),
            (status_error(openai.RateLimitError, 429), CompletionErrorKind.RATE_LIMIT),
            (status_error(openai.InternalServerError, 500), CompletionErrorKind.SERVER),
            (status_error(openai.APIStatusError, 503), CompletionErrorKind.SERVER),
            (status_error(openai.BadRequestError, 400), CompletionErrorKind.UNKNOWN),
            (openai.APITimeoutError(request=_HTTP_REQUEST), CompletionErrorKind.TIMEOUT),
            (openai.APIConnectionError(request=_HTTP_REQUEST), CompletionErrorKind.UNKNOWN),
        ],
    )
    def test_mapping(self, exc: Exception, kind: CompletionErrorKind) -> None:
        assert classify_openai_error(exc) is kind
