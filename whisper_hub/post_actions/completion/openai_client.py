# whisper_hub/post_actions/completion/openai_client.py
"""
Completion adapter backed by the official `openai` SDK.

Single responsibility: translate a CompletionRequest into a chat completion
call and map SDK exceptions onto typed CompletionError kinds. Retries are the
processor's job, so the SDK's own retry loop is disabled.
"""

from __future__ import annotations

from typing import Any, Optional

import openai

from whisper_hub.post_actions.errors import CompletionError
from whisper_hub.post_actions.schema import CompletionErrorKind, CompletionRequest, CompletionResponse


def classify_openai_error(exc: Exception) -> CompletionErrorKind:
    """Map an openai SDK exception to a completion failure kind."""
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return CompletionErrorKind.AUTH
    if isinstance(exc, openai.RateLimitError):
        return CompletionErrorKind.RATE_LIMIT
    if isinstance(exc, openai.APITimeoutError):
        return CompletionErrorKind.TIMEOUT
    if isinstance(exc, openai.InternalServerError):
        return CompletionErrorKind.SERVER
    if isinstance(exc, openai.APIStatusError) and exc.status_code >= 500:
        return CompletionErrorKind.SERVER
    return CompletionErrorKind.UNKNOWN


class OpenAICompletionClient:
    """CompletionClient implementation over openai.OpenAI."""

    def __init__(self, api_key: Optional[str] = None, client: Any = None, base_url: Optional[str] = None) -> None:
        if client is None:
            client = openai.OpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self._client = client

    def send(self, request: CompletionRequest, timeout: float) -> CompletionResponse:
        try:
            response = self._client.chat.completions.create(
                model=request.model,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                messages=[
                    {"role": "system", "content": request.system_message},
                    {"role": "user", "content": request.user_message},
                ],
                timeout=timeout,
            )
        except openai.OpenAIError as exc:
            raise CompletionError(classify_openai_error(exc), str(exc)) from exc

        if not response.choices:
            raise CompletionError(CompletionErrorKind.UNKNOWN, "no response choices received")

        content = response.choices[0].message.content or ""
        usage = response.usage
        return CompletionResponse(
            output_text=content.strip(),
            tokens_used=usage.total_tokens if usage else 0,
            prompt_tokens=usage.prompt_tokens if usage else None,
            completion_tokens=usage.completion_tokens if usage else None,
            model=getattr(response, "model", None) or None,
        )
