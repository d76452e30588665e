# whisper_hub/post_actions/completion/adapter.py
"""
Completion client boundary.

The processor depends only on this protocol, never on a concrete transport.
Implementations must raise CompletionError with a typed kind on failure and
be safe for concurrent use by multiple simultaneous calls.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from whisper_hub.post_actions.errors import CompletionError
from whisper_hub.post_actions.schema import CompletionRequest, CompletionResponse


@runtime_checkable
class CompletionClient(Protocol):
    """Send one chat request; return the response or raise CompletionError."""

    def send(self, request: CompletionRequest, timeout: float) -> CompletionResponse:
        ...


__all__ = ["CompletionClient", "CompletionError"]
