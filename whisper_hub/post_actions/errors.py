"""
Unified hierarchy of post-action error types. These inherit from ValueError
so callers that only know the standard library can still catch them.
"""

from __future__ import annotations

from typing import List

from whisper_hub.post_actions.schema import CompletionErrorKind


class PostActionError(ValueError):
    """Base class for post-action engine errors."""

    pass


class InvalidActionDefinition(PostActionError):
    """Raised when an action definition fails validation."""

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__("invalid action definition: " + "; ".join(self.violations))


class TemplateError(PostActionError):
    """Malformed template syntax. Returned by render(), never raised out of it."""

    pass


class CompletionError(PostActionError):
    """Typed failure reported by a completion adapter."""

    def __init__(self, kind: CompletionErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(f"{kind.value}: {message}")

    @property
    def retryable(self) -> bool:
        return self.kind is not CompletionErrorKind.AUTH


_FAILURE_DESCRIPTIONS = {
    CompletionErrorKind.AUTH: "API key invalid or expired. Please check your completion API configuration",
    CompletionErrorKind.RATE_LIMIT: "Completion API rate limit exceeded or quota reached. Please try again later",
    CompletionErrorKind.SERVER: "Completion service temporarily unavailable. Please try again in a few minutes",
    CompletionErrorKind.TIMEOUT: "Completion request timed out. Please try again with a shorter prompt or transcript",
    CompletionErrorKind.UNKNOWN: "Completion processing failed",
}


def describe_failure(kind: CompletionErrorKind, detail: str | None = None) -> str:
    """User-friendly message for a completion failure kind."""
    message = _FAILURE_DESCRIPTIONS[kind]
    if kind is CompletionErrorKind.UNKNOWN and detail:
        return f"{message}: {detail}"
    return message
