# whisper_hub/post_actions/completion/retry.py
"""
Retry policy and attempt diagnostics for remote completion calls.

This module defines:
- BackoffPolicy: bounded exponential backoff (delay doubles per attempt, capped)
- AttemptRecord: one failed adapter call
- AttemptCollector: accumulates failed attempts for one run and summarises them

No I/O and no sleeping here; the processor owns the clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from whisper_hub.post_actions.config import EngineConfig
from whisper_hub.post_actions.errors import describe_failure
from whisper_hub.post_actions.schema import CompletionErrorKind


@dataclass(frozen=True)
class BackoffPolicy:
    """Exponential backoff bounded by attempt count and a per-wait cap."""
    max_attempts: int = 3
    base_delay: float = 0.2
    factor: float = 2.0
    max_delay: float = 2.0

    @classmethod
    def from_config(cls, config: EngineConfig) -> "BackoffPolicy":
        return cls(
            max_attempts=config.max_attempts,
            base_delay=config.backoff_base_seconds,
            factor=config.backoff_factor,
            max_delay=config.backoff_max_seconds,
        )

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the given 1-based failed attempt."""
        return min(self.base_delay * self.factor ** (attempt - 1), self.max_delay)

    def should_retry(self, attempt: int, kind: CompletionErrorKind) -> bool:
        return kind is not CompletionErrorKind.AUTH and attempt < self.max_attempts


class AttemptRecord(BaseModel):
    """Structured representation of a single failed attempt."""
    attempt: int
    kind: CompletionErrorKind
    message: str
    retry_delay: Optional[float] = None

    model_config = ConfigDict(frozen=True)


class AttemptCollector:
    """
    Accumulates failed attempts for one action run.

    One collector per run; never shared between runs.
    """

    def __init__(self) -> None:
        self._records: List[AttemptRecord] = []

    def add(self, record: AttemptRecord) -> None:
        if self._records and record.attempt <= self._records[-1].attempt:
            raise ValueError(f"Out of order attempt record {record.attempt}")
        self._records.append(record)

    @property
    def records(self) -> List[AttemptRecord]:
        return list(self._records)

    @property
    def last(self) -> Optional[AttemptRecord]:
        return self._records[-1] if self._records else None

    def fallback_reason(self, stop_reason: str | None = None) -> str:
        """Human-readable reason for degrading, built from the last failure."""
        last = self.last
        if last is None:
            return stop_reason or "remote completion unavailable"
        reason = describe_failure(last.kind, last.message)
        if stop_reason:
            reason = f"{reason} ({stop_reason})"
        return reason

    def summary(self) -> Dict[str, Any]:
        """Log-friendly summary: attempt count and failure kinds in order."""
        return {
            "failed_attempts": len(self._records),
            "failure_kinds": [record.kind.value for record in self._records],
            "total_backoff_seconds": round(sum(r.retry_delay or 0.0 for r in self._records), 3),
        }
