# whisper_hub/post_actions/timing.py
"""
Lightweight timer for consistent execution_time_ms measurement.

Every ActionResult produced by the service is timed with timer(); manual
perf_counter arithmetic elsewhere is a bug.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Callable, Iterator


@contextmanager
def timer() -> Iterator[Callable[[], float]]:
    """
    Context manager that provides an end() function returning elapsed time in milliseconds.

    Usage:
        with timer() as end:
            # do work
            pass
        execution_time_ms = end()
    """
    start = time.perf_counter()

    def end() -> float:
        return (time.perf_counter() - start) * 1000

    yield end
