# whisper_hub/post_actions/context.py
"""
Builds an ActionContext from an upstream transcription result.

Responsibility:
- Derive word/char counts from the transcript
- Classify the source file as audio or video by extension
- Format elapsed times the way results are shown to users

No I/O. The engine receives (transcript, filename, metadata), never media.
"""

from __future__ import annotations

import os
from typing import Optional

from whisper_hub.post_actions.schema import ActionContext


VIDEO_EXTENSIONS = frozenset({".mp4", ".avi", ".mov", ".mkv", ".webm", ".flv", ".wmv", ".m4v"})


def file_type_for(filename: str) -> str:
    """Return "video" for known video extensions, otherwise "audio"."""
    _, ext = os.path.splitext(filename or "")
    return "video" if ext.lower() in VIDEO_EXTENSIONS else "audio"


def format_elapsed(seconds: Optional[float]) -> str:
    """Render an elapsed time as "<n>ms" below one second, else "<x.y>s"."""
    if seconds is None:
        return ""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.1f}s"


def build_context(
    transcript: str,
    filename: str,
    duration_seconds: Optional[float] = None,
    processing_time_seconds: Optional[float] = None,
) -> ActionContext:
    transcript = transcript or ""
    return ActionContext(
        transcript=transcript,
        filename=filename or "",
        file_type=file_type_for(filename),
        word_count=len(transcript.split()),
        char_count=len(transcript),
        duration_seconds=duration_seconds,
        processing_time_seconds=processing_time_seconds,
    )
