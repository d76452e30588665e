# whisper_hub/post_actions/templating/functions.py
"""
Pipeline functions available inside action templates.

Every text function takes the field value as a string and returns a string.
summarize/extractActions are heuristic bullet extraction: approximate, but
deterministic for the same input. Clock functions read the evaluation time
passed in by the evaluator and are the only time-dependent pieces.
"""

from __future__ import annotations

import re
import textwrap
from datetime import datetime
from typing import Callable, Dict


SUMMARY_MAX_BULLETS = 5
SUMMARY_LINE_LIMIT = 100
SUMMARY_FALLBACK_WORDS = 20
FORMAT_WIDTH = 80
DEFAULT_TRUNCATE_LENGTH = 100

ACTION_KEYWORDS = ("todo", "action", "task", "follow up", "next step", "need to", "should", "must", "will")
NO_ACTIONS_MESSAGE = "No specific action items identified in the transcript."

_WORD_START = re.compile(r"(?<!\w)\w")


def upper(text: str) -> str:
    return text.upper()


def lower(text: str) -> str:
    return text.lower()


def title(text: str) -> str:
    """Capitalize the first letter of every word, leaving the rest untouched."""
    return _WORD_START.sub(lambda m: m.group(0).upper(), text)


def trim(text: str) -> str:
    return text.strip()


def word_count(text: str) -> str:
    return str(len(text.split()))


def char_count(text: str) -> str:
    return str(len(text))


def truncate(text: str, length: int = DEFAULT_TRUNCATE_LENGTH) -> str:
    if len(text) <= length:
        return text
    return text[:length] + "..."


def summarize(text: str) -> str:
    """Up to five non-blank lines as bullets; long lines are clipped."""
    summary = []
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        if len(line) > SUMMARY_LINE_LIMIT:
            summary.append("- " + line[: SUMMARY_LINE_LIMIT - 3] + "...")
        else:
            summary.append("- " + line)
        if len(summary) >= SUMMARY_MAX_BULLETS:
            break

    if not summary:
        words = text.split()
        if len(words) > SUMMARY_FALLBACK_WORDS:
            summary.append("- " + " ".join(words[:SUMMARY_FALLBACK_WORDS]) + "...")
        else:
            summary.append("- " + text)

    return "\n".join(summary)


def extract_actions(text: str) -> str:
    """Lines mentioning an action keyword, as unchecked task items."""
    actions = []
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        lowered = line.lower()
        if any(keyword in lowered for keyword in ACTION_KEYWORDS):
            actions.append("- [ ] " + line)

    if not actions:
        return NO_ACTIONS_MESSAGE
    return "\n".join(actions)


def format_text(text: str) -> str:
    """Wrap lines longer than 80 characters at word boundaries."""
    formatted = []
    for line in text.split("\n"):
        line = line.strip()
        if len(line) > FORMAT_WIDTH:
            formatted.extend(
                textwrap.wrap(line, width=FORMAT_WIDTH, break_long_words=False, break_on_hyphens=False)
            )
        else:
            formatted.append(line)
    return "\n".join(formatted)


def timestamp(now: datetime) -> str:
    return now.strftime("%Y-%m-%d %H:%M:%S")


def date(now: datetime) -> str:
    return now.strftime("%Y-%m-%d")


def time_of_day(now: datetime) -> str:
    return now.strftime("%H:%M:%S")


TEXT_FUNCTIONS: Dict[str, Callable[[str], str]] = {
    "upper": upper,
    "lower": lower,
    "title": title,
    "trim": trim,
    "wordCount": word_count,
    "charCount": char_count,
    "truncate": truncate,
    "summarize": summarize,
    "extractActions": extract_actions,
    "format": format_text,
}

CLOCK_FUNCTIONS: Dict[str, Callable[[datetime], str]] = {
    "timestamp": timestamp,
    "date": date,
    "time": time_of_day,
}

FUNCTION_DESCRIPTIONS: Dict[str, str] = {
    "upper": "Convert text to uppercase",
    "lower": "Convert text to lowercase",
    "title": "Convert text to title case",
    "trim": "Remove leading and trailing whitespace",
    "wordCount": "Count words in text",
    "charCount": "Count characters in text",
    "truncate": "Truncate text to specified length",
    "summarize": "Create bullet-point summary",
    "extractActions": "Extract action items and tasks",
    "format": "Format text with proper line wrapping",
    "timestamp": "Current timestamp",
    "date": "Current date",
    "time": "Current time",
}
