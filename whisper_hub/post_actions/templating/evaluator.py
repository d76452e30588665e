# whisper_hub/post_actions/templating/evaluator.py
"""
Template evaluator for template-kind actions.

Syntax:
- {{.Field}}                 substitute a context field
- {{.Field | fn}}            apply one pipeline function to the field value
- {{.Field | truncate 50}}   truncate takes one optional integer argument
- {{timestamp}} {{date}} {{time}}   clock functions may be used bare

Policy:
- Unknown fields render as "" and unknown functions pass the value through:
  a typo while editing a template must never abort rendering.
- Malformed syntax (unclosed or empty actions, multi-function pipelines,
  bad field references) is returned as a TemplateError, never raised.
- Pure: no I/O and no hidden state. Output depends only on (template, context)
  plus `now` for Date and the clock functions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, Union

from whisper_hub.post_actions.context import format_elapsed
from whisper_hub.post_actions.errors import TemplateError
from whisper_hub.post_actions.schema import ActionContext
from whisper_hub.post_actions.templating.functions import (
    CLOCK_FUNCTIONS,
    FUNCTION_DESCRIPTIONS,
    TEXT_FUNCTIONS,
    truncate,
)


OPEN = "{{"
CLOSE = "}}"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

FIELD_GETTERS: Dict[str, Callable[[ActionContext, datetime], str]] = {
    "Transcript": lambda ctx, now: ctx.transcript,
    "Filename": lambda ctx, now: ctx.filename,
    "Date": lambda ctx, now: now.strftime("%Y-%m-%d"),
    "FileType": lambda ctx, now: ctx.file_type,
    "Duration": lambda ctx, now: format_elapsed(ctx.duration_seconds),
    "WordCount": lambda ctx, now: str(ctx.word_count),
    "CharCount": lambda ctx, now: str(ctx.char_count),
    "ProcessingTime": lambda ctx, now: format_elapsed(ctx.processing_time_seconds),
}


@dataclass(frozen=True)
class Action:
    """One parsed {{ ... }} expression."""
    field: Optional[str] = None  # set for {{.Field ...}}
    bare: Optional[str] = None  # set for {{name ...}}
    function: Optional[str] = None
    argument: Optional[int] = None


Node = Union[str, Action]


def parse(template: str) -> List[Node]:
    """
    Split a template into literal text and parsed actions.

    Raises TemplateError on malformed syntax.
    """
    nodes: List[Node] = []
    pos = 0
    while True:
        start = template.find(OPEN, pos)
        if start == -1:
            if pos < len(template):
                nodes.append(template[pos:])
            return nodes

        if start > pos:
            nodes.append(template[pos:start])

        end = template.find(CLOSE, start + len(OPEN))
        if end == -1:
            raise TemplateError(f"unclosed action starting at position {start}")

        nodes.append(_parse_action(template[start + len(OPEN):end], start))
        pos = end + len(CLOSE)


def _parse_action(body: str, position: int) -> Action:
    body = body.strip()
    if not body:
        raise TemplateError(f"empty action at position {position}")

    segments = [segment.strip() for segment in body.split("|")]
    if len(segments) > 2:
        raise TemplateError(f"only one pipeline function is allowed at position {position}")
    if any(not segment for segment in segments):
        raise TemplateError(f"empty pipeline segment at position {position}")

    head = segments[0]
    if head.startswith("."):
        name = head[1:]
        if not _IDENTIFIER.match(name):
            raise TemplateError(f"malformed field reference {head!r} at position {position}")
        action = Action(field=name)
    else:
        if not _IDENTIFIER.match(head):
            raise TemplateError(f"unexpected token {head!r} at position {position}")
        if head in TEXT_FUNCTIONS:
            raise TemplateError(f"function {head!r} requires a value at position {position}")
        action = Action(bare=head)

    if len(segments) == 1:
        return action

    tokens = segments[1].split()
    function = tokens[0]
    if not _IDENTIFIER.match(function):
        raise TemplateError(f"malformed function name {function!r} at position {position}")

    argument = None
    args = tokens[1:]
    if function == "truncate" and args:
        if len(args) > 1:
            raise TemplateError(f"truncate takes a single length argument at position {position}")
        try:
            argument = int(args[0])
        except ValueError:
            raise TemplateError(f"truncate length must be an integer, got {args[0]!r}") from None
        if argument < 0:
            raise TemplateError(f"truncate length must not be negative, got {argument}")
    elif args and (function in TEXT_FUNCTIONS or function in CLOCK_FUNCTIONS):
        raise TemplateError(f"function {function!r} takes no arguments at position {position}")

    return Action(field=action.field, bare=action.bare, function=function, argument=argument)


def check_syntax(template: str) -> Optional[TemplateError]:
    """Return the syntax error in a template, or None when it parses."""
    try:
        parse(template)
    except TemplateError as exc:
        return exc
    return None


def _evaluate(action: Action, context: ActionContext, now: datetime) -> str:
    if action.field is not None:
        getter = FIELD_GETTERS.get(action.field)
        value = getter(context, now) if getter else ""
    elif action.bare in CLOCK_FUNCTIONS:
        value = CLOCK_FUNCTIONS[action.bare](now)
    else:
        value = ""

    if action.function is None:
        return value
    if action.function in CLOCK_FUNCTIONS:
        return CLOCK_FUNCTIONS[action.function](now)
    if action.function == "truncate" and action.argument is not None:
        return truncate(value, action.argument)
    fn = TEXT_FUNCTIONS.get(action.function)
    if fn is None:
        return value  # unknown function: pass-through
    return fn(value)


def render(
    template: str,
    context: ActionContext,
    now: Optional[datetime] = None,
) -> Tuple[str, Optional[TemplateError]]:
    """
    Render a template against a context.

    Returns (output, None) on success and ("", error) on malformed syntax.
    """
    try:
        nodes = parse(template)
    except TemplateError as exc:
        return "", exc

    now = now or datetime.now()
    parts = []
    for node in nodes:
        if isinstance(node, Action):
            parts.append(_evaluate(node, context, now))
        else:
            parts.append(node)
    return "".join(parts), None


def available_variables() -> List[str]:
    return list(FIELD_GETTERS)


def available_functions() -> Dict[str, str]:
    return dict(FUNCTION_DESCRIPTIONS)


# High-Level Intent
# evaluator.py implements the deliberately small template dialect: variable
# substitution plus one pipeline function per expression, no control flow.

# Data Flow
# template -> parse() -> [text | Action] -> _evaluate each Action against the
# context -> joined string.
# The validator calls check_syntax() at save time so authors see syntax errors
# before any run.

# Edge Cases & Failure Scenarios

# {{.NotAField}} -> "" (no error)
# {{.Transcript | notAFunction}} -> raw transcript
# {{.Transcript | upper | lower}} -> TemplateError (one function only)
# "{{.Filename}" -> TemplateError (unclosed)
# Stray "}}" outside an action -> literal text
