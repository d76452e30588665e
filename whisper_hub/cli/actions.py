# whisper_hub/cli/actions.py
"""
CLI entrypoint for running post-transcription actions.

Thin adapter, no business logic.
Responsibilities:
- Parse arguments
- Load an action definition (JSON file or predefined id) and a transcript
- Invoke the action service
- Print the ActionResult as JSON and clear user feedback

Structured JSON logs go to stderr; stdout carries only the result.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from whisper_hub.logging_core.logger import configure_logging
from whisper_hub.post_actions.config import EngineConfig
from whisper_hub.post_actions.context import build_context
from whisper_hub.post_actions.errors import InvalidActionDefinition
from whisper_hub.post_actions.service import ActionProcessingService
from whisper_hub.post_actions.validator import parse_action, validate


app = typer.Typer(
    name="whisper-actions",
    help="Whisper Hub: post-transcription actions",
    no_args_is_help=True,
)

DEGRADED_NOTICE = "AI processing unavailable: showing basic result."


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        typer.echo(typer.style(f"Could not read action file {path}: {exc}", fg=typer.colors.RED), err=True)
        raise typer.Exit(code=2) from exc


def _build_service() -> ActionProcessingService:
    return ActionProcessingService.from_config(EngineConfig())


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Emit INFO-level JSON logs to stderr"),
) -> None:
    configure_logging(logging.INFO if verbose else logging.WARNING)


@app.command()
def run(
    transcript_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Plain-text transcript"),
    action_file: Optional[Path] = typer.Option(None, "--action-file", "-a", help="Action definition (JSON)"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Predefined action id"),
    filename: Optional[str] = typer.Option(None, "--filename", help="Original media filename"),
    duration: Optional[float] = typer.Option(None, "--duration", help="Media duration in seconds"),
) -> None:
    """
    Run one action against a transcript and print the result as JSON.
    """
    if (action_file is None) == (preset is None):
        typer.echo("Provide exactly one of --action-file or --preset.", err=True)
        raise typer.Exit(code=2)

    service = _build_service()
    transcript = transcript_file.read_text(encoding="utf-8")
    context = build_context(transcript, filename or transcript_file.name, duration_seconds=duration)

    if preset is not None:
        result = service.process_predefined(preset, context)
    else:
        try:
            definition = parse_action(_load_json(action_file))
        except InvalidActionDefinition as exc:
            typer.echo(typer.style("✗ Invalid action definition", fg=typer.colors.RED, bold=True), err=True)
            for violation in exc.violations:
                typer.echo(f"  - {violation}", err=True)
            raise typer.Exit(code=1)
        result = service.process(definition, context)

    typer.echo(result.model_dump_json(by_alias=True, indent=2))

    if result.used_fallback:
        typer.echo(typer.style(f"⚠ {DEGRADED_NOTICE}", fg=typer.colors.YELLOW), err=True)
    if not result.success:
        typer.echo(typer.style(f"✗ Action failed: {result.error}", fg=typer.colors.RED, bold=True), err=True)
        raise typer.Exit(code=1)


@app.command("validate")
def validate_command(
    action_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Action definition (JSON)"),
) -> None:
    """
    Check an action definition and list every violation.
    """
    violations = validate(_load_json(action_file))
    if violations:
        typer.echo(typer.style("✗ Invalid action definition", fg=typer.colors.RED, bold=True))
        for violation in violations:
            typer.echo(f"  - {violation}")
        raise typer.Exit(code=1)
    typer.echo(typer.style("✓ Action definition is valid", fg=typer.colors.GREEN, bold=True))


@app.command()
def presets() -> None:
    """
    List the predefined actions.
    """
    service = ActionProcessingService(EngineConfig())
    for action in service.predefined_actions():
        typer.echo(f"{action.id}\t{action.name}\t{action.model}")
        typer.echo(f"    {action.description}")


@app.command()
def functions() -> None:
    """
    List template variables and pipeline functions.
    """
    service = ActionProcessingService(EngineConfig())
    typer.echo("Variables:")
    for name in service.available_variables():
        typer.echo(f"  {{{{.{name}}}}}")
    typer.echo("Functions:")
    for name, description in service.available_functions().items():
        typer.echo(f"  {name:<16}{description}")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("\nInterrupted by user.", err=True)
        sys.exit(1)


# High-Level Intent
# cli/actions.py is the thin command-line adapter over ActionProcessingService.
# It only parses arguments, loads files, calls the service and prints results.

# Edge Cases & Failure Scenarios

# Both or neither of --action-file/--preset -> exit 2 with a hint
# Unreadable or non-JSON action file -> exit 2
# Invalid definition -> violations listed, exit 1, no processing attempted
# Fallback result -> JSON printed plus a degraded-result notice on stderr
# success=False -> JSON printed, error on stderr, exit 1
