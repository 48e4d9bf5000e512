# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point: a terminal host for the lint orchestrator."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from ..config import LinterSettings
from ..errors import NuLintError
from ..logging import configure_logging, ok, warn
from ..models import OutputFormat
from ..orchestrator import LintOrchestrator, LintOutcome
from ..process_utils import run_tool
from ..versioning import ToolVersion, VersionNegotiator
from .shared import CLIError, build_orchestrator

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_FAILURE = 2

app = typer.Typer(
    name="pynulint",
    help="Run nu-lint and reconcile its diagnostics.",
    no_args_is_help=True,
    add_completion=False,
)

RootOption = Annotated[
    Path,
    typer.Option("--root", help="Workspace root nu-lint runs from.", file_okay=False, resolve_path=True),
]
EmojiOption = Annotated[bool, typer.Option("--emoji/--no-emoji", help="Decorate messages with emoji.")]
DebugOption = Annotated[bool, typer.Option("--debug", help="Log commands and raw tool output.")]
ExecutableOption = Annotated[
    str | None,
    typer.Option("--executable", help="Override the nu-lint executable path."),
]


def _parse_format(value: str | None) -> OutputFormat | None:
    if value is None:
        return None
    try:
        return OutputFormat(value)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in OutputFormat)
        raise typer.BadParameter(f"--format must be one of: {allowed}") from exc


async def _lint_targets(orchestrator: LintOrchestrator, paths: list[Path]) -> bool:
    """Lint *paths*, or the whole workspace when empty; ``True`` if any run failed."""

    if not paths:
        report = await orchestrator.lint_workspace()
        return bool(report.failed)
    outcomes = [await orchestrator.lint_path(path) for path in paths]
    return any(outcome is LintOutcome.FAILED for outcome in outcomes)


async def _detect_version(negotiator: VersionNegotiator) -> tuple[ToolVersion | None, OutputFormat]:
    version = await negotiator.detect_version()
    return version, await negotiator.detect_format()


@app.command("lint")
def lint_command(
    paths: Annotated[list[Path] | None, typer.Argument(help="Scripts to lint; the whole workspace when omitted.")] = None,
    root: RootOption = Path("."),
    output_format: Annotated[
        str | None,
        typer.Option("--format", "-f", help="Force an output format instead of probing the nu-lint version."),
    ] = None,
    executable: ExecutableOption = None,
    emoji: EmojiOption = True,
    debug: DebugOption = False,
) -> None:
    """Lint Nushell scripts and print their diagnostics."""

    configure_logging(debug=debug)
    console = Console(highlight=False)
    try:
        orchestrator, host = build_orchestrator(
            root,
            runner=run_tool,
            console=console,
            use_emoji=emoji,
            output_format=_parse_format(output_format),
            executable=executable,
        )
    except CLIError as exc:
        warn(str(exc), use_emoji=emoji)
        raise typer.Exit(code=exc.exit_code) from exc

    if asyncio.run(_lint_targets(orchestrator, paths or [])):
        raise typer.Exit(code=EXIT_FAILURE)
    if host.diagnostic_count:
        raise typer.Exit(code=EXIT_FINDINGS)
    ok("No nu-lint diagnostics.", use_emoji=emoji)
    raise typer.Exit(code=EXIT_CLEAN)


@app.command("fix")
def fix_command(
    path: Annotated[Path | None, typer.Argument(help="Script to fix in place.")] = None,
    stdin: Annotated[bool, typer.Option("--stdin", help="Read source from stdin and print the fixed text.")] = False,
    root: RootOption = Path("."),
    executable: ExecutableOption = None,
    emoji: EmojiOption = True,
    debug: DebugOption = False,
) -> None:
    """Apply every fix nu-lint knows about."""

    if path is None and not stdin:
        raise typer.BadParameter("Provide a PATH or --stdin.")
    configure_logging(debug=debug)
    console = Console(highlight=False)
    try:
        orchestrator, _host = build_orchestrator(
            root,
            runner=run_tool,
            console=console,
            use_emoji=emoji,
            executable=executable,
        )
    except CLIError as exc:
        warn(str(exc), use_emoji=emoji)
        raise typer.Exit(code=exc.exit_code) from exc

    if stdin or path is None:
        try:
            fixed = asyncio.run(orchestrator.fix_text(sys.stdin.read()))
        except NuLintError as exc:
            warn(str(exc), use_emoji=emoji)
            raise typer.Exit(code=EXIT_FAILURE) from exc
        typer.echo(fixed, nl=False)
        raise typer.Exit(code=EXIT_CLEAN)

    if not asyncio.run(orchestrator.fix_file(path)):
        raise typer.Exit(code=EXIT_FAILURE)
    ok(f"Fixed {path}", use_emoji=emoji)
    raise typer.Exit(code=EXIT_CLEAN)


@app.command("version")
def version_command(
    executable: ExecutableOption = None,
    debug: DebugOption = False,
) -> None:
    """Show the detected nu-lint version and the output format it supports."""

    configure_logging(debug=debug)
    defaults = LinterSettings()
    negotiator = VersionNegotiator(
        executable or defaults.executable_path,
        runner=run_tool,
        timeout=defaults.timeout_seconds,
    )
    version, output_format = asyncio.run(_detect_version(negotiator))
    typer.echo(f"nu-lint {version or 'unknown'} (format: {output_format.value})")


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
