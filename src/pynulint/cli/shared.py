# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (errors, orchestrator wiring)."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..config import load_settings
from ..errors import SettingsError
from ..models import OutputFormat
from ..orchestrator import LintOrchestrator
from ..process_utils import ToolRunner
from .host import ConsoleHost


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


def build_orchestrator(
    root: Path | None,
    *,
    runner: ToolRunner,
    console: Console,
    use_emoji: bool,
    output_format: OutputFormat | None = None,
    executable: str | None = None,
) -> tuple[LintOrchestrator, ConsoleHost]:
    """Return an orchestrator wired to a :class:`ConsoleHost`.

    Raises:
        CLIError: If the settings for *root* are invalid.
    """

    try:
        settings = load_settings(root)
    except SettingsError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    if executable is not None:
        settings = settings.model_copy(update={"executable_path": executable})
    host = ConsoleHost(console=console, use_emoji=use_emoji, root=root)
    orchestrator = LintOrchestrator(
        host,
        settings,
        workspace_root=root,
        runner=runner,
        output_format=output_format,
    )
    return orchestrator, host


__all__ = ["CLIError", "build_orchestrator"]
