# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build ``nu-lint`` command lines for lint and fix invocations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import LinterSettings
from .models import OutputFormat
from .paths import lint_invocation_paths


@dataclass(frozen=True, slots=True)
class LintCommand:
    """Executable, arguments and working directory for one invocation."""

    executable: str
    args: tuple[str, ...]
    cwd: Path | None
    target: str | None

    @property
    def argv(self) -> tuple[str, ...]:
        """Return the full argument vector including the executable."""
        return (self.executable, *self.args)


def _config_args(settings: LinterSettings, config_path: str | None) -> list[str]:
    chosen = config_path if config_path is not None else settings.config_path
    return ["--config", chosen] if chosen else []


def build_lint_command(
    file_path: Path,
    output_format: OutputFormat,
    settings: LinterSettings,
    *,
    workspace_root: Path | None = None,
    config_path: str | None = None,
    fix: bool = False,
) -> LintCommand:
    """Return the command linting *file_path* in *output_format*.

    The working directory is the workspace root whenever one is known and the
    target is passed relative to it; running from a subdirectory with an
    absolute target makes ``nu-lint`` mis-resolve project metadata.
    """

    cwd, target = lint_invocation_paths(file_path, workspace_root)
    args = ["-f", output_format.value, *_config_args(settings, config_path)]
    if fix:
        args.append("--fix")
    args.append(target)
    return LintCommand(executable=settings.executable_path, args=tuple(args), cwd=cwd, target=target)


def build_fix_command(
    file_path: Path,
    settings: LinterSettings,
    *,
    workspace_root: Path | None = None,
) -> LintCommand:
    """Return the command rewriting *file_path* in place with ``--fix``."""

    cwd, target = lint_invocation_paths(file_path, workspace_root)
    args = ["--fix", *_config_args(settings, None), target]
    return LintCommand(executable=settings.executable_path, args=tuple(args), cwd=cwd, target=target)


def build_stdin_fix_command(settings: LinterSettings, *, cwd: Path | None = None) -> LintCommand:
    """Return the command that fixes source text streamed through stdin."""

    args = ["--fix", *_config_args(settings, None)]
    return LintCommand(executable=settings.executable_path, args=tuple(args), cwd=cwd, target=None)


__all__ = ["LintCommand", "build_fix_command", "build_lint_command", "build_stdin_fix_command"]
