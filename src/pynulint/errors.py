# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised while driving the ``nu-lint`` executable."""

from __future__ import annotations

from collections.abc import Sequence


class NuLintError(RuntimeError):
    """Base class for every failure surfaced by pynulint."""


class ToolNotFound(NuLintError):
    """Raised when the ``nu-lint`` executable cannot be spawned."""

    def __init__(self, executable: str, detail: str) -> None:
        super().__init__(f"Failed to start {executable}: {detail}")
        self.executable = executable
        self.detail = detail


class ToolExecutionFailed(NuLintError):
    """Raised when ``nu-lint`` exits with a status outside ``{0, 1}``."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stderr: str,
    ) -> None:
        super().__init__(f"nu-lint exited with code {returncode}: {stderr}")
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr


class ToolTimeout(ToolExecutionFailed):
    """Raised when ``nu-lint`` does not finish within the configured timeout."""

    TIMEOUT_RETURNCODE = 124

    def __init__(self, command: Sequence[str], timeout: float, stderr: str = "") -> None:
        timeout_msg = f"Command timed out after {timeout:.1f}s"
        combined = f"{stderr}\n{timeout_msg}" if stderr else timeout_msg
        super().__init__(command, self.TIMEOUT_RETURNCODE, combined)
        self.timeout = timeout


class OutputParseFailed(NuLintError):
    """Raised when stdout does not match the schema requested from the tool."""

    def __init__(self, output_format: str, detail: str) -> None:
        super().__init__(f"Failed to parse nu-lint output as {output_format}: {detail}")
        self.output_format = output_format
        self.detail = detail


class VersionDetectionFailed(NuLintError):
    """Describe a failed ``--version`` call; logged, never propagated."""


class SettingsError(NuLintError):
    """Raised when pynulint settings are malformed."""


class EditConflictError(NuLintError):
    """Raised when a batch of text edits overlaps and cannot be applied atomically."""


__all__ = [
    "EditConflictError",
    "NuLintError",
    "OutputParseFailed",
    "SettingsError",
    "ToolExecutionFailed",
    "ToolNotFound",
    "ToolTimeout",
    "VersionDetectionFailed",
]
