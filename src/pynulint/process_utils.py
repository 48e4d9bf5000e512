# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Asynchronous wrapper around ``nu-lint`` subprocess execution."""

from __future__ import annotations

import asyncio
import logging
import shutil

# Bandit: subprocess usage is intentional; commands are argument lists built
# by :mod:`pynulint.execution` and never pass through a shell.
import subprocess  # nosec B404
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol

from .errors import ToolExecutionFailed, ToolNotFound, ToolTimeout

LOGGER = logging.getLogger(__name__)

SUCCESS_RETURNCODES: Final[frozenset[int]] = frozenset({0, 1})
TERMINATE_GRACE_SECONDS: Final[float] = 0.5
REAP_TIMEOUT_SECONDS: Final[float] = 2.0


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Captured output of a completed ``nu-lint`` invocation."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def found_violations(self) -> bool:
        """Return ``True`` when the exit status signals reported violations."""
        return self.returncode == 1


class ToolRunner(Protocol):
    """Callable signature shared by :func:`run_tool` and test doubles."""

    def __call__(
        self,
        executable: str,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        input_text: str | None = None,
        timeout: float | None = None,
    ) -> Awaitable[ProcessResult]: ...


def _resolve_executable(executable: str) -> str:
    """Resolve a bare command name through ``PATH``; explicit paths pass through."""

    path = Path(executable).expanduser()
    if path.is_absolute() or path.parent != Path("."):
        return str(path)
    return shutil.which(executable) or executable


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Terminate *proc*, escalating to ``SIGKILL``, and reap it."""

    try:
        proc.terminate()
        try:
            await asyncio.wait_for(proc.wait(), timeout=TERMINATE_GRACE_SECONDS)
            return
        except asyncio.TimeoutError:
            proc.kill()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(proc.wait(), timeout=REAP_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        LOGGER.warning("nu-lint process %s did not exit after SIGKILL", proc.pid)


async def run_tool(
    executable: str,
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    input_text: str | None = None,
    timeout: float | None = None,
) -> ProcessResult:
    """Run ``executable`` with ``args`` and wait for it to exit.

    Both output streams are drained completely before the exit status is
    classified.

    Args:
        executable: Name or path of the ``nu-lint`` binary.
        args: Arguments passed after the executable.
        cwd: Working directory for the child process.
        input_text: Text written to the child's stdin; stdin is closed when omitted.
        timeout: Seconds to wait before terminating the child, ``None`` waits forever.

    Returns:
        ProcessResult: Output of a run that exited with status ``0`` or ``1``.

    Raises:
        ToolNotFound: If the executable cannot be spawned.
        ToolTimeout: If the child outlives ``timeout``.
        ToolExecutionFailed: If the child exits with any other status.
    """

    command = (_resolve_executable(executable), *args)
    LOGGER.debug("Running: %s", " ".join(command))
    LOGGER.debug("Working directory: %s", cwd or Path.cwd())
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            cwd=str(cwd) if cwd is not None else None,
            stdin=subprocess.PIPE if input_text is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        LOGGER.error("Failed to start %s: %s", executable, exc)
        raise ToolNotFound(executable, str(exc)) from exc

    payload = input_text.encode("utf-8") if input_text is not None else None
    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(payload), timeout=timeout)
    except asyncio.TimeoutError:
        await _terminate(proc)
        LOGGER.error("nu-lint timed out after %.1fs: %s", timeout, " ".join(command))
        raise ToolTimeout(command, timeout or 0.0) from None

    stdout = stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else ""
    stderr = stderr_bytes.decode("utf-8", errors="replace") if stderr_bytes else ""
    returncode = proc.returncode if proc.returncode is not None else -1
    LOGGER.debug("nu-lint process exited with code: %s", returncode)
    if stdout:
        LOGGER.debug("stdout: %s", stdout)
    if stderr:
        LOGGER.debug("stderr: %s", stderr)

    if returncode not in SUCCESS_RETURNCODES:
        LOGGER.error("nu-lint exited with code %s: %s", returncode, stderr)
        raise ToolExecutionFailed(command, returncode, stderr)
    return ProcessResult(command=command, returncode=returncode, stdout=stdout, stderr=stderr)


__all__ = ["ProcessResult", "SUCCESS_RETURNCODES", "ToolRunner", "run_tool"]
