# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Detect the installed ``nu-lint`` version and negotiate its output format."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Final

from packaging.version import InvalidVersion, Version

from .errors import NuLintError, VersionDetectionFailed
from .models import OutputFormat
from .process_utils import ToolRunner, run_tool

LOGGER = logging.getLogger(__name__)

VERSION_PATTERN: Final[re.Pattern[str]] = re.compile(r"nu-lint\s+(\d+\.\d+\.\d+)")
RANGE_JSON_MIN_PATCH: Final[int] = 37


@dataclass(frozen=True, slots=True)
class ToolVersion:
    """Semantic version reported by ``nu-lint --version``."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_tool_version(output: str | None) -> ToolVersion | None:
    """Return the version embedded in ``nu-lint --version`` output, if any."""

    if not output:
        return None
    match = VERSION_PATTERN.search(output)
    if match is None:
        return None
    try:
        version = Version(match.group(1))
    except InvalidVersion:
        return None
    return ToolVersion(major=version.major, minor=version.minor, patch=version.micro)


def negotiate_format(version: ToolVersion | None) -> OutputFormat:
    """Pick the richest output schema *version* is known to support.

    Unknown versions fall back to the legacy schema, which every release
    understands.
    """

    if version is None:
        return OutputFormat.LEGACY_JSON
    if version.major > 0 or version.minor > 0 or version.patch >= RANGE_JSON_MIN_PATCH:
        return OutputFormat.RANGE_JSON
    return OutputFormat.LEGACY_JSON


class VersionNegotiator:
    """Query the tool version once and remember the negotiated format."""

    def __init__(
        self,
        executable: str,
        *,
        runner: ToolRunner | None = None,
        timeout: float | None = None,
    ) -> None:
        """Create a negotiator for *executable*.

        Args:
            executable: Name or path of the ``nu-lint`` binary.
            runner: Callable spawning the version query, :func:`run_tool` by default.
            timeout: Seconds the version query may run before it is killed.
        """

        self._executable = executable
        self._runner = runner or run_tool
        self._timeout = timeout
        self._lock = asyncio.Lock()
        self._detected = False
        self._version: ToolVersion | None = None
        self._format = OutputFormat.LEGACY_JSON

    @property
    def version(self) -> ToolVersion | None:
        """Return the detected version, ``None`` before detection or when unknown."""
        return self._version

    async def detect_version(self) -> ToolVersion | None:
        """Return the tool version, probing the executable on first use."""

        async with self._lock:
            if not self._detected:
                self._version = await self._query_version()
                self._format = negotiate_format(self._version)
                self._detected = True
                LOGGER.info(
                    "nu-lint version %s, using output format %s",
                    self._version or "unknown",
                    self._format.value,
                )
        return self._version

    async def detect_format(self) -> OutputFormat:
        """Return the output format to request from the executable."""

        await self.detect_version()
        return self._format

    async def _query_version(self) -> ToolVersion | None:
        try:
            result = await self._runner(self._executable, ["--version"], timeout=self._timeout)
        except NuLintError as exc:
            LOGGER.debug("%s", VersionDetectionFailed(f"version check failed: {exc}"))
            return None
        if result.returncode != 0:
            LOGGER.debug(
                "%s",
                VersionDetectionFailed(f"version check exited with code {result.returncode}"),
            )
            return None
        version = parse_tool_version(result.stdout)
        if version is None:
            LOGGER.debug("%s", VersionDetectionFailed(f"unrecognised version output: {result.stdout!r}"))
        return version


__all__ = [
    "RANGE_JSON_MIN_PATCH",
    "ToolVersion",
    "VersionNegotiator",
    "negotiate_format",
    "parse_tool_version",
]
