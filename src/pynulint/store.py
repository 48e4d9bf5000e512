# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-document cache of the most recent lint records."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path

from .models import LintRecord
from .paths import canonical_path


class DiagnosticStore:
    """Hold the latest records per canonical file path.

    Each run replaces a file's slice wholesale; nothing is merged across
    runs, so diagnostics fixed since the previous run disappear.
    """

    def __init__(self) -> None:
        self._records: dict[Path, tuple[LintRecord, ...]] = {}

    def replace(self, path: Path | str, records: Iterable[LintRecord]) -> None:
        """Store *records* for *path*, discarding whatever was there."""
        self._records[canonical_path(path)] = tuple(records)

    def lookup(self, path: Path | str) -> tuple[LintRecord, ...]:
        """Return the records for *path*, empty when the file was never linted."""
        return self._records.get(canonical_path(path), ())

    def discard(self, path: Path | str) -> None:
        """Forget *path* entirely."""
        self._records.pop(canonical_path(path), None)

    def clear(self) -> None:
        """Drop the records of every file."""
        self._records.clear()

    def paths(self) -> tuple[Path, ...]:
        """Return the canonical paths that currently hold records."""
        return tuple(self._records)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return canonical_path(path) in self._records

    def __iter__(self) -> Iterator[Path]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["DiagnosticStore"]
