# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem discovery of Nushell scripts for workspace sweeps."""

from __future__ import annotations

import os
from collections.abc import Collection, Iterator
from pathlib import Path

from .config import NUSHELL_SUFFIX
from .paths import canonical_path


def iter_nushell_files(
    root: Path,
    *,
    exclude_dirs: Collection[str] = ("node_modules", ".git"),
    follow_symlinks: bool = False,
) -> Iterator[Path]:
    """Yield canonical paths of ``*.nu`` files below *root*.

    Directories whose name appears in *exclude_dirs* are pruned. Files are
    yielded in a stable, sorted order.

    Args:
        root: Workspace root to walk.
        exclude_dirs: Directory names never descended into.
        follow_symlinks: When ``True`` walk directories pointed to by symlinks.

    Yields:
        Path: Canonical path of each discovered script.
    """

    excluded = frozenset(exclude_dirs)
    for dirpath, dirnames, filenames in os.walk(root, followlinks=follow_symlinks):
        dirnames[:] = sorted(name for name in dirnames if name not in excluded)
        for filename in sorted(filenames):
            if filename.endswith(NUSHELL_SUFFIX):
                yield canonical_path(Path(dirpath) / filename)


def discover_nushell_files(root: Path, *, exclude_dirs: Collection[str] = ("node_modules", ".git")) -> list[Path]:
    """Return every ``*.nu`` file below *root* as a list."""

    return list(iter_nushell_files(root, exclude_dirs=exclude_dirs))


__all__ = ["discover_nushell_files", "iter_nushell_files"]
