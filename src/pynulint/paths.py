# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Utilities for normalising paths reported by ``nu-lint``.

Paths in tool output are either absolute or relative to the directory the
tool ran in. Every comparison against a host document goes through
:func:`canonical_path` first; raw path strings are never compared.
"""

from __future__ import annotations

import os
from os import PathLike
from pathlib import Path

_Pathish = str | PathLike[str]


def canonical_path(path: _Pathish) -> Path:
    """Return the absolute, symlink-free variant of *path*.

    Resolution never requires the path to exist.
    """

    candidate = Path(path).expanduser()
    try:
        return candidate.resolve(strict=False)
    except (OSError, RuntimeError):  # RuntimeError covers symlink loops
        return Path(os.path.normpath(candidate.absolute()))


def resolve_reported_path(
    reported: _Pathish,
    workspace_root: _Pathish | None = None,
    *,
    fallback_dir: _Pathish | None = None,
) -> Path:
    """Return the canonical absolute path for a tool-reported *reported* path.

    Absolute paths are taken as-is. Relative paths are joined with
    *workspace_root*, or with *fallback_dir* (the directory of the file being
    linted) when no workspace is open.
    """

    raw = Path(reported)
    if raw.is_absolute():
        return canonical_path(raw)
    base = workspace_root if workspace_root is not None else fallback_dir
    if base is None:
        return canonical_path(raw)
    return canonical_path(Path(base) / raw)


def same_file(left: _Pathish, right: _Pathish) -> bool:
    """Return ``True`` when both paths canonicalise to the same location."""

    return canonical_path(left) == canonical_path(right)


def lint_invocation_paths(file_path: _Pathish, workspace_root: _Pathish | None) -> tuple[Path, str]:
    """Return the ``(cwd, target)`` pair used to lint *file_path*.

    With a workspace root the tool runs from the root and receives the path
    relative to it. Without one it runs from the file's own directory and
    receives the bare file name.
    """

    target = canonical_path(file_path)
    if workspace_root is not None:
        root = canonical_path(workspace_root)
        try:
            return root, target.relative_to(root).as_posix()
        except ValueError:
            return root, os.path.relpath(target, root)
    return target.parent, target.name


def has_vcs_segment(path: _Pathish) -> bool:
    """Return ``True`` when *path* lives inside a ``.git`` directory."""

    return ".git" in Path(path).parts


__all__ = [
    "canonical_path",
    "has_vcs_segment",
    "lint_invocation_paths",
    "resolve_reported_path",
    "same_file",
]
