# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Settings model and loaders for pynulint.

Settings are layered, later sources overriding earlier ones:

1. built-in defaults,
2. ``[tool.pynulint]`` in ``pyproject.toml``,
3. ``.pynulint.toml`` at the workspace root,
4. ``PYNULINT_*`` environment variables.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import SettingsError

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "pynulint"
SETTINGS_FILENAME: Final[str] = ".pynulint.toml"
ENV_PREFIX: Final[str] = "PYNULINT_"

NUSHELL_LANGUAGE_IDS: Final[frozenset[str]] = frozenset({"nu", "nushell"})
NUSHELL_SUFFIX: Final[str] = ".nu"


class LinterSettings(BaseModel):
    """User-facing knobs controlling when and how ``nu-lint`` runs."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enable: bool = True
    executable_path: str = "nu-lint"
    config_path: str = ""
    lint_on_save: bool = True
    lint_on_open: bool = True
    lint_on_type: bool = False
    fix_on_save: bool = False
    debounce_seconds: float = Field(default=0.5, ge=0)
    timeout_seconds: float | None = Field(default=30.0, gt=0)
    exclude_dirs: tuple[str, ...] = ("node_modules", ".git")


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise SettingsError(f"Unable to read settings from {path}: {exc}") from exc
    return data


def _pyproject_section(root: Path) -> dict[str, Any]:
    data = _load_toml(root / PYPROJECT_FILENAME)
    tool_section = data.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if not isinstance(section, Mapping):
        return {}
    return dict(section)


def _normalise_keys(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key).replace("-", "_"): value for key, value in payload.items()}


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field_name in LinterSettings.model_fields:
        raw = env.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is None:
            continue
        if field_name == "timeout_seconds" and raw.strip().lower() in {"", "none", "0"}:
            overrides[field_name] = None
        elif field_name == "exclude_dirs":
            overrides[field_name] = tuple(part.strip() for part in raw.split(",") if part.strip())
        else:
            overrides[field_name] = raw
    return overrides


def load_settings(root: Path | None = None, *, env: Mapping[str, str] | None = None) -> LinterSettings:
    """Return settings for the workspace at *root*.

    Args:
        root: Workspace root searched for settings files; ``None`` skips files.
        env: Environment mapping consulted for overrides, defaults to ``os.environ``.

    Returns:
        LinterSettings: Validated settings.

    Raises:
        SettingsError: If a settings file is unreadable or a value is invalid.
    """

    merged: dict[str, Any] = {}
    if root is not None:
        merged.update(_normalise_keys(_pyproject_section(root)))
        merged.update(_normalise_keys(_load_toml(root / SETTINGS_FILENAME)))
    merged.update(_env_overrides(os.environ if env is None else env))
    try:
        return LinterSettings.model_validate(merged)
    except ValidationError as exc:
        raise SettingsError(f"Invalid pynulint settings: {exc}") from exc


def is_nushell_language(language_id: str) -> bool:
    """Return ``True`` for host language identifiers denoting Nushell."""

    return language_id in NUSHELL_LANGUAGE_IDS


__all__ = [
    "LinterSettings",
    "NUSHELL_LANGUAGE_IDS",
    "NUSHELL_SUFFIX",
    "SETTINGS_FILENAME",
    "is_nushell_language",
    "load_settings",
]
