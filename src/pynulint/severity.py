# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class Severity(IntEnum):
    """Host severity levels, numbered the way editors number them."""

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


_LEGACY_SEVERITIES: Final[dict[str, Severity]] = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "info": Severity.INFORMATION,
}

# Hints render as information; editors hide bare hints behind a faint underline.
_RANGE_SEVERITIES: Final[dict[int, Severity]] = {
    1: Severity.ERROR,
    2: Severity.WARNING,
    3: Severity.INFORMATION,
    4: Severity.INFORMATION,
}


def severity_from_label(label: str | None, default: Severity = Severity.WARNING) -> Severity:
    """Map a legacy ``error``/``warning``/``info`` label onto :class:`Severity`."""

    if not label:
        return default
    return _LEGACY_SEVERITIES.get(label.lower(), default)


def severity_from_code(code: int | None, default: Severity = Severity.WARNING) -> Severity:
    """Map a range-schema numeric severity onto :class:`Severity`."""

    if code is None:
        return default
    return _RANGE_SEVERITIES.get(code, default)


_SEVERITY_LABELS: Final[dict[Severity, str]] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFORMATION: "info",
    Severity.HINT: "hint",
}


def severity_label(severity: Severity) -> str:
    """Return the lowercase label used when printing *severity*."""

    return _SEVERITY_LABELS.get(severity, "warning")


__all__ = ["Severity", "severity_from_code", "severity_from_label", "severity_label"]
