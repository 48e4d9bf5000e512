# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run the ``nu-lint`` Nushell linter and reconcile its diagnostics for an editor host."""

from __future__ import annotations

from importlib import metadata

from .config import LinterSettings, load_settings
from .models import Diagnostic, FixAction, OutputFormat, TextEdit
from .orchestrator import LintHost, LintOrchestrator, LintOutcome

__all__ = [
    "Diagnostic",
    "FixAction",
    "LintHost",
    "LintOrchestrator",
    "LintOutcome",
    "LinterSettings",
    "OutputFormat",
    "TextEdit",
    "__version__",
    "load_settings",
]

try:
    __version__ = metadata.version("pynulint")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
