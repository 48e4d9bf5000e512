# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""pynulint CLI package exports."""

from __future__ import annotations

from typing import Final

from .app import app, main
from .host import ConsoleHost
from .shared import CLIError

__all__: Final[list[str]] = ["CLIError", "ConsoleHost", "app", "main"]
