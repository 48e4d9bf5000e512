# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing console helpers with optional colour and emoji support."""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import Final, Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

# kind -> (emoji prefix, rich style)
_MESSAGE_STYLES: Final[dict[str, tuple[str, str]]] = {
    "info": ("ℹ️ ", "cyan"),
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "red"),
}


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@lru_cache(maxsize=8)
def get_console(*, color: bool, emoji: bool, stderr: bool = False) -> Console:
    """Return a shared Rich console configured for the presentation flags."""

    enabled = color and detect_tty()
    color_system: Literal["auto"] | None = "auto" if enabled else None
    return Console(
        color_system=color_system,
        no_color=not enabled,
        emoji=emoji,
        soft_wrap=True,
        stderr=stderr,
        highlight=False,
    )


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _emit(kind: str, msg: str, *, use_emoji: bool, use_color: bool | None) -> None:
    prefix, style = _MESSAGE_STYLES[kind]
    colored = detect_tty() if use_color is None else use_color
    line = Text(f"{emoji(prefix, use_emoji)}{msg}", style=style if colored else "")
    get_console(color=colored, emoji=use_emoji).print(line)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message.

    Args:
        msg: Text to print.
        use_emoji: Prefix the message with its emoji marker.
        use_color: Force colour on or off; ``None`` follows the terminal.
    """

    _emit("info", msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _emit("ok", msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _emit("warn", msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message."""

    _emit("fail", msg, use_emoji=use_emoji, use_color=use_color)


def configure_logging(*, debug: bool = False) -> None:
    """Route the ``pynulint`` logger hierarchy to stderr through Rich.

    Args:
        debug: Emit debug records (commands, working directories, raw output).
    """

    logger = logging.getLogger("pynulint")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(console=get_console(color=True, emoji=False, stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


__all__ = ["configure_logging", "detect_tty", "emoji", "fail", "get_console", "info", "ok", "warn"]
