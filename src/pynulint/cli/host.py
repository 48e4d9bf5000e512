# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal implementation of the host services used by the orchestrator."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.text import Text

from ..documents import TextBuffer, TextDocument, apply_text_edits
from ..errors import EditConflictError
from ..logging import fail, info
from ..models import Diagnostic, TextEdit
from ..severity import Severity, severity_label

_SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFORMATION: "cyan",
    Severity.HINT: "dim",
}


@dataclass(slots=True)
class ConsoleHost:
    """Render diagnostics and notifications on a Rich console."""

    console: Console
    use_emoji: bool = True
    root: Path | None = None
    published: dict[Path, list[Diagnostic]] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    def publish_diagnostics(self, path: Path, diagnostics: Sequence[Diagnostic]) -> None:
        self.published[path] = list(diagnostics)
        label = self._display_path(path)
        for diagnostic in diagnostics:
            start = diagnostic.range.start
            line = Text()
            line.append(f"{label}:{start.line + 1}:{start.character + 1}", style="bold")
            line.append(" ")
            line.append(severity_label(diagnostic.severity), style=_SEVERITY_STYLES.get(diagnostic.severity, ""))
            line.append(f" {diagnostic.message}")
            self.console.print(line)
            for related in diagnostic.related_information:
                self.console.print(Text(f"    hint: {related.message}", style="dim"))

    def clear_diagnostics(self) -> None:
        self.published.clear()

    def show_error(self, message: str) -> None:
        self.errors.append(message)
        fail(message, use_emoji=self.use_emoji)

    def show_info(self, message: str) -> None:
        info(message, use_emoji=self.use_emoji)

    def apply_edits(self, document: TextDocument, edits: Sequence[TextEdit]) -> bool:
        try:
            new_text = apply_text_edits(document, edits)
        except EditConflictError as exc:
            self.show_error(str(exc))
            return False
        if isinstance(document, TextBuffer):
            document.set_text(new_text)
        return True

    @property
    def diagnostic_count(self) -> int:
        """Return the number of diagnostics currently published."""
        return sum(len(items) for items in self.published.values())

    def _display_path(self, path: Path) -> str:
        if self.root is not None:
            try:
                return path.relative_to(self.root).as_posix()
            except ValueError:
                pass
        return path.as_posix()


__all__ = ["ConsoleHost"]
