# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Host document abstraction and in-memory text buffers.

Offsets are indexes into the document's current text, not into the file on
disk: the editor buffer may hold unsaved changes.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from .errors import EditConflictError
from .models import Position, Range, TextEdit
from .paths import canonical_path


@runtime_checkable
class TextDocument(Protocol):
    """Document surface pynulint needs from the host editor."""

    @property
    def uri(self) -> str:
        """Return the document URI (``file://`` for on-disk documents)."""

    @property
    def path(self) -> Path:
        """Return the filesystem path backing the document."""

    @property
    def language_id(self) -> str:
        """Return the host language identifier, e.g. ``nushell``."""

    @property
    def text(self) -> str:
        """Return the current buffer contents."""

    def position_at(self, offset: int) -> Position:
        """Convert a text offset into a zero-based position."""

    def offset_at(self, position: Position) -> int:
        """Convert a zero-based position into a text offset."""


def _line_starts(text: str) -> list[int]:
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return starts


def _line_content_end(text: str, starts: Sequence[int], line: int) -> int:
    end = starts[line + 1] - 1 if line + 1 < len(starts) else len(text)
    if end > starts[line] and text[end - 1] == "\r":
        end -= 1
    return end


class TextBuffer:
    """Concrete :class:`TextDocument` holding text in memory."""

    def __init__(self, path: Path | str, text: str, *, language_id: str = "nushell", scheme: str = "file") -> None:
        self._path = canonical_path(path)
        self._text = text
        self._language_id = language_id
        self._scheme = scheme
        self._starts = _line_starts(text)

    @property
    def uri(self) -> str:
        """Return a ``file://`` URI, or ``<scheme>:<path>`` for virtual buffers."""

        if self._scheme == "file":
            return self._path.as_uri()
        return f"{self._scheme}:{self._path.as_posix()}"

    @property
    def scheme(self) -> str:
        """Return the URI scheme, ``file`` for on-disk documents."""

        return self._scheme

    @property
    def path(self) -> Path:
        """Return the canonical path."""

        return self._path

    @property
    def language_id(self) -> str:
        """Return the host language identifier."""

        return self._language_id

    @property
    def text(self) -> str:
        """Return the current contents."""

        return self._text

    @property
    def line_count(self) -> int:
        """Return the number of lines, counting a trailing empty line."""

        return len(self._starts)

    def set_text(self, text: str) -> None:
        """Replace the buffer contents."""
        self._text = text
        self._starts = _line_starts(text)

    def position_at(self, offset: int) -> Position:
        """Convert *offset* into a position, clamped to the buffer.

        Offsets falling inside a line break map to the end of that line.
        """

        offset = min(max(offset, 0), len(self._text))
        line = bisect_right(self._starts, offset) - 1
        character = min(offset, _line_content_end(self._text, self._starts, line)) - self._starts[line]
        return Position(line=line, character=character)

    def offset_at(self, position: Position) -> int:
        """Convert *position* into an offset, clamped to the buffer.

        Lines past the end map to the buffer length and characters past the
        end of a line map to that line's content end.
        """

        if position.line >= len(self._starts):
            return len(self._text)
        start = self._starts[position.line]
        end = _line_content_end(self._text, self._starts, position.line)
        return min(start + position.character, end)

    def get_text(self, span: Range | None = None) -> str:
        """Return the whole text, or the text covered by *span*."""
        if span is None:
            return self._text
        return self._text[self.offset_at(span.start) : self.offset_at(span.end)]

    def apply_edits(self, edits: Iterable[TextEdit]) -> None:
        """Apply *edits* atomically; see :func:`apply_text_edits`."""
        self.set_text(apply_text_edits(self, edits))


def apply_text_edits(document: TextDocument, edits: Iterable[TextEdit]) -> str:
    """Return the text of *document* with all *edits* applied.

    All edit ranges refer to the original text. Either every edit applies or
    none does.

    Raises:
        EditConflictError: If two edits overlap.
    """

    spans = sorted(
        ((document.offset_at(edit.range.start), document.offset_at(edit.range.end), edit.new_text) for edit in edits),
        key=lambda item: (item[0], item[1]),
    )
    for (_, prev_end, _), (next_start, _, _) in zip(spans, spans[1:]):
        if next_start < prev_end:
            raise EditConflictError(f"overlapping edits at offsets {next_start} and {prev_end}")

    text = document.text
    pieces: list[str] = []
    cursor = 0
    for start, end, new_text in spans:
        pieces.append(text[cursor:start])
        pieces.append(new_text)
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


__all__ = ["TextBuffer", "TextDocument", "apply_text_edits"]
