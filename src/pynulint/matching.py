# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Link host diagnostics back to the stored records that carry their fixes.

The host hands back diagnostics it previously received, possibly as fresh
objects, so matching never relies on identity. A record matches when its
code and its exact range agree with the host diagnostic and its range
intersects the selection the host asks about.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from .documents import TextDocument
from .models import DiagnosticRecord, LintRecord, Range, TextEdit, Violation


class HostDiagnostic(Protocol):
    """Minimal view of a host diagnostic used for matching."""

    @property
    def code(self) -> str | None: ...

    @property
    def range(self) -> Range: ...


def ranges_equal(left: Range, right: Range) -> bool:
    """Return ``True`` when both endpoints agree in line and character."""

    return left.start.key == right.start.key and left.end.key == right.end.key


def find_matching_record(
    diagnostic: HostDiagnostic,
    selection: Range,
    candidates: Iterable[LintRecord],
) -> LintRecord | None:
    """Return the first record in *candidates* that produced *diagnostic*.

    Same-code records at different locations are kept apart by the exact
    range check; among identical records the first in document order wins.
    """

    for record in candidates:
        if record.code != diagnostic.code:
            continue
        span = record.range
        if not ranges_equal(span, diagnostic.range):
            continue
        if span.intersects(selection):
            return record
    return None


def find_fix(
    diagnostic: HostDiagnostic,
    selection: Range,
    candidates: Iterable[LintRecord],
) -> LintRecord | None:
    """Return the matching record only when it carries a fix or code action."""

    record = find_matching_record(diagnostic, selection, candidates)
    if record is None or not record.has_fix:
        return None
    return record


def fix_title(record: LintRecord) -> str:
    """Return the label the host shows for the quick fix of *record*."""

    if isinstance(record, Violation):
        description = record.fix.description if record.fix is not None else record.rule_id
        return f"Fix: {description}"
    if record.code_action is not None:
        return record.code_action.title
    return f"Fix: {record.code}"


def materialize_edits(record: LintRecord, document: TextDocument) -> tuple[TextEdit, ...]:
    """Turn the fix payload of *record* into edits against *document*.

    Legacy replacements are offsets into the text the tool read; they are
    mapped through the document's current buffer. Range code actions already
    carry positions.
    """

    if isinstance(record, Violation):
        if record.fix is None:
            return ()
        return tuple(
            TextEdit(
                range=Range(
                    start=document.position_at(replacement.offset_start),
                    end=document.position_at(replacement.offset_end),
                ),
                new_text=replacement.new_text,
            )
            for replacement in record.fix.replacements
        )
    return _range_edits(record)


def _range_edits(record: DiagnosticRecord) -> tuple[TextEdit, ...]:
    if record.code_action is None:
        return ()
    return tuple(TextEdit(range=edit.range, new_text=edit.replacement_text) for edit in record.code_action.edits)


__all__ = [
    "HostDiagnostic",
    "find_fix",
    "find_matching_record",
    "fix_title",
    "materialize_edits",
    "ranges_equal",
]
