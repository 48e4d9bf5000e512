# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the pynulint package.

Two wire schemas are modelled here: the legacy ``json`` violation list and
the range-based ``vscode-json`` diagnostic map. Both are parsed into frozen
models and wrapped in a :data:`LintResult` union discriminated by ``format``.
Host-facing types (:class:`Diagnostic`, :class:`TextEdit`, :class:`FixAction`)
are schema independent.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .severity import Severity


class OutputFormat(StrEnum):
    """Wire formats ``nu-lint`` can emit, valued by their ``-f`` argument."""

    LEGACY_JSON = "json"
    RANGE_JSON = "vscode-json"


class Position(BaseModel):
    """Zero-based line/character position in a text document."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    character: int = Field(ge=0)

    @property
    def key(self) -> tuple[int, int]:
        """Return a tuple usable for lexicographic comparisons."""
        return (self.line, self.character)


class Range(BaseModel):
    """Span between two :class:`Position` values, end exclusive for text."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @model_validator(mode="after")
    def _check_order(self) -> Range:
        if self.start.key > self.end.key:
            raise ValueError(f"range start {self.start.key} is after end {self.end.key}")
        return self

    @classmethod
    def from_coords(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> Range:
        """Build a range from four zero-based coordinates."""
        return cls(
            start=Position(line=start_line, character=start_char),
            end=Position(line=end_line, character=end_char),
        )

    def intersects(self, other: Range) -> bool:
        """Return ``True`` when the two ranges share at least one position.

        Touching ranges intersect in an empty range, which still counts: a
        cursor placed at either edge of a diagnostic selects it.
        """
        start = max(self.start.key, other.start.key)
        end = min(self.end.key, other.end.key)
        return start <= end


class Summary(BaseModel):
    """Advisory counters reported alongside every lint run."""

    model_config = ConfigDict(frozen=True)

    errors: int = 0
    warnings: int = 0
    info: int = 0
    files_checked: int = 0


# Legacy ``json`` schema -----------------------------------------------------


class Replacement(BaseModel):
    """Offset-based text replacement carried by a legacy fix."""

    model_config = ConfigDict(frozen=True)

    offset_start: int = Field(ge=0)
    offset_end: int = Field(ge=0)
    new_text: str

    @model_validator(mode="after")
    def _check_offsets(self) -> Replacement:
        if self.offset_start > self.offset_end:
            raise ValueError("replacement offset_start must not exceed offset_end")
        return self


class Fix(BaseModel):
    """Tool-computed fix attached to a legacy violation."""

    model_config = ConfigDict(frozen=True)

    description: str
    replacements: tuple[Replacement, ...] = ()


class Violation(BaseModel):
    """One entry of the legacy ``violations`` list."""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    severity: str = "warning"
    message: str
    file: str
    line_start: int = Field(ge=1)
    line_end: int = Field(ge=1)
    column_start: int = Field(ge=1)
    column_end: int = Field(ge=1)
    # Older releases omit offsets entirely.
    offset_start: int = Field(default=0, ge=0)
    offset_end: int = Field(default=0, ge=0)
    suggestion: str | None = None
    fix: Fix | None = None

    @model_validator(mode="after")
    def _check_span(self) -> Violation:
        if self.line_start > self.line_end:
            raise ValueError("violation line_start must not exceed line_end")
        if self.line_start == self.line_end and self.column_start > self.column_end:
            raise ValueError("violation column_start must not exceed column_end on a single line")
        if self.offset_start > self.offset_end:
            raise ValueError("violation offset_start must not exceed offset_end")
        return self

    @property
    def code(self) -> str:
        """Expose ``rule_id`` under the name shared with range diagnostics."""
        return self.rule_id

    @property
    def range(self) -> Range:
        """Return the zero-based host range for the 1-based reported span."""
        return Range.from_coords(
            self.line_start - 1,
            self.column_start - 1,
            self.line_end - 1,
            self.column_end - 1,
        )

    @property
    def has_fix(self) -> bool:
        """Return ``True`` when a fix with at least one replacement exists."""
        return self.fix is not None and bool(self.fix.replacements)


class LegacyLintResult(BaseModel):
    """Parsed ``-f json`` payload."""

    model_config = ConfigDict(frozen=True)

    format: Literal[OutputFormat.LEGACY_JSON] = OutputFormat.LEGACY_JSON
    violations: tuple[Violation, ...] = ()
    summary: Summary = Field(default_factory=Summary)


# Range ``vscode-json`` schema ---------------------------------------------


class Location(BaseModel):
    """Location referenced by related diagnostic information."""

    model_config = ConfigDict(frozen=True)

    uri: str
    range: Range


class RelatedInformation(BaseModel):
    """Secondary message pointing at another location."""

    model_config = ConfigDict(frozen=True)

    location: Location
    message: str


class RangeEdit(BaseModel):
    """Ready-made edit carried by a range-schema code action."""

    model_config = ConfigDict(frozen=True)

    range: Range
    replacement_text: str


class CodeAction(BaseModel):
    """Quick fix payload attached to a range diagnostic."""

    model_config = ConfigDict(frozen=True)

    title: str
    edits: tuple[RangeEdit, ...] = ()


class DiagnosticRecord(BaseModel):
    """One entry of the range-schema ``diagnostics`` map."""

    model_config = ConfigDict(frozen=True)

    range: Range
    severity: int = 2
    code: str
    source: str = "nu-lint"
    message: str
    related_information: tuple[RelatedInformation, ...] | None = None
    code_action: CodeAction | None = None

    @property
    def has_fix(self) -> bool:
        """Return ``True`` when a code action with at least one edit exists."""
        return self.code_action is not None and bool(self.code_action.edits)


class RangeLintResult(BaseModel):
    """Parsed ``-f vscode-json`` payload."""

    model_config = ConfigDict(frozen=True)

    format: Literal[OutputFormat.RANGE_JSON] = OutputFormat.RANGE_JSON
    diagnostics: dict[str, tuple[DiagnosticRecord, ...]] = Field(default_factory=dict)
    summary: Summary = Field(default_factory=Summary)


LintResult = Annotated[LegacyLintResult | RangeLintResult, Field(discriminator="format")]
LintRecord = Violation | DiagnosticRecord


# Host-facing types -----------------------------------------------------------


class Diagnostic(BaseModel):
    """Schema-independent diagnostic handed to the host for rendering."""

    model_config = ConfigDict(frozen=True)

    range: Range
    severity: Severity
    message: str
    code: str
    source: str = "nu-lint"
    related_information: tuple[RelatedInformation, ...] = ()


class TextEdit(BaseModel):
    """Replacement of a document range with new text."""

    model_config = ConfigDict(frozen=True)

    range: Range
    new_text: str


class FixAction(BaseModel):
    """Quick fix offered to the host for a single diagnostic."""

    model_config = ConfigDict(frozen=True)

    title: str
    uri: str
    edits: tuple[TextEdit, ...]
    diagnostic: Diagnostic


__all__ = [
    "CodeAction",
    "Diagnostic",
    "DiagnosticRecord",
    "Fix",
    "FixAction",
    "LegacyLintResult",
    "LintRecord",
    "LintResult",
    "Location",
    "OutputFormat",
    "Position",
    "Range",
    "RangeEdit",
    "RangeLintResult",
    "RelatedInformation",
    "Replacement",
    "Summary",
    "TextEdit",
    "Violation",
]
