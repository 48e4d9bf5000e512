# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Group parsed lint output by file and convert it into host diagnostics."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .models import (
    Diagnostic,
    DiagnosticRecord,
    LegacyLintResult,
    LintRecord,
    LintResult,
    Location,
    RangeLintResult,
    RelatedInformation,
    Violation,
)
from .paths import canonical_path, resolve_reported_path
from .severity import severity_from_code, severity_from_label

FileRecords = dict[Path, tuple[LintRecord, ...]]


def _group_legacy(
    result: LegacyLintResult,
    target: Path | None,
    workspace_root: Path | None,
    fallback_dir: Path | None,
) -> FileRecords:
    grouped: dict[Path, list[LintRecord]] = {}
    for violation in result.violations:
        path = resolve_reported_path(violation.file, workspace_root, fallback_dir=fallback_dir)
        if target is not None and path != target:
            continue
        grouped.setdefault(path, []).append(violation)
    return {path: tuple(records) for path, records in grouped.items()}


def _group_range(
    result: RangeLintResult,
    target: Path | None,
    workspace_root: Path | None,
    fallback_dir: Path | None,
) -> FileRecords:
    grouped: dict[Path, list[LintRecord]] = {}
    # Every entry is inspected; map order says nothing about which file is ours.
    for reported, records in result.diagnostics.items():
        path = resolve_reported_path(reported, workspace_root, fallback_dir=fallback_dir)
        if target is not None and path != target:
            continue
        grouped.setdefault(path, []).extend(records)
    return {path: tuple(records) for path, records in grouped.items()}


def group_records(
    result: LintResult,
    *,
    target: Path | None = None,
    workspace_root: Path | None = None,
    fallback_dir: Path | None = None,
) -> FileRecords:
    """Return the records of *result* keyed by canonical file path.

    Args:
        result: Parsed output of one ``nu-lint`` invocation.
        target: When given, keep only records for this file. The target is
            always present in the mapping, with an empty tuple when clean, so
            callers replace stale diagnostics.
        workspace_root: Directory relative reported paths are joined with.
        fallback_dir: Directory used instead when no workspace root exists.

    Returns:
        FileRecords: Records per canonical path, in reported order.
    """

    canonical_target = canonical_path(target) if target is not None else None
    if isinstance(result, RangeLintResult):
        grouped = _group_range(result, canonical_target, workspace_root, fallback_dir)
    else:
        grouped = _group_legacy(result, canonical_target, workspace_root, fallback_dir)
    if canonical_target is not None:
        grouped.setdefault(canonical_target, ())
    return grouped


def legacy_to_diagnostic(violation: Violation, file_path: Path) -> Diagnostic:
    """Convert a legacy violation reported for *file_path*."""

    span = violation.range
    related: tuple[RelatedInformation, ...] = ()
    if violation.suggestion is not None:
        related = (
            RelatedInformation(
                location=Location(uri=file_path.as_uri(), range=span),
                message=violation.suggestion,
            ),
        )
    return Diagnostic(
        range=span,
        severity=severity_from_label(violation.severity),
        message=f"{violation.message} ({violation.rule_id})",
        code=violation.rule_id,
        related_information=related,
    )


def record_to_diagnostic(
    record: DiagnosticRecord,
    *,
    workspace_root: Path | None = None,
    fallback_dir: Path | None = None,
) -> Diagnostic:
    """Convert a range-schema record, resolving related-information paths."""

    related = tuple(
        RelatedInformation(
            location=Location(
                uri=resolve_reported_path(info.location.uri, workspace_root, fallback_dir=fallback_dir).as_uri(),
                range=info.location.range,
            ),
            message=info.message,
        )
        for info in record.related_information or ()
    )
    return Diagnostic(
        range=record.range,
        severity=severity_from_code(record.severity),
        message=record.message,
        code=record.code,
        related_information=related,
    )


def to_diagnostics(
    records: Sequence[LintRecord],
    file_path: Path,
    *,
    workspace_root: Path | None = None,
) -> list[Diagnostic]:
    """Convert stored *records* for *file_path* into host diagnostics."""

    diagnostics: list[Diagnostic] = []
    for record in records:
        if isinstance(record, Violation):
            diagnostics.append(legacy_to_diagnostic(record, file_path))
        else:
            diagnostics.append(
                record_to_diagnostic(record, workspace_root=workspace_root, fallback_dir=file_path.parent),
            )
    return diagnostics


__all__ = [
    "FileRecords",
    "group_records",
    "legacy_to_diagnostic",
    "record_to_diagnostic",
    "to_diagnostics",
]
