# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""High level orchestration of ``nu-lint`` runs for a host editor.

One :class:`LintOrchestrator` owns all session state: the negotiated output
format, the diagnostic store and the set of files currently being linted.
Each file is either idle or linting; a request for a file that is already
linting is dropped rather than queued, so at most one ``nu-lint`` process per
file is alive at any time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Protocol

from .config import LinterSettings, is_nushell_language
from .diagnostics import FileRecords, group_records, to_diagnostics
from .discovery import discover_nushell_files
from .documents import TextDocument
from .errors import NuLintError, OutputParseFailed, ToolNotFound
from .execution import build_fix_command, build_lint_command, build_stdin_fix_command
from .matching import find_fix, fix_title, materialize_edits
from .models import Diagnostic, FixAction, OutputFormat, Range, TextEdit
from .parsers import parse_output
from .paths import canonical_path, has_vcs_segment
from .process_utils import ToolRunner, run_tool
from .store import DiagnosticStore
from .versioning import VersionNegotiator

LOGGER = logging.getLogger(__name__)

DiscoverFn = Callable[[Path], Sequence[Path]]


class LintHost(Protocol):
    """Services the host editor provides to the orchestrator."""

    def publish_diagnostics(self, path: Path, diagnostics: Sequence[Diagnostic]) -> None:
        """Replace the diagnostics shown for *path*."""

    def clear_diagnostics(self) -> None:
        """Remove every diagnostic published so far."""

    def show_error(self, message: str) -> None:
        """Show a dismissable error notification."""

    def show_info(self, message: str) -> None:
        """Show an informational notification."""

    def apply_edits(self, document: TextDocument, edits: Sequence[TextEdit]) -> bool:
        """Apply *edits* to *document* atomically, returning ``True`` on success."""


class LintOutcome(StrEnum):
    """Result of a single lint request."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    IN_FLIGHT = "in_flight"
    FAILED = "failed"


@dataclass(slots=True)
class SweepReport:
    """Aggregate result of a workspace sweep."""

    checked: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def message(self) -> str:
        """Return the completion message shown to the user."""
        text = f"Workspace linting complete. Checked {len(self.checked)} files."
        if self.failed:
            text += f" {len(self.failed)} failed; see the log for details."
        return text


class LintOrchestrator:
    """Coordinate process execution, parsing and the diagnostic store."""

    def __init__(
        self,
        host: LintHost,
        settings: LinterSettings | None = None,
        *,
        workspace_root: Path | None = None,
        runner: ToolRunner | None = None,
        output_format: OutputFormat | None = None,
        discover: DiscoverFn | None = None,
    ) -> None:
        """Create an orchestrator bound to *host*.

        Args:
            host: Editor services used to publish diagnostics and notify the user.
            settings: Linter settings; defaults apply when omitted.
            workspace_root: Root of the open workspace, ``None`` for loose files.
            runner: Callable spawning ``nu-lint``, :func:`run_tool` by default.
            output_format: Pin the output format instead of probing the tool version.
            discover: Callable listing the scripts a workspace sweep visits.
        """

        self._host = host
        self._settings = settings or LinterSettings()
        self._workspace_root = canonical_path(workspace_root) if workspace_root is not None else None
        self._runner: ToolRunner = runner or run_tool
        self._pinned_format = output_format
        self._negotiator = VersionNegotiator(
            self._settings.executable_path,
            runner=self._runner,
            timeout=self._settings.timeout_seconds,
        )
        self._discover = discover or self._discover_default
        self._store = DiagnosticStore()
        self._in_flight: set[Path] = set()
        self._disposed = False

    @property
    def settings(self) -> LinterSettings:
        return self._settings

    @property
    def workspace_root(self) -> Path | None:
        return self._workspace_root

    @property
    def store(self) -> DiagnosticStore:
        return self._store

    def is_linting(self, path: Path | str) -> bool:
        """Return ``True`` while a run for *path* is in flight."""
        return canonical_path(path) in self._in_flight

    async def output_format(self) -> OutputFormat:
        """Return the negotiated output format, probing the tool on first use."""
        if self._pinned_format is not None:
            return self._pinned_format
        return await self._negotiator.detect_format()

    # Linting ---------------------------------------------------------------

    async def lint_document(self, document: TextDocument) -> LintOutcome:
        """Lint the file backing *document* and publish its diagnostics."""

        if not document.uri.startswith("file:"):
            LOGGER.debug("Skipping non-file URI: %s", document.uri)
            return LintOutcome.SKIPPED
        return await self.lint_path(document.path)

    async def lint_path(self, path: Path | str, *, notify: bool = True) -> LintOutcome:
        """Lint *path*, dropping the request when a run for it is in flight.

        On failure the previously stored diagnostics stay in place and the
        error is logged and, when *notify* is set, shown to the user.
        """

        file_path = canonical_path(path)
        if self._disposed or not self._settings.enable:
            LOGGER.debug("nu-lint is disabled; skipping %s", file_path)
            return LintOutcome.SKIPPED
        if has_vcs_segment(file_path):
            LOGGER.debug("Skipping file with .git in path: %s", file_path)
            return LintOutcome.SKIPPED
        if file_path in self._in_flight:
            LOGGER.debug("Linting already in progress for: %s", file_path)
            return LintOutcome.IN_FLIGHT

        self._in_flight.add(file_path)
        LOGGER.info("Starting nu-lint for: %s", file_path)
        try:
            grouped = await self._run_lint(file_path)
        except NuLintError as exc:
            self._report_failure(file_path, exc, notify=notify)
            return LintOutcome.FAILED
        finally:
            self._in_flight.discard(file_path)

        if self._disposed:
            LOGGER.debug("Discarding results for %s after dispose", file_path)
            return LintOutcome.SKIPPED
        self._apply(grouped)
        LOGGER.info("Found %d diagnostics in %s", len(grouped.get(file_path, ())), file_path)
        return LintOutcome.COMPLETED

    async def lint_workspace(self) -> SweepReport:
        """Lint every discovered script one after another.

        A failing file never aborts the sweep; the completion message is shown
        regardless of partial failures.
        """

        report = SweepReport()
        if self._disposed or not self._settings.enable:
            return report
        if self._workspace_root is None:
            self._host.show_info("No workspace folder found")
            return report

        files = list(self._discover(self._workspace_root))
        if not files:
            self._host.show_info("No .nu files found in workspace")
            return report

        LOGGER.info("Linting %d files in workspace", len(files))
        for file_path in files:
            outcome = await self.lint_path(file_path, notify=False)
            if outcome is LintOutcome.SKIPPED:
                continue
            report.checked.append(file_path)
            if outcome is LintOutcome.FAILED:
                report.failed.append(file_path)

        self._host.show_info(report.message)
        return report

    async def _run_lint(self, file_path: Path) -> FileRecords:
        output_format = await self.output_format()
        command = build_lint_command(
            file_path,
            output_format,
            self._settings,
            workspace_root=self._workspace_root,
        )
        LOGGER.debug("Target path: %s", command.target)
        result = await self._runner(
            command.executable,
            command.args,
            cwd=command.cwd,
            timeout=self._settings.timeout_seconds,
        )
        parsed = parse_output(result.stdout, output_format)
        return group_records(
            parsed,
            target=file_path,
            workspace_root=self._workspace_root,
            fallback_dir=file_path.parent,
        )

    def _apply(self, grouped: FileRecords) -> None:
        for file_path, records in grouped.items():
            self._store.replace(file_path, records)
            self._host.publish_diagnostics(
                file_path,
                to_diagnostics(records, file_path, workspace_root=self._workspace_root),
            )

    def _report_failure(self, file_path: Path, exc: NuLintError, *, notify: bool) -> None:
        kind = type(exc).__name__
        LOGGER.error("nu-lint failed for %s [%s]: %s", file_path, kind, exc)
        if isinstance(exc, OutputParseFailed):
            LOGGER.error(
                "The installed nu-lint may not match the %s output format; check its version",
                exc.output_format,
            )
        if not notify:
            return
        if isinstance(exc, ToolNotFound):
            self._host.show_error(
                f"nu-lint executable '{exc.executable}' could not be started. "
                "Install nu-lint or set executable_path.",
            )
        else:
            self._host.show_error(f"Nu-Lint error: {exc}")

    def _discover_default(self, root: Path) -> Sequence[Path]:
        return discover_nushell_files(root, exclude_dirs=self._settings.exclude_dirs)

    # Quick fixes -------------------------------------------------------------

    def lookup_fix(self, document: TextDocument, diagnostic: Diagnostic, selection: Range) -> tuple[TextEdit, ...] | None:
        """Return the edits fixing *diagnostic*, or ``None`` when it has no fix."""

        record = find_fix(diagnostic, selection, self._store.lookup(document.path))
        if record is None:
            return None
        return materialize_edits(record, document)

    def provide_fixes(
        self,
        document: TextDocument,
        diagnostics: Iterable[Diagnostic],
        selection: Range,
    ) -> list[FixAction]:
        """Return the quick fixes available for *diagnostics* near *selection*."""

        records = self._store.lookup(document.path)
        actions: list[FixAction] = []
        for diagnostic in diagnostics:
            if diagnostic.source != "nu-lint":
                continue
            record = find_fix(diagnostic, selection, records)
            if record is None:
                continue
            actions.append(
                FixAction(
                    title=fix_title(record),
                    uri=document.uri,
                    edits=materialize_edits(record, document),
                    diagnostic=diagnostic,
                ),
            )
        return actions

    def apply_fix(self, document: TextDocument, action: FixAction) -> bool:
        """Ask the host to apply *action* to *document*."""

        return self._host.apply_edits(document, action.edits)

    async def fix_file(self, path: Path | str) -> bool:
        """Run ``nu-lint --fix`` on *path* in place; ``False`` on failure.

        The fix is refused while a lint of the same file is in flight.
        """

        file_path = canonical_path(path)
        if file_path in self._in_flight:
            LOGGER.debug("Linting already in progress for: %s", file_path)
            return False
        command = build_fix_command(file_path, self._settings, workspace_root=self._workspace_root)
        self._in_flight.add(file_path)
        try:
            await self._runner(
                command.executable,
                command.args,
                cwd=command.cwd,
                timeout=self._settings.timeout_seconds,
            )
        except NuLintError as exc:
            self._report_failure(file_path, exc, notify=True)
            return False
        finally:
            self._in_flight.discard(file_path)
        return True

    async def fix_text(self, text: str) -> str:
        """Return *text* as fixed by ``nu-lint --fix`` reading from stdin.

        Raises:
            NuLintError: If the tool cannot be run or fails.
        """

        command = build_stdin_fix_command(self._settings, cwd=self._workspace_root)
        result = await self._runner(
            command.executable,
            command.args,
            cwd=command.cwd,
            input_text=text,
            timeout=self._settings.timeout_seconds,
        )
        return result.stdout

    async def fix_document_edits(self, document: TextDocument) -> tuple[TextEdit, ...]:
        """Return a whole-document edit applying every available fix, if any."""

        original = document.text
        fixed = await self.fix_text(original)
        if not fixed or fixed == original:
            return ()
        whole = Range(start=document.position_at(0), end=document.position_at(len(original)))
        return (TextEdit(range=whole, new_text=fixed),)

    # Host events -------------------------------------------------------------

    async def on_open(self, document: TextDocument) -> LintOutcome:
        """Handle a document being opened in the host."""

        if not self._settings.lint_on_open or not is_nushell_language(document.language_id):
            return LintOutcome.SKIPPED
        LOGGER.info("Linting opened Nushell file: %s", document.path)
        return await self.lint_document(document)

    async def on_save(self, document: TextDocument) -> LintOutcome:
        """Handle a document being saved, fixing it first when configured."""

        if not is_nushell_language(document.language_id):
            return LintOutcome.SKIPPED
        if self._settings.fix_on_save and self._settings.enable and document.uri.startswith("file:"):
            await self.fix_file(document.path)
        if not self._settings.lint_on_save:
            return LintOutcome.SKIPPED
        LOGGER.info("Linting saved Nushell file: %s", document.path)
        return await self.lint_document(document)

    async def on_change(self, document: TextDocument) -> LintOutcome:
        """Handle an edit: wait for the debounce delay, then request a lint.

        The delayed request does not cancel a run already in flight; it is
        dropped by the in-flight guard instead.
        """

        if not self._settings.lint_on_type or not is_nushell_language(document.language_id):
            return LintOutcome.SKIPPED
        LOGGER.debug("Document changed: %s", document.path)
        await asyncio.sleep(self._settings.debounce_seconds)
        return await self.lint_document(document)

    def dispose(self) -> None:
        """Drop all stored diagnostics and stop accepting lint requests."""

        self._disposed = True
        self._store.clear()
        self._host.clear_diagnostics()


__all__ = ["LintHost", "LintOrchestrator", "LintOutcome", "SweepReport"]
