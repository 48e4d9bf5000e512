# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the lint orchestrator and its per-file in-flight guard."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest
from fakes import FakeRunner, RecordingHost, legacy_payload, range_payload, range_record, violation

from pynulint.config import LinterSettings
from pynulint.documents import TextBuffer
from pynulint.errors import ToolExecutionFailed, ToolNotFound
from pynulint.models import OutputFormat, Range
from pynulint.orchestrator import LintOrchestrator, LintOutcome

SOURCE = "def testWithIssues [] { }\n"
FIXED = "def test-with-issues [] { }\n"


def _range_stdout() -> str:
    return range_payload(
        {
            "other.nu": [range_record("unrelated", (0, 0, 0, 1))],
            "script.nu": [
                range_record(
                    "kebab_case_commands",
                    (0, 4, 0, 18),
                    message="Command names should be kebab-case",
                    edits=[((0, 4, 0, 18), "test-with-issues")],
                    title="Rename to test-with-issues",
                ),
            ],
        },
    )


def _orchestrator(
    host: RecordingHost,
    runner: FakeRunner,
    settings: LinterSettings,
    root: Path | None,
    **kwargs,
) -> LintOrchestrator:
    return LintOrchestrator(host, settings, workspace_root=root, runner=runner, **kwargs)


def test_duplicate_requests_spawn_a_single_process(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    target = workspace / "script.nu"

    async def scenario() -> tuple[LintOutcome, LintOutcome, bool]:
        runner.gate = asyncio.Event()
        first = asyncio.create_task(orchestrator.lint_path(target))
        for _ in range(5):
            await asyncio.sleep(0)
        busy = orchestrator.is_linting(target)
        second = await orchestrator.lint_path(target)
        runner.gate.set()
        return await first, second, busy

    first, second, busy = asyncio.run(scenario())

    assert busy
    assert (first, second) == (LintOutcome.COMPLETED, LintOutcome.IN_FLIGHT)
    assert len(runner.lint_calls) == 1
    assert not orchestrator.is_linting(target)


def test_range_output_publishes_only_the_target(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    target = workspace / "script.nu"

    outcome = asyncio.run(orchestrator.lint_path(target))

    assert outcome is LintOutcome.COMPLETED
    (call,) = runner.lint_calls
    assert call.args == ("-f", "vscode-json", "script.nu")
    assert call.cwd == workspace
    assert call.timeout == settings.timeout_seconds
    assert list(host.published) == [target]
    (diagnostic,) = host.published[target]
    assert diagnostic.code == "kebab_case_commands"
    assert orchestrator.store.lookup(target)[0].code == "kebab_case_commands"


def test_legacy_output_publishes_zero_based_ranges(
    host: RecordingHost, settings: LinterSettings, workspace: Path
) -> None:
    runner = FakeRunner(version="nu-lint 0.0.12", stdout=legacy_payload(violation()), returncode=1)
    orchestrator = _orchestrator(host, runner, settings, workspace)

    asyncio.run(orchestrator.lint_path(workspace / "script.nu"))

    assert runner.lint_calls[0].args[:2] == ("-f", "json")
    (diagnostic,) = host.published[workspace / "script.nu"]
    assert diagnostic.range == Range.from_coords(0, 4, 0, 19)
    assert diagnostic.message.endswith("(kebab_case_commands)")


def test_pinned_format_skips_the_version_check(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    orchestrator = _orchestrator(host, runner, settings, workspace, output_format=OutputFormat.LEGACY_JSON)

    asyncio.run(orchestrator.lint_path(workspace / "script.nu"))

    assert all("--version" not in call.args for call in runner.calls)


def test_clean_run_replaces_stale_diagnostics(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    target = workspace / "script.nu"
    asyncio.run(orchestrator.lint_path(target))

    runner.stdout = ""
    asyncio.run(orchestrator.lint_path(target))

    assert host.published[target] == []
    assert orchestrator.store.lookup(target) == ()


def test_execution_failure_keeps_previous_diagnostics(
    host: RecordingHost,
    runner: FakeRunner,
    settings: LinterSettings,
    workspace: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    target = workspace / "script.nu"
    asyncio.run(orchestrator.lint_path(target))
    before = orchestrator.store.lookup(target)
    publishes = host.publish_count

    runner.error = ToolExecutionFailed(("nu-lint", "script.nu"), 2, "panic: x")
    with caplog.at_level(logging.ERROR, logger="pynulint"):
        outcome = asyncio.run(orchestrator.lint_path(target))

    assert outcome is LintOutcome.FAILED
    assert orchestrator.store.lookup(target) == before
    assert host.publish_count == publishes
    assert any("panic: x" in message for message in host.errors)
    assert "ToolExecutionFailed" in caplog.text
    assert not orchestrator.is_linting(target)

    runner.error = None
    assert asyncio.run(orchestrator.lint_path(target)) is LintOutcome.COMPLETED


def test_missing_executable_gets_install_hint(
    host: RecordingHost, settings: LinterSettings, workspace: Path
) -> None:
    runner = FakeRunner(version=None, error=ToolNotFound("nu-lint", "No such file or directory"))
    orchestrator = _orchestrator(host, runner, settings, workspace)

    outcome = asyncio.run(orchestrator.lint_path(workspace / "script.nu"))

    assert outcome is LintOutcome.FAILED
    (message,) = host.errors
    assert "could not be started" in message
    assert "Install nu-lint" in message


def test_malformed_output_is_logged_as_format_mismatch(
    host: RecordingHost,
    runner: FakeRunner,
    settings: LinterSettings,
    workspace: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    runner.stdout = "thread 'main' panicked"
    orchestrator = _orchestrator(host, runner, settings, workspace)

    with caplog.at_level(logging.ERROR, logger="pynulint"):
        outcome = asyncio.run(orchestrator.lint_path(workspace / "script.nu"))

    assert outcome is LintOutcome.FAILED
    assert "OutputParseFailed" in caplog.text
    assert "vscode-json output format" in caplog.text
    assert host.errors and host.errors[0].startswith("Nu-Lint error:")


def test_workspace_sweep_continues_past_failures(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    for name in ("b.nu", "c.nu"):
        (workspace / name).write_text("ls\n", encoding="utf-8")
    runner.errors_by_target["b.nu"] = ToolExecutionFailed(("nu-lint", "b.nu"), 2, "boom")
    orchestrator = _orchestrator(host, runner, settings, workspace)

    report = asyncio.run(orchestrator.lint_workspace())

    assert [path.name for path in report.checked] == ["b.nu", "c.nu", "script.nu"]
    assert [path.name for path in report.failed] == ["b.nu"]
    assert host.infos == ["Workspace linting complete. Checked 3 files. 1 failed; see the log for details."]
    assert host.errors == []
    assert [call.args[-1] for call in runner.lint_calls] == ["b.nu", "c.nu", "script.nu"]


def test_workspace_sweep_messages(host: RecordingHost, runner: FakeRunner, settings: LinterSettings, tmp_path: Path) -> None:
    asyncio.run(_orchestrator(host, runner, settings, None).lint_workspace())
    asyncio.run(_orchestrator(host, runner, settings, tmp_path).lint_workspace())
    (tmp_path / "a.nu").write_text("ls\n", encoding="utf-8")
    asyncio.run(_orchestrator(host, runner, settings, tmp_path).lint_workspace())

    assert host.infos == [
        "No workspace folder found",
        "No .nu files found in workspace",
        "Workspace linting complete. Checked 1 files.",
    ]


def test_injected_discovery_is_used(host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path) -> None:
    seen: list[Path] = []

    def discover(root: Path) -> list[Path]:
        seen.append(root)
        return [root / "script.nu"]

    report = asyncio.run(_orchestrator(host, runner, settings, workspace, discover=discover).lint_workspace())

    assert seen == [workspace]
    assert report.checked == [workspace / "script.nu"]


def test_skip_rules(host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path) -> None:
    orchestrator = _orchestrator(host, runner, settings, workspace)
    disabled = _orchestrator(host, runner, settings.model_copy(update={"enable": False}), workspace)
    untitled = TextBuffer(workspace / "Untitled-1", SOURCE, scheme="untitled")
    python_doc = TextBuffer(workspace / "tool.py", "print()\n", language_id="python")

    outcomes = [
        asyncio.run(orchestrator.lint_path(workspace / ".git" / "hooks" / "x.nu")),
        asyncio.run(orchestrator.lint_document(untitled)),
        asyncio.run(orchestrator.on_open(python_doc)),
        asyncio.run(disabled.lint_path(workspace / "script.nu")),
    ]

    assert outcomes == [LintOutcome.SKIPPED] * 4
    assert runner.lint_calls == []


def test_quick_fixes_for_range_records(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    document = TextBuffer(workspace / "script.nu", SOURCE)
    asyncio.run(orchestrator.lint_document(document))
    diagnostics = host.published[document.path]
    foreign = diagnostics[0].model_copy(update={"source": "shellcheck"})

    actions = orchestrator.provide_fixes(document, [*diagnostics, foreign], Range.from_coords(0, 6, 0, 6))

    (action,) = actions
    assert action.title == "Rename to test-with-issues"
    assert action.uri == document.uri
    assert orchestrator.apply_fix(document, action)
    assert document.text == FIXED


def test_lookup_fix_without_selection_overlap(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    document = TextBuffer(workspace / "script.nu", SOURCE)
    asyncio.run(orchestrator.lint_document(document))
    (diagnostic,) = host.published[document.path]

    assert orchestrator.lookup_fix(document, diagnostic, Range.from_coords(0, 0, 0, 2)) is None
    edits = orchestrator.lookup_fix(document, diagnostic, diagnostic.range)
    assert edits is not None and edits[0].new_text == "test-with-issues"


def test_fix_text_streams_through_stdin(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    runner.stdout = FIXED
    orchestrator = _orchestrator(host, runner, settings, workspace)
    document = TextBuffer(workspace / "script.nu", SOURCE)

    edits = asyncio.run(orchestrator.fix_document_edits(document))

    (call,) = runner.lint_calls
    assert call.args == ("--fix",)
    assert call.input_text == SOURCE
    (edit,) = edits
    assert edit.new_text == FIXED
    assert edit.range == Range.from_coords(0, 0, 1, 0)

    runner.stdout = SOURCE
    assert asyncio.run(orchestrator.fix_document_edits(document)) == ()


def test_fix_file_reports_failures(host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path) -> None:
    orchestrator = _orchestrator(host, runner, settings, workspace)

    assert asyncio.run(orchestrator.fix_file(workspace / "script.nu"))
    assert runner.lint_calls[-1].args == ("--fix", "script.nu")

    runner.error = ToolExecutionFailed(("nu-lint",), 101, "cannot write")
    assert not asyncio.run(orchestrator.fix_file(workspace / "script.nu"))
    assert "cannot write" in host.errors[-1]


def test_save_fixes_before_linting(host: RecordingHost, runner: FakeRunner, workspace: Path) -> None:
    settings = LinterSettings(fix_on_save=True)
    orchestrator = _orchestrator(host, runner, settings, workspace)

    outcome = asyncio.run(orchestrator.on_save(TextBuffer(workspace / "script.nu", SOURCE)))

    assert outcome is LintOutcome.COMPLETED
    assert [call.args[0] for call in runner.lint_calls] == ["--fix", "-f"]


def test_change_events_are_debounced(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    delays: list[float] = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)
        await real_sleep(0)

    monkeypatch.setattr("pynulint.orchestrator.asyncio.sleep", fake_sleep)
    document = TextBuffer(workspace / "script.nu", SOURCE)
    quiet = _orchestrator(host, runner, settings, workspace)
    typing = _orchestrator(host, runner, settings.model_copy(update={"lint_on_type": True}), workspace)

    assert asyncio.run(quiet.on_change(document)) is LintOutcome.SKIPPED
    assert asyncio.run(typing.on_change(document)) is LintOutcome.COMPLETED
    assert delays == [settings.debounce_seconds]


def test_dispose_clears_state(host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    asyncio.run(orchestrator.lint_path(workspace / "script.nu"))

    orchestrator.dispose()

    assert len(orchestrator.store) == 0
    assert host.cleared == 1
    assert host.published == {}
    assert asyncio.run(orchestrator.lint_path(workspace / "script.nu")) is LintOutcome.SKIPPED


def test_hanging_version_call_falls_back_and_lints(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    settings = settings.model_copy(update={"timeout_seconds": 0.05})
    runner.version_hangs = True
    runner.stdout = legacy_payload(violation())
    orchestrator = _orchestrator(host, runner, settings, workspace)
    target = workspace / "script.nu"

    assert asyncio.run(orchestrator.lint_path(target)) is LintOutcome.COMPLETED

    version_call, lint_call = runner.calls
    assert version_call.args == ("--version",)
    assert version_call.timeout == settings.timeout_seconds
    assert lint_call.args[:2] == ("-f", OutputFormat.LEGACY_JSON.value)
    assert len(host.published[target]) == 1


def test_lint_finishing_after_dispose_publishes_nothing(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    target = workspace / "script.nu"

    async def scenario() -> LintOutcome:
        runner.gate = asyncio.Event()
        pending = asyncio.create_task(orchestrator.lint_path(target))
        for _ in range(5):
            await asyncio.sleep(0)
        orchestrator.dispose()
        runner.gate.set()
        return await pending

    assert asyncio.run(scenario()) is LintOutcome.SKIPPED
    assert host.published == {}
    assert host.publish_count == 0
    assert len(orchestrator.store) == 0
    assert not orchestrator.is_linting(target)


def test_fix_file_waits_out_an_in_flight_lint(
    host: RecordingHost, runner: FakeRunner, settings: LinterSettings, workspace: Path
) -> None:
    runner.stdout = _range_stdout()
    orchestrator = _orchestrator(host, runner, settings, workspace)
    target = workspace / "script.nu"

    async def scenario() -> tuple[bool, bool]:
        runner.gate = asyncio.Event()
        pending = asyncio.create_task(orchestrator.lint_path(target))
        for _ in range(5):
            await asyncio.sleep(0)
        refused = await orchestrator.fix_file(target)
        runner.gate.set()
        await pending
        return refused, await orchestrator.fix_file(target)

    refused, fixed = asyncio.run(scenario())

    assert not refused
    assert fixed
    assert [call.args[0] for call in runner.lint_calls] == ["-f", "--fix"]
    assert not orchestrator.is_linting(target)
