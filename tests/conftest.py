# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from fakes import FakeRunner, RecordingHost

from pynulint.config import LinterSettings


@pytest.fixture
def host() -> RecordingHost:
    """Return a host double that records published diagnostics."""
    return RecordingHost()


@pytest.fixture
def runner() -> FakeRunner:
    """Return a runner reporting a range-capable nu-lint and clean output."""
    return FakeRunner()


@pytest.fixture
def settings() -> LinterSettings:
    return LinterSettings(timeout_seconds=5.0, debounce_seconds=0.01)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Return a workspace root holding a single ``script.nu``."""

    (tmp_path / "script.nu").write_text("def testWithIssues [] { }\n", encoding="utf-8")
    return tmp_path.resolve()


@pytest.fixture(autouse=True)
def _pynulint_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("PYNULINT_"):
            monkeypatch.delenv(name, raising=False)
