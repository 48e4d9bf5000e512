# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Deserialise ``nu-lint`` stdout into :data:`~pynulint.models.LintResult`."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Final, cast

from pydantic import BaseModel, ValidationError

from .errors import OutputParseFailed
from .models import LegacyLintResult, LintResult, OutputFormat, RangeLintResult

LOGGER = logging.getLogger(__name__)

_MAX_LOGGED_CHARS: Final[int] = 2000


def empty_result(output_format: OutputFormat) -> LintResult:
    """Return the result of a clean run in *output_format*."""

    if output_format is OutputFormat.RANGE_JSON:
        return RangeLintResult()
    return LegacyLintResult()


def _validate(model: type[BaseModel], stdout: str, output_format: OutputFormat) -> BaseModel:
    try:
        payload = json.loads(stdout)
    except json.JSONDecodeError as exc:
        LOGGER.error("Failed to parse nu-lint output: %s", stdout[:_MAX_LOGGED_CHARS])
        raise OutputParseFailed(output_format.value, str(exc)) from exc
    if not isinstance(payload, dict):
        raise OutputParseFailed(output_format.value, f"expected a JSON object, got {type(payload).__name__}")
    # The wire payload never carries the discriminator; it is implied by the request.
    payload.pop("format", None)
    # Some releases emit explicit nulls for empty collections.
    cleaned = {key: value for key, value in payload.items() if value is not None}
    try:
        return model.model_validate(cleaned)
    except ValidationError as exc:
        LOGGER.error("nu-lint output does not match the %s schema: %s", output_format.value, exc)
        raise OutputParseFailed(output_format.value, str(exc)) from exc


def parse_legacy_output(stdout: str) -> LegacyLintResult:
    """Parse a ``-f json`` payload; a missing ``violations`` key means none."""

    return cast(LegacyLintResult, _validate(LegacyLintResult, stdout, OutputFormat.LEGACY_JSON))


def parse_range_output(stdout: str) -> RangeLintResult:
    """Parse a ``-f vscode-json`` payload keeping the tool's per-file grouping."""

    return cast(RangeLintResult, _validate(RangeLintResult, stdout, OutputFormat.RANGE_JSON))


_PARSERS: Final[dict[OutputFormat, Callable[[str], LintResult]]] = {
    OutputFormat.LEGACY_JSON: parse_legacy_output,
    OutputFormat.RANGE_JSON: parse_range_output,
}


def parse_output(stdout: str, output_format: OutputFormat) -> LintResult:
    """Parse *stdout* produced by a run that requested *output_format*.

    Blank output is a clean run. Anything else must be well-formed JSON in
    the requested schema.

    Raises:
        OutputParseFailed: If *stdout* is not valid for *output_format*.
    """

    if not stdout.strip():
        return empty_result(output_format)
    return _PARSERS[output_format](stdout)


__all__ = ["empty_result", "parse_legacy_output", "parse_output", "parse_range_output"]
