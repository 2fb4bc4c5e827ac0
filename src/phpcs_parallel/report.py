# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Parse phpcs output produced with ``--report-json``.

phpcs prints its human-readable report first and the JSON document as the
final line of stdout. The JSON names, per file, every message and whether
phpcbf can fix it.
"""

from __future__ import annotations

import json
import logging
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

LOGGER = logging.getLogger(__name__)

_JSON_MARKER: Final[str] = '{"totals"'


class ReportTotals(BaseModel):
    """Aggregate counters reported by phpcs."""

    model_config = ConfigDict(extra="ignore")

    errors: int = 0
    warnings: int = 0
    fixable: int = 0


class ReportMessage(BaseModel):
    """Single sniff violation."""

    model_config = ConfigDict(extra="ignore")

    message: str = ""
    source: str | None = None
    severity: int | None = None
    type: str | None = None
    line: int | None = None
    column: int | None = None
    fixable: bool = False


class ReportFile(BaseModel):
    """Violations reported for one file."""

    model_config = ConfigDict(extra="ignore")

    errors: int = 0
    warnings: int = 0
    messages: list[ReportMessage] = Field(default_factory=list)

    @property
    def has_fixable(self) -> bool:
        return any(message.fixable for message in self.messages)


class JsonReport(BaseModel):
    """Structured phpcs JSON report."""

    model_config = ConfigDict(extra="ignore")

    totals: ReportTotals = Field(default_factory=ReportTotals)
    files: dict[str, ReportFile] = Field(default_factory=dict)


class LintReport(BaseModel):
    """Interpretation of a failed phpcs run."""

    model_config = ConfigDict(frozen=True)

    summary: str
    report: JsonReport | None = None

    @property
    def fixable_files(self) -> tuple[str, ...]:
        """Return sorted paths with at least one fixable message."""

        if self.report is None:
            return ()
        return tuple(sorted(path for path, entry in self.report.files.items() if entry.has_fixable))


def _split_json(stdout: str) -> tuple[str, JsonReport | None]:
    """Separate the trailing JSON document from the human report in ``stdout``."""

    lines = stdout.rstrip().splitlines()
    for index in range(len(lines) - 1, -1, -1):
        candidate = lines[index].strip()
        if not candidate.startswith(_JSON_MARKER):
            continue
        try:
            report = JsonReport.model_validate(json.loads(candidate))
        except (json.JSONDecodeError, ValidationError) as exc:
            LOGGER.debug("ignoring unparseable phpcs JSON report: %s", exc)
            return stdout.strip(), None
        remaining = lines[:index] + lines[index + 1 :]
        return "\n".join(remaining).strip(), report
    return stdout.strip(), None


def parse_report(stdout: str | None, stderr: str | None = None) -> LintReport:
    """Build a :class:`LintReport` from phpcs process output.

    Args:
        stdout: Captured standard output.
        stderr: Captured standard error.

    Returns:
        LintReport: Summary text and, when the JSON line parsed, the structured report.
    """

    summary, report = _split_json(stdout or "")
    error_text = (stderr or "").strip()
    if error_text:
        summary = f"{summary}\n{error_text}" if summary else error_text
    return LintReport(summary=summary, report=report)


__all__ = [
    "JsonReport",
    "LintReport",
    "ReportFile",
    "ReportMessage",
    "ReportTotals",
    "parse_report",
]
