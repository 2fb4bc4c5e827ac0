# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from subprocess import CompletedProcess

import pytest

from phpcs_parallel.console import get_console_manager
from phpcs_parallel.process import CommandOptions

Response = CompletedProcess[str] | BaseException | Callable[[list[str]], CompletedProcess[str]]


@dataclass
class RecordedCall:
    """Command observed by :class:`FakeRunner`."""

    args: list[str]
    options: CommandOptions | None
    file_list: str | None = None
    file_list_path: Path | None = None


@dataclass
class FakeRunner:
    """Command runner returning canned responses keyed by executable name."""

    responses: dict[str, Response] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)

    def __call__(self, args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
        argv = list(args)
        call = RecordedCall(args=argv, options=options)
        for token in argv:
            if token.startswith("--file-list="):
                location = Path(token.split("=", 1)[1])
                call.file_list_path = location
                call.file_list = location.read_text(encoding="utf-8") if location.exists() else None
        self.calls.append(call)

        response = self.responses.get(argv[0])
        if response is None:
            return CompletedProcess(argv, 0, stdout="", stderr="")
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(argv)
        return response

    def commands(self, executable: str) -> list[list[str]]:
        return [call.args for call in self.calls if call.args[0] == executable]


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> CompletedProcess[str]:
    """Return a completed process with the supplied streams."""

    return CompletedProcess(["fake"], returncode, stdout=stdout, stderr=stderr)


def phpcs_json(files: dict[str, list[bool]]) -> str:
    """Return a phpcs JSON report where each file lists the fixable flag of its messages."""

    payload = {
        "totals": {
            "errors": sum(len(flags) for flags in files.values()),
            "warnings": 0,
            "fixable": sum(flag for flags in files.values() for flag in flags),
        },
        "files": {
            path: {
                "errors": len(flags),
                "warnings": 0,
                "messages": [
                    {
                        "message": "Line indented incorrectly",
                        "source": "Generic.WhiteSpace.ScopeIndent.Incorrect",
                        "severity": 5,
                        "type": "ERROR",
                        "line": index + 1,
                        "column": 1,
                        "fixable": flag,
                    }
                    for index, flag in enumerate(flags)
                ],
            }
            for path, flags in files.items()
        },
    }
    return json.dumps(payload)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def php_project(tmp_path: Path) -> Path:
    """Create a project with two PHP files and one unrelated file."""

    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.php").write_text("<?php echo 1;\n", encoding="utf-8")
    (tmp_path / "src" / "b.php").write_text("<?php echo 2;\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("readme\n", encoding="utf-8")
    return tmp_path


@pytest.fixture(autouse=True)
def _reset_consoles() -> None:
    get_console_manager().reset()
