# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Task outcomes and the deferred phpcbf action attached to failures."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path
from typing import Final

from .errors import ToolMissingError
from .process import CommandOptions, CommandRunner, run_command

FIXER_ACCEPTED_EXIT_CODES: Final[tuple[int, ...]] = (0, 1)
FILES_MODIFIED_EXIT_CODE: Final[int] = 1


class TaskResultStatus(StrEnum):
    """Terminal states of a task run."""

    SKIPPED = "skipped"
    PASSED = "passed"
    FAILED = "failed"
    FAILED_TOOL_MISSING = "failed_tool_missing"


@dataclass(frozen=True, slots=True)
class FixerResult:
    """Result of running the attached phpcbf action."""

    returncode: int
    stdout: str
    stderr: str
    succeeded: bool

    @property
    def files_modified(self) -> bool:
        """Return ``True`` when phpcbf reported that it rewrote files."""

        return self.succeeded and self.returncode == FILES_MODIFIED_EXIT_CODE


@dataclass(frozen=True, slots=True)
class FixerAction:
    """phpcbf invocation prepared by a failed run and executed on demand.

    Attributes:
        command: Full argv, executable first.
        files: Files phpcs reported as fixable.
        accepted_exit_codes: Exit codes counted as success; phpcbf exits with 1
            after modifying files.
        cwd: Working directory for the fixer.
    """

    command: tuple[str, ...]
    files: tuple[str, ...]
    accepted_exit_codes: tuple[int, ...] = FIXER_ACCEPTED_EXIT_CODES
    cwd: Path | None = None

    def run(self, runner: CommandRunner = run_command) -> FixerResult:
        """Execute phpcbf once and classify its exit status.

        Args:
            runner: Command runner used to launch phpcbf.

        Returns:
            FixerResult: Captured output and whether the exit status is acceptable.
        """

        try:
            completed = runner(
                list(self.command),
                options=CommandOptions(cwd=self.cwd, capture_output=True, check=False, discard_stdin=True),
            )
        except ToolMissingError as exc:
            return FixerResult(returncode=127, stdout="", stderr=str(exc), succeeded=False)
        except OSError as exc:
            return FixerResult(returncode=126, stdout="", stderr=str(exc), succeeded=False)
        return FixerResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            succeeded=completed.returncode in self.accepted_exit_codes,
        )


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Outcome handed to the host's reporting sink."""

    task: str
    status: TaskResultStatus
    message: str = ""
    fixer: FixerAction | None = None
    error: str | None = None

    @classmethod
    def skipped(cls, task: str) -> TaskResult:
        return cls(task=task, status=TaskResultStatus.SKIPPED)

    @classmethod
    def passed(cls, task: str) -> TaskResult:
        return cls(task=task, status=TaskResultStatus.PASSED)

    @classmethod
    def failed(cls, task: str, message: str, *, error: str | None = None) -> TaskResult:
        return cls(task=task, status=TaskResultStatus.FAILED, message=message, error=error)

    @property
    def is_passed(self) -> bool:
        return self.status in {TaskResultStatus.PASSED, TaskResultStatus.SKIPPED}

    @property
    def is_fixable(self) -> bool:
        return self.fixer is not None

    def with_appended_message(self, text: str) -> TaskResult:
        if not self.message:
            return replace(self, message=text.lstrip("\n"))
        return replace(self, message=f"{self.message}{text}")

    def with_fixer(self, fixer: FixerAction) -> TaskResult:
        return replace(self, fixer=fixer)

    def with_status(self, status: TaskResultStatus) -> TaskResult:
        return replace(self, status=status)


__all__ = [
    "FIXER_ACCEPTED_EXIT_CODES",
    "FixerAction",
    "FixerResult",
    "TaskResult",
    "TaskResultStatus",
]
