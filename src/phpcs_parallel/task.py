# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""The parallel phpcs task: run phpcs, classify the outcome, prepare phpcbf."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from functools import partial
from subprocess import CompletedProcess
from typing import Any, Final

from .arguments import build_fix_args, build_lint_args
from .config import LintConfig, TaskSettings
from .context import FileCollection, GitPreCommitContext, RunContext, TaskContext
from .errors import ToolMissingError
from .process import CommandOptions, CommandRunner, locate_executable, run_command, temporary_file_list
from .report import parse_report
from .results import FixerAction, TaskResult, TaskResultStatus
from .workers import CoreProbe, probe_cpu_cores, resolve_parallel

LOGGER = logging.getLogger(__name__)

TASK_NAME: Final[str] = "phpcs_parallel"
REPORT_JSON_FLAG: Final[str] = "--report-json"
FILE_LIST_FLAG: Final[str] = "--file-list"

ExecutableLocator = Callable[[str], str | None]


@dataclass(frozen=True, slots=True)
class _FixedWorkers:
    """Resolver that returns a worker count computed once per run."""

    workers: int

    def __call__(self, value: int | str) -> int:
        del value
        return self.workers


class ParallelPhpcsTask:
    """phpcs task with a ``parallel`` worker option.

    The task lints the selected files once. On failure it attaches a phpcbf
    action restricted to the files phpcs marked as fixable; the caller decides
    whether to run it.
    """

    name: Final[str] = TASK_NAME

    def __init__(
        self,
        config: LintConfig,
        settings: TaskSettings | None = None,
        *,
        runner: CommandRunner = run_command,
        locator: ExecutableLocator = locate_executable,
        probe: CoreProbe | None = None,
    ) -> None:
        """Create the task.

        Args:
            config: Validated phpcs options.
            settings: Executable names, project root and probe timeout.
            runner: Command runner used for phpcs and the CPU probe.
            locator: Callable returning the path of an executable or ``None``.
            probe: CPU core probe; defaults to one bound to ``runner``.
        """

        self.config = config
        self.settings = settings or TaskSettings()
        self._runner = runner
        self._locator = locator
        self._probe: CoreProbe = probe or partial(
            probe_cpu_cores,
            runner=runner,
            timeout=self.settings.probe_timeout,
        )

    @classmethod
    def from_options(
        cls,
        options: Mapping[str, Any],
        settings: TaskSettings | None = None,
        **kwargs: Any,
    ) -> ParallelPhpcsTask:
        """Build a task from raw option names (``tab_width``, ``parallel``, ...)."""

        return cls(LintConfig.from_options(options), settings, **kwargs)

    def can_run_in_context(self, context: TaskContext) -> bool:
        """Return ``True`` for pre-commit and ad hoc runs."""

        return isinstance(context, (GitPreCommitContext, RunContext))

    def select_files(self, context: TaskContext) -> FileCollection:
        """Return the context files matching the extension, whitelist and ignore options."""

        return (
            context.files.extensions(self.config.triggered_by_extensions)
            .paths(self.config.whitelist_patterns)
            .not_paths(self.config.ignore_patterns)
        )

    def resolve_workers(self) -> int:
        """Resolve the ``parallel`` option, probing the host for ``"auto"``.

        Raises:
            InvalidConfigurationError: If ``parallel`` is malformed.
        """

        return resolve_parallel(self.config.parallelism, probe=self._probe)

    def lint_command(self, file_list: str, *, workers: int | None = None) -> list[str]:
        """Return the full phpcs argv reading its targets from ``file_list``."""

        resolver = _FixedWorkers(workers if workers is not None else self.resolve_workers())
        return [
            self.settings.linter,
            *build_lint_args(self.config, resolver=resolver),
            REPORT_JSON_FLAG,
            f"{FILE_LIST_FLAG}={file_list}",
        ]

    def create_fixer_action(self, files: Sequence[str], *, workers: int | None = None) -> FixerAction | None:
        """Return a phpcbf action for ``files``, or ``None`` when nothing is fixable."""

        resolver = _FixedWorkers(workers if workers is not None else self.resolve_workers())
        arguments = build_fix_args(self.config, files, resolver=resolver)
        if arguments is None:
            return None
        return FixerAction(
            command=(self.settings.fixer, *arguments),
            files=tuple(files),
            cwd=self.settings.root,
        )

    def run(self, context: TaskContext) -> TaskResult:
        """Lint the context's files and return the terminal outcome.

        Args:
            context: Pre-commit or ad hoc run context.

        Returns:
            TaskResult: Skipped, passed, failed (optionally with a phpcbf
            action), or failed because an executable is missing.

        Raises:
            InvalidConfigurationError: If ``parallel`` is malformed; raised before
                any process is launched.
        """

        files = self.select_files(context)
        if not files:
            return TaskResult.skipped(self.name)

        workers = self.resolve_workers()
        try:
            with temporary_file_list(files) as file_list:
                command = self.lint_command(str(file_list), workers=workers)
                LOGGER.debug("phpcs command: %s", shlex.join(command))
                completed = self._runner(
                    command,
                    options=CommandOptions(
                        cwd=context.root,
                        capture_output=True,
                        check=False,
                        discard_stdin=True,
                    ),
                )
        except ToolMissingError as exc:
            return TaskResult(
                task=self.name,
                status=TaskResultStatus.FAILED_TOOL_MISSING,
                message=f"{self.settings.linter} could not be found. Please install it to run this task.",
                error=str(exc),
            )
        except OSError as exc:
            return TaskResult.failed(self.name, f"Could not start {self.settings.linter}: {exc}", error=str(exc))

        if completed.returncode == 0:
            return TaskResult.passed(self.name)
        return self._failed_result(completed, workers=workers)

    def _failed_result(self, completed: CompletedProcess[str], *, workers: int) -> TaskResult:
        """Interpret a non-zero phpcs exit and attach phpcbf when it can help."""

        report = parse_report(completed.stdout, completed.stderr)
        failed = TaskResult.failed(self.name, report.summary)
        if report.report is None:
            LOGGER.debug("phpcs exited with %s without a JSON report; no fixer attached", completed.returncode)

        fixable = report.fixable_files
        if not fixable:
            return failed

        if self._locator(self.settings.fixer) is None:
            return failed.with_status(TaskResultStatus.FAILED_TOOL_MISSING).with_appended_message(
                f"\nInfo: {self.settings.fixer} could not be found. Please consider installing it for auto-fixing.",
            )

        fixer = self.create_fixer_action(fixable, workers=workers)
        if fixer is None:
            return failed
        return failed.with_fixer(fixer).with_appended_message(
            f"\nYou can fix some errors by running:\n  {shlex.join(fixer.command)}",
        )


__all__ = ["FILE_LIST_FLAG", "ParallelPhpcsTask", "REPORT_JSON_FLAG", "TASK_NAME"]
