# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Behavioural tests for :class:`phpcs_parallel.task.ParallelPhpcsTask`."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from conftest import FakeRunner, completed, phpcs_json

from phpcs_parallel.config import LintConfig, TaskSettings
from phpcs_parallel.context import FileCollection, GitPreCommitContext, RunContext, TaskContext
from phpcs_parallel.errors import InvalidConfigurationError, ToolMissingError
from phpcs_parallel.results import TaskResultStatus
from phpcs_parallel.task import ParallelPhpcsTask
from phpcs_parallel.workers import ProbeResult


def _installed(name: str) -> str | None:
    return f"/usr/bin/{name}"


def _not_installed(name: str) -> str | None:
    return None if name == "phpcbf" else f"/usr/bin/{name}"


def _task(
    root: Path,
    runner: FakeRunner,
    *,
    options: dict[str, object] | None = None,
    locator=_installed,
    probe=None,
) -> ParallelPhpcsTask:
    return ParallelPhpcsTask(
        LintConfig.from_options(options or {}),
        TaskSettings(root=root),
        runner=runner,
        locator=locator,
        probe=probe,
    )


def test_empty_selection_is_skipped_without_launching(php_project: Path, fake_runner: FakeRunner) -> None:
    task = _task(php_project, fake_runner, options={"triggered_by": ["inc"]})

    result = task.run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.SKIPPED
    assert fake_runner.calls == []


def test_clean_run_passes(php_project: Path, fake_runner: FakeRunner) -> None:
    task = _task(php_project, fake_runner)

    result = task.run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.PASSED
    assert result.fixer is None
    assert len(fake_runner.commands("phpcs")) == 1


def test_lint_command_uses_json_report_and_file_list(php_project: Path, fake_runner: FakeRunner) -> None:
    task = _task(php_project, fake_runner, options={"standard": ["PSR12"], "parallel": 3})

    task.run(RunContext.from_paths(php_project))

    call = fake_runner.calls[0]
    assert call.args[:2] == ["phpcs", "--standard=PSR12"]
    assert "--parallel=3" in call.args
    assert call.args[-2] == "--report-json"
    assert call.args[-1].startswith("--file-list=")
    assert call.file_list is not None
    assert [Path(line).name for line in call.file_list.splitlines()] == ["a.php", "b.php"]
    assert call.options is not None
    assert call.options.cwd == php_project.resolve()


def test_file_list_is_removed_after_the_run(php_project: Path, fake_runner: FakeRunner) -> None:
    fake_runner.responses["phpcs"] = completed(returncode=2, stdout="bad")

    _task(php_project, fake_runner).run(RunContext.from_paths(php_project))

    location = fake_runner.calls[0].file_list_path
    assert location is not None
    assert not location.exists()


def test_failure_with_fixable_file_attaches_fixer(php_project: Path, fake_runner: FakeRunner) -> None:
    fake_runner.responses["phpcs"] = completed(
        returncode=2,
        stdout=f"FOUND 1 ERROR\n{phpcs_json({'foo.php': [True], 'bar.php': [False]})}",
    )
    fake_runner.responses["phpcbf"] = completed(returncode=1)
    task = _task(php_project, fake_runner, options={"parallel": 2})

    result = task.run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.FAILED
    assert result.fixer is not None
    assert result.fixer.files == ("foo.php",)
    assert result.fixer.command == ("phpcbf", "--extensions=php", "--report=full", "--parallel=2", "-s", "foo.php")
    assert result.message.startswith("FOUND 1 ERROR")
    assert "You can fix some errors by running:\n  phpcbf" in result.message
    assert fake_runner.commands("phpcbf") == []

    outcome = result.fixer.run(runner=fake_runner)

    assert outcome.succeeded
    assert outcome.files_modified
    assert len(fake_runner.commands("phpcbf")) == 1


def test_failure_without_fixable_files_is_plain_failure(php_project: Path, fake_runner: FakeRunner) -> None:
    fake_runner.responses["phpcs"] = completed(returncode=2, stdout=phpcs_json({"foo.php": [False]}))

    result = _task(php_project, fake_runner).run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.FAILED
    assert result.fixer is None
    assert "You can fix" not in result.message


def test_missing_fixer_adds_advisory_and_no_action(php_project: Path, fake_runner: FakeRunner) -> None:
    fake_runner.responses["phpcs"] = completed(returncode=2, stdout=f"report\n{phpcs_json({'foo.php': [True]})}")

    result = _task(php_project, fake_runner, locator=_not_installed).run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.FAILED_TOOL_MISSING
    assert not result.is_passed
    assert result.fixer is None
    assert result.message == (
        "report\nInfo: phpcbf could not be found. Please consider installing it for auto-fixing."
    )
    assert fake_runner.commands("phpcbf") == []


def test_missing_linter_is_reported(php_project: Path, fake_runner: FakeRunner) -> None:
    fake_runner.responses["phpcs"] = ToolMissingError("phpcs")

    result = _task(php_project, fake_runner).run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.FAILED_TOOL_MISSING
    assert result.message == "phpcs could not be found. Please install it to run this task."
    assert fake_runner.calls[0].file_list_path is not None
    assert not fake_runner.calls[0].file_list_path.exists()


def test_launch_failure_keeps_raw_error(php_project: Path, fake_runner: FakeRunner) -> None:
    fake_runner.responses["phpcs"] = PermissionError("Permission denied: 'phpcs'")

    result = _task(php_project, fake_runner).run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.FAILED
    assert result.error == "Permission denied: 'phpcs'"


def test_invalid_parallel_fails_before_launch(php_project: Path, fake_runner: FakeRunner) -> None:
    task = _task(php_project, fake_runner, options={"parallel": "lots"})

    with pytest.raises(InvalidConfigurationError):
        task.run(RunContext.from_paths(php_project))
    assert fake_runner.calls == []


def test_auto_probes_once_per_run(php_project: Path, fake_runner: FakeRunner) -> None:
    probes: list[int] = []

    def probe() -> ProbeResult:
        probes.append(1)
        return ProbeResult.found(4)

    fake_runner.responses["phpcs"] = completed(returncode=2, stdout=phpcs_json({"foo.php": [True]}))
    task = _task(php_project, fake_runner, options={"parallel": "auto"}, probe=probe)

    result = task.run(RunContext.from_paths(php_project))

    assert probes == [1]
    assert "--parallel=4" in fake_runner.calls[0].args
    assert result.fixer is not None
    assert "--parallel=4" in result.fixer.command


def test_selection_applies_whitelist_and_ignore_patterns(php_project: Path, fake_runner: FakeRunner) -> None:
    task = _task(
        php_project,
        fake_runner,
        options={"whitelist_patterns": ["src/*"], "ignore_patterns": ["src/b.php"]},
    )

    selected = task.select_files(RunContext.from_paths(php_project))

    assert [path.name for path in selected] == ["a.php"]


def test_runs_only_in_known_contexts(tmp_path: Path, fake_runner: FakeRunner) -> None:
    task = _task(tmp_path, fake_runner)
    files = FileCollection(root=tmp_path)

    assert task.can_run_in_context(RunContext(files=files))
    assert task.can_run_in_context(GitPreCommitContext(files=files))
    assert not task.can_run_in_context(TaskContext(files=files))


def test_from_options_builds_a_configured_task(tmp_path: Path) -> None:
    task = ParallelPhpcsTask.from_options({"tab_width": 4}, TaskSettings(root=tmp_path))

    assert task.config.tab_width == 4
    assert task.settings.root == tmp_path


def test_missing_fixer_is_irrelevant_without_fixable_files(php_project: Path, fake_runner: FakeRunner) -> None:
    looked_up: list[str] = []

    def locator(name: str) -> str | None:
        looked_up.append(name)
        return None

    fake_runner.responses["phpcs"] = completed(returncode=2, stdout=f"report\n{phpcs_json({'foo.php': [False]})}")

    result = _task(php_project, fake_runner, locator=locator).run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.FAILED
    assert result.message == "report"
    assert looked_up == []


def test_advisory_has_no_leading_blank_line_without_summary(php_project: Path, fake_runner: FakeRunner) -> None:
    fake_runner.responses["phpcs"] = completed(returncode=2, stdout=phpcs_json({"foo.php": [True]}))

    result = _task(php_project, fake_runner, locator=_not_installed).run(RunContext.from_paths(php_project))

    assert result.message.startswith("Info: phpcbf could not be found.")


def test_output_without_json_report_is_logged(
    php_project: Path,
    fake_runner: FakeRunner,
    caplog: pytest.LogCaptureFixture,
) -> None:
    fake_runner.responses["phpcs"] = completed(returncode=3, stdout="ERROR: Referenced sniff does not exist")

    with caplog.at_level("DEBUG", logger="phpcs_parallel.task"):
        result = _task(php_project, fake_runner).run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.FAILED
    assert result.fixer is None
    assert "without a JSON report" in caplog.text


@pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script")
def test_undecodable_linter_output_becomes_failed_outcome(
    php_project: Path,
    tmp_path_factory: pytest.TempPathFactory,
) -> None:
    script = tmp_path_factory.mktemp("bin") / "phpcs"
    script.write_text("#!/bin/sh\nprintf 'FILE \\377\\376 bad\\n'\nexit 2\n", encoding="utf-8")
    script.chmod(0o755)
    task = ParallelPhpcsTask(LintConfig(), TaskSettings(root=php_project, linter=str(script)), locator=_installed)

    result = task.run(RunContext.from_paths(php_project))

    assert result.status is TaskResultStatus.FAILED
    assert result.message.startswith("FILE ")
    assert result.fixer is None
