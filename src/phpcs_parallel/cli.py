# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line interface for running phpcs with parallel workers."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Annotated

import typer

from .arguments import build_fix_args, build_lint_args
from .config import DEFAULT_PROBE_TIMEOUT, LintConfig, TaskSettings
from .config_loader import load_lint_config
from .console import OutputStyle, print_block
from .context import GitPreCommitContext, RunContext, TaskContext
from .errors import PhpcsParallelError, ToolMissingError
from .logging import configure_debug_logging, fail, info, ok, warn
from .process import locate_executable, run_command
from .results import FixerAction, TaskResult, TaskResultStatus
from .task import ParallelPhpcsTask
from .workers import AUTO, probe_cpu_cores, resolve_parallel

CONFIG_ERROR_EXIT: int = 2

app = typer.Typer(
    name="phpcs-parallel",
    help="Run PHP_CodeSniffer with a configurable number of parallel workers.",
    no_args_is_help=True,
    add_completion=False,
)

RootOption = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root holding pyproject.toml or .phpcs-parallel.toml."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Explicit TOML file replacing .phpcs-parallel.toml."),
]


def _load_config(root: Path, config_path: Path | None, style: OutputStyle) -> LintConfig:
    """Load options or exit with :data:`CONFIG_ERROR_EXIT`."""

    try:
        return load_lint_config(root, config_path)
    except PhpcsParallelError as exc:
        fail(str(exc), style)
        raise typer.Exit(code=CONFIG_ERROR_EXIT) from exc


def _report_result(result: TaskResult, style: OutputStyle) -> None:
    """Render ``result`` with a status line followed by the phpcs output."""

    match result.status:
        case TaskResultStatus.SKIPPED:
            info(f"{result.task}: no matching files, skipped", style)
        case TaskResultStatus.PASSED:
            ok(f"{result.task}: passed", style)
        case TaskResultStatus.FAILED_TOOL_MISSING:
            fail(f"{result.task}: failed, tool missing", style)
        case _:
            fail(f"{result.task}: failed", style)
    print_block(result.message, style)


def _apply_fixer(fixer: FixerAction, style: OutputStyle) -> None:
    """Run ``fixer`` once and report its outcome."""

    outcome = fixer.run(runner=run_command)
    if not outcome.succeeded:
        fail(f"phpcbf exited with status {outcome.returncode}", style)
        print_block(outcome.stderr.strip() or outcome.stdout.strip(), style)
        return
    if outcome.files_modified:
        ok(f"phpcbf fixed {len(fixer.files)} file(s); re-run to verify", style)
    else:
        info("phpcbf made no changes", style)


@app.command("run")
def run_task(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(help="Files or directories to lint; defaults to the project root."),
    ] = None,
    root: RootOption = Path("."),
    config_path: ConfigOption = None,
    pre_commit: Annotated[
        bool,
        typer.Option("--pre-commit", help="Lint the files staged in git instead of PATHS."),
    ] = False,
    fix: Annotated[bool, typer.Option("--fix", help="Run phpcbf on fixable files after a failure.")] = False,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji in output.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable coloured output.")] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Log commands and probe results.")] = False,
) -> None:
    """Lint PHP files with phpcs and report the outcome."""

    configure_debug_logging(debug)
    style = OutputStyle.from_flags(no_color=no_color, no_emoji=no_emoji)
    resolved_root = root.resolve()

    config = _load_config(resolved_root, config_path, style)
    task = ParallelPhpcsTask(
        config,
        TaskSettings(root=resolved_root),
        runner=run_command,
        locator=locate_executable,
    )

    try:
        context: TaskContext
        if pre_commit:
            context = GitPreCommitContext.from_git(resolved_root, runner=run_command)
        else:
            context = RunContext.from_paths(resolved_root, tuple(paths or ()))
    except ToolMissingError as exc:
        fail(str(exc), style)
        raise typer.Exit(code=1) from exc

    try:
        result = task.run(context)
    except PhpcsParallelError as exc:
        fail(str(exc), style)
        raise typer.Exit(code=CONFIG_ERROR_EXIT) from exc

    _report_result(result, style)
    if fix and result.fixer is not None:
        _apply_fixer(result.fixer, style)
    elif fix and not result.is_passed:
        warn("No phpcbf action is available for this failure", style)

    raise typer.Exit(code=0 if result.is_passed else 1)


@app.command("args")
def show_args(
    fix_files: Annotated[
        list[str] | None,
        typer.Option("--fix", help="Print phpcbf tokens for this file (repeatable)."),
    ] = None,
    root: RootOption = Path("."),
    config_path: ConfigOption = None,
    timeout: Annotated[
        float,
        typer.Option("--probe-timeout", min=0.1, help="Seconds to wait for the CPU core probe."),
    ] = DEFAULT_PROBE_TIMEOUT,
) -> None:
    """Print the resolved phpcs (or phpcbf) option tokens, one per line."""

    plain = OutputStyle(color=False, emoji=False)
    config = _load_config(root.resolve(), config_path, plain)
    resolver = partial(resolve_parallel, probe=partial(probe_cpu_cores, runner=run_command, timeout=timeout))
    try:
        if fix_files:
            tokens = build_fix_args(config, fix_files, resolver=resolver)
        else:
            tokens = build_lint_args(config, resolver=resolver)
    except PhpcsParallelError as exc:
        fail(str(exc), plain)
        raise typer.Exit(code=CONFIG_ERROR_EXIT) from exc
    for token in tokens or ():
        typer.echo(token)


@app.command("cores")
def show_cores(
    timeout: Annotated[
        float,
        typer.Option("--probe-timeout", min=0.1, help="Seconds to wait for the CPU core probe."),
    ] = DEFAULT_PROBE_TIMEOUT,
    debug: Annotated[bool, typer.Option("--debug", help="Log why the probe fell back.")] = False,
) -> None:
    """Print the worker count ``parallel = "auto"`` resolves to on this host."""

    configure_debug_logging(debug)
    typer.echo(resolve_parallel(AUTO, probe=partial(probe_cpu_cores, runner=run_command, timeout=timeout)))


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["CONFIG_ERROR_EXIT", "app", "main"]
