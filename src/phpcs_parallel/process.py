# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shell-free subprocess execution for phpcs, phpcbf and the CPU probes."""

from __future__ import annotations

import logging
import shutil

# Bandit: subprocess usage is intentional; commands are argument lists and
# ``shell=True`` is never used.
import subprocess  # nosec B404
import tempfile
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final, Protocol, runtime_checkable

from .errors import SubprocessExecutionError, ToolMissingError

LOGGER = logging.getLogger(__name__)

TIMEOUT_RETURNCODE: Final[int] = 124
FILE_LIST_PREFIX: Final[str] = "phpcs-file-list-"


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Immutable command execution options."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    check: bool = True
    capture_output: bool = False
    text: bool = True
    errors: str = "replace"
    timeout: float | None = None
    discard_stdin: bool = False


@runtime_checkable
class CommandRunner(Protocol):
    """Callable protocol for invoking external commands."""

    def __call__(
        self,
        args: Sequence[str],
        *,
        options: CommandOptions | None = None,
    ) -> CompletedProcess[str]:
        """Execute ``args`` returning a completed subprocess.

        Args:
            args: Command to execute including executable and arguments.
            options: Optional command execution configuration.

        Returns:
            CompletedProcess[str]: Completed subprocess with captured output.
        """

        raise NotImplementedError


def locate_executable(name: str) -> str | None:
    """Return the absolute path of ``name`` or ``None`` when it is not installed.

    Args:
        name: Executable name or path.

    Returns:
        str | None: Resolved executable path when found.
    """

    path = Path(name)
    if path.is_absolute():
        return str(path) if path.exists() else None
    return shutil.which(name)


def _ensure_text(value: str | bytes | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="replace")


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Return ``args`` with the executable resolved to an absolute path.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Validated argument list suitable for subprocess execution.

    Raises:
        ValueError: If no arguments are provided.
        ToolMissingError: If the executable cannot be found.
    """

    if not args:
        raise ValueError("subprocess command requires at least one argument")
    head, *rest = args
    resolved = locate_executable(head)
    if resolved is None:
        raise ToolMissingError(head)
    return [resolved, *rest]


def run_command(
    args: Sequence[str],
    *,
    options: CommandOptions | None = None,
) -> CompletedProcess[str]:
    """Execute ``args`` after normalising the executable path.

    Args:
        args: Command and argument sequence to execute.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess: Subprocess execution metadata. A timeout is reported
        as exit status ``124`` with a ``Command timed out`` stderr line.

    Raises:
        ToolMissingError: If the executable cannot be resolved on ``PATH``.
        SubprocessExecutionError: When ``check`` is true and the process exits
            with a non-zero status.
        OSError: When the process cannot be started.
    """

    normalized = _normalize_args(args)
    resolved = options or CommandOptions()
    LOGGER.debug("running %s", normalized)
    try:
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603 - argument list, no shell
            normalized,
            cwd=str(resolved.cwd) if resolved.cwd is not None else None,
            env=dict(resolved.env) if resolved.env is not None else None,
            check=False,
            capture_output=resolved.capture_output,
            text=resolved.text,
            errors=resolved.errors if resolved.text else None,
            timeout=resolved.timeout,
            stdin=subprocess.DEVNULL if resolved.discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _ensure_text(exc.stderr)
        timeout_msg = (
            f"Command timed out after {resolved.timeout:.1f}s" if resolved.timeout is not None else "Command timed out"
        )
        completed = subprocess.CompletedProcess(
            args=list(normalized),
            returncode=TIMEOUT_RETURNCODE,
            stdout=_ensure_text(exc.stdout) or "",
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )

    if resolved.check and completed.returncode != 0:
        raise SubprocessExecutionError(
            normalized,
            completed.returncode,
            completed.stdout if isinstance(completed.stdout, str) else None,
            completed.stderr if isinstance(completed.stderr, str) else None,
        )
    return completed


@contextmanager
def temporary_file_list(paths: Iterable[str | Path]) -> Iterator[Path]:
    """Write ``paths`` one per line into a temporary file for ``--file-list``.

    The file is removed when the block exits, whether the command ran, failed
    to start, or raised.

    Args:
        paths: File paths to list.

    Yields:
        Path: Location of the temporary file list.
    """

    handle = tempfile.NamedTemporaryFile(  # pylint: disable=consider-using-with
        mode="w",
        encoding="utf-8",
        prefix=FILE_LIST_PREFIX,
        suffix=".txt",
        delete=False,
    )
    location = Path(handle.name)
    try:
        with handle:
            handle.write("\n".join(str(path) for path in paths))
        yield location
    finally:
        location.unlink(missing_ok=True)


__all__ = [
    "CommandOptions",
    "CommandRunner",
    "TIMEOUT_RETURNCODE",
    "locate_executable",
    "run_command",
    "temporary_file_list",
]
