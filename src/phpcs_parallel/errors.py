# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the phpcs task."""

from __future__ import annotations

from collections.abc import Sequence


class PhpcsParallelError(Exception):
    """Base class for errors raised by :mod:`phpcs_parallel`."""


class InvalidConfigurationError(PhpcsParallelError, ValueError):
    """Raised when task options are malformed.

    Raised before any external process is launched and never recovered from.
    """


class ToolMissingError(PhpcsParallelError, FileNotFoundError):
    """Raised when an external executable cannot be located on ``PATH``."""

    def __init__(self, executable: str) -> None:
        """Record the executable that could not be resolved.

        Args:
            executable: Command name that was looked up.
        """

        super().__init__(f"Executable '{executable}' was not found on PATH")
        self.executable = executable


class SubprocessExecutionError(PhpcsParallelError, RuntimeError):
    """Raised when a subprocess exits with a non-zero status while ``check`` is true."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        """Initialise the error with captured subprocess metadata.

        Args:
            command: Normalised command sequence that was executed.
            returncode: Exit status reported by the subprocess.
            stdout: Captured standard output stream.
            stderr: Captured standard error stream.
        """
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {stderr or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


__all__ = [
    "InvalidConfigurationError",
    "PhpcsParallelError",
    "SubprocessExecutionError",
    "ToolMissingError",
]
