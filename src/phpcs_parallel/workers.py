# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Resolve the ``parallel`` option into a concrete phpcs worker count.

``"auto"`` asks the host for its core count: ``wmic cpu get NumberOfCores`` on
Windows and ``nproc`` on Linux or macOS. A probe that fails, times out, prints
something unexpected, or runs on another platform degrades to a single
worker instead of raising.
"""

from __future__ import annotations

import logging
import platform
import subprocess  # nosec B404
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Final

from .config import DEFAULT_PROBE_TIMEOUT
from .errors import InvalidConfigurationError, SubprocessExecutionError
from .process import CommandOptions, CommandRunner, run_command

LOGGER = logging.getLogger(__name__)

AUTO: Final[str] = "auto"
SERIAL_WORKERS: Final[int] = 1
WINDOWS_PROBE: Final[tuple[str, ...]] = ("wmic", "cpu", "get", "NumberOfCores")
POSIX_PROBE: Final[tuple[str, ...]] = ("nproc",)


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of a CPU core probe: either ``cores`` or the ``reason`` it is unavailable."""

    cores: int | None = None
    reason: str | None = None

    @classmethod
    def found(cls, cores: int) -> ProbeResult:
        return cls(cores=cores)

    @classmethod
    def unavailable(cls, reason: str) -> ProbeResult:
        return cls(reason=reason)

    @property
    def ok(self) -> bool:
        return self.cores is not None


CoreProbe = Callable[[], ProbeResult]


def _probe_family(system: str) -> str | None:
    lowered = system.lower()
    if lowered.startswith("win"):
        return "windows"
    if lowered.startswith(("linux", "darwin")):
        return "posix"
    return None


def _positive_int(raw: str) -> int | None:
    text = raw.strip()
    if not (text.isascii() and text.isdecimal()):
        return None
    value = int(text)
    return value if value > 0 else None


def _parse_windows_output(output: str) -> int | None:
    """Return the first positive count in ``wmic`` output, skipping the header and blanks."""

    for line in output.strip().splitlines():
        cores = _positive_int(line)
        if cores is not None:
            return cores
    return None


def probe_cpu_cores(
    *,
    system: str | None = None,
    runner: CommandRunner = run_command,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> ProbeResult:
    """Ask the host operating system how many CPU cores it has.

    Args:
        system: Platform name as reported by :func:`platform.system`; detected when omitted.
        runner: Command runner used to launch the probe.
        timeout: Seconds to wait for the probe before giving up.

    Returns:
        ProbeResult: The detected core count, or the reason no count is available.
    """

    family = _probe_family(system if system is not None else platform.system())
    if family is None:
        return ProbeResult.unavailable(f"unsupported platform {system or platform.system()!r}")
    command: Sequence[str] = WINDOWS_PROBE if family == "windows" else POSIX_PROBE
    try:
        completed = runner(
            list(command),
            options=CommandOptions(capture_output=True, check=True, timeout=timeout, discard_stdin=True),
        )
    except (OSError, SubprocessExecutionError, subprocess.SubprocessError, ValueError) as exc:
        return ProbeResult.unavailable(f"{command[0]} failed: {exc}")

    output = completed.stdout or ""
    if completed.returncode != 0:
        return ProbeResult.unavailable(f"{command[0]} exited with status {completed.returncode}")
    cores = _parse_windows_output(output) if family == "windows" else _positive_int(output)
    if cores is None:
        return ProbeResult.unavailable(f"unparseable {command[0]} output {output.strip()!r}")
    return ProbeResult.found(cores)


def resolve_parallel(value: int | str, *, probe: CoreProbe = probe_cpu_cores) -> int:
    """Turn the ``parallel`` option into a positive worker count.

    Args:
        value: A positive integer, or the literal ``"auto"``.
        probe: Core probe consulted for ``"auto"``.

    Returns:
        int: Worker count, always at least 1.

    Raises:
        InvalidConfigurationError: If ``value`` is a string other than ``"auto"``
            or an integer below 1.
    """

    if isinstance(value, str):
        if value != AUTO:
            raise InvalidConfigurationError(
                f"When option 'parallel' is non-numeric it can only be 'auto', got '{value}'",
            )
        match probe():
            case ProbeResult(cores=int(cores)) if cores >= 1:
                return cores
            case ProbeResult(reason=reason):
                LOGGER.debug("CPU probe unavailable (%s); running phpcs serially", reason)
        return SERIAL_WORKERS
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigurationError(f"Option 'parallel' must be an integer or 'auto', got {value!r}")
    if value < 1:
        raise InvalidConfigurationError(
            f"Invalid number specified for option 'parallel'. Please provide a positive integer. Got {value}",
        )
    return value


__all__ = [
    "AUTO",
    "CoreProbe",
    "ProbeResult",
    "SERIAL_WORKERS",
    "probe_cpu_cores",
    "resolve_parallel",
]
