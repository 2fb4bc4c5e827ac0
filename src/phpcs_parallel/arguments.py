# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate a :class:`LintConfig` into phpcs/phpcbf command-line tokens."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Final

from .config import LintConfig
from .workers import resolve_parallel

ParallelResolver = Callable[[int | str], int]

SHOW_SNIFF_PATH_FLAG: Final[str] = "-s"
LIST_SEPARATOR: Final[str] = ","


def _joined(flag: str, values: Iterable[str]) -> tuple[str, ...]:
    items = [value for value in values if value]
    return (f"{flag}={LIST_SEPARATOR.join(items)}",) if items else ()


def _text(flag: str, value: str | None) -> tuple[str, ...]:
    return (f"{flag}={value}",) if value else ()


def _number(flag: str, value: int | None) -> tuple[str, ...]:
    return (f"{flag}={value:d}",) if value is not None else ()


def _option_tokens(config: LintConfig, resolver: ParallelResolver) -> tuple[str, ...]:
    """Return the option tokens shared by phpcs and phpcbf in their fixed order."""

    workers = resolver(config.parallelism)
    return (
        *_joined("--standard", config.standard),
        *_joined("--extensions", config.triggered_by_extensions),
        *_number("--tab-width", config.tab_width),
        *_text("--encoding", config.encoding),
        *_text("--report", config.report_format),
        *_number("--report-width", config.report_width),
        *_number("--severity", config.severity),
        *_number("--error-severity", config.error_severity),
        *_number("--warning-severity", config.warning_severity),
        *_joined("--sniffs", config.sniffs),
        *_joined("--ignore", config.ignore_patterns),
        *_joined("--exclude", config.exclude_patterns),
        f"--parallel={workers:d}",
        *((SHOW_SNIFF_PATH_FLAG,) if config.show_sniff_path else ()),
    )


def build_lint_args(config: LintConfig, *, resolver: ParallelResolver = resolve_parallel) -> tuple[str, ...]:
    """Return the phpcs option tokens for ``config``.

    Args:
        config: Validated task options.
        resolver: Converts the ``parallel`` option into a worker count.

    Returns:
        tuple[str, ...]: Ordered tokens, excluding the executable and file list.

    Raises:
        InvalidConfigurationError: If ``parallel`` is malformed.
    """

    return _option_tokens(config, resolver)


def build_fix_args(
    config: LintConfig,
    files: Sequence[str | Path],
    *,
    resolver: ParallelResolver = resolve_parallel,
) -> tuple[str, ...] | None:
    """Return the phpcbf tokens for ``files``, or ``None`` when there is nothing to fix.

    Each path becomes exactly one argv entry; no shell is involved, so paths are
    never glob-expanded or word-split.

    Args:
        config: Validated task options.
        files: Paths reported as fixable by phpcs.
        resolver: Converts the ``parallel`` option into a worker count.

    Returns:
        tuple[str, ...] | None: Option tokens followed by one token per file.
    """

    if not files:
        return None
    return (*_option_tokens(config, resolver), *(str(path) for path in files))


__all__ = ["ParallelResolver", "build_fix_args", "build_lint_args"]
