# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Status lines for the CLI and the package debug logger."""

from __future__ import annotations

import logging
from typing import Final, Literal

from rich.logging import RichHandler
from rich.text import Text

from .console import OutputStyle, get_console_manager

PACKAGE_LOGGER: Final[str] = "phpcs_parallel"

Level = Literal["info", "ok", "warn", "fail"]

# level -> (emoji prefix, rich style)
_LEVELS: Final[dict[Level, tuple[str, str]]] = {
    "info": ("ℹ️ ", "cyan"),
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "bold red"),
}


def status_line(level: Level, msg: str, style: OutputStyle) -> None:
    """Print ``msg`` with the emoji prefix and colour registered for ``level``.

    Args:
        level: One of ``info``, ``ok``, ``warn`` or ``fail``.
        msg: Text to print.
        style: Colour and emoji preferences of the current invocation.
    """

    prefix, rich_style = _LEVELS[level]
    text = Text(f"{prefix}{msg}" if style.emoji else msg)
    if style.color:
        text.stylize(rich_style)
    get_console_manager().get(style).print(text)


def info(msg: str, style: OutputStyle) -> None:
    status_line("info", msg, style)


def ok(msg: str, style: OutputStyle) -> None:
    status_line("ok", msg, style)


def warn(msg: str, style: OutputStyle) -> None:
    status_line("warn", msg, style)


def fail(msg: str, style: OutputStyle) -> None:
    status_line("fail", msg, style)


def configure_debug_logging(enabled: bool) -> None:
    """Send ``phpcs_parallel`` debug records to a :class:`RichHandler` when ``enabled``.

    Commands, probe fallbacks and skipped extensions are logged at DEBUG
    level; without ``--debug`` only warnings propagate.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    if not enabled:
        logger.setLevel(logging.WARNING)
        return
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(show_path=False, markup=False, rich_tracebacks=True))
    logger.setLevel(logging.DEBUG)


__all__ = ["PACKAGE_LOGGER", "configure_debug_logging", "fail", "info", "ok", "status_line", "warn"]
