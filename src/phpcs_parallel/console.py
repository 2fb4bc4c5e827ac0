# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich consoles shared by the CLI status lines and phpcs report output."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cache

from rich.console import Console
from rich.text import Text

NO_COLOR_ENV = "NO_COLOR"


def detect_tty() -> bool:
    """Return ``True`` when stdout is attached to a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@dataclass(frozen=True, slots=True)
class OutputStyle:
    """Resolved presentation preferences for one CLI invocation."""

    color: bool
    emoji: bool

    @classmethod
    def from_flags(
        cls,
        *,
        no_color: bool = False,
        no_emoji: bool = False,
        env: Mapping[str, str] | None = None,
    ) -> OutputStyle:
        """Combine CLI flags, ``NO_COLOR`` and TTY detection.

        Args:
            no_color: ``--no-color`` was given.
            no_emoji: ``--no-emoji`` was given.
            env: Environment to consult; defaults to :data:`os.environ`.

        Returns:
            OutputStyle: Colour is enabled only on a terminal without ``NO_COLOR``.
        """

        environment = os.environ if env is None else env
        color = not no_color and not environment.get(NO_COLOR_ENV) and detect_tty()
        return cls(color=color, emoji=not no_emoji)


class RichConsoleManager:
    """Cache one :class:`Console` per :class:`OutputStyle`."""

    def __init__(self) -> None:
        self._consoles: dict[OutputStyle, Console] = {}

    def get(self, style: OutputStyle) -> Console:
        """Return the console rendering with ``style``."""

        console = self._consoles.get(style)
        if console is None:
            console = Console(
                color_system="auto" if style.color else None,
                no_color=not style.color,
                emoji=style.emoji,
                highlight=False,
                soft_wrap=True,
            )
            self._consoles[style] = console
        return console

    def reset(self) -> None:
        """Forget cached consoles, e.g. after stdout was replaced."""

        self._consoles.clear()


@cache
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide :class:`RichConsoleManager`."""

    return RichConsoleManager()


def print_block(text: str, style: OutputStyle) -> None:
    """Print phpcs or phpcbf output verbatim; blank ``text`` prints nothing."""

    if text:
        get_console_manager().get(style).print(Text(text))


__all__ = ["OutputStyle", "RichConsoleManager", "detect_tty", "get_console_manager", "print_block"]
