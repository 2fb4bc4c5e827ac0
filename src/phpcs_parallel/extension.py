# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Task registration for hosts that discover tasks through entry points.

An extension is any object exposing ``tasks()``, a mapping of task names to
factories. Packages advertise extensions under the
``phpcs_parallel.extensions`` entry-point group; the package registers its
own :class:`ParallelPhpcsExtension` there as well.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from importlib import metadata
from importlib.metadata import EntryPoint, EntryPoints
from typing import Any, Final, Protocol, TypeAlias, cast

from .task import TASK_NAME, ParallelPhpcsTask

LOGGER = logging.getLogger(__name__)

EXTENSION_GROUP: Final[str] = "phpcs_parallel.extensions"

TaskFactory: TypeAlias = Callable[..., Any]
_EntryPointSource: TypeAlias = EntryPoints | Mapping[str, Sequence[EntryPoint]]


class Extension(Protocol):
    """Contributor of named task factories."""

    def tasks(self) -> Mapping[str, TaskFactory]:
        """Return task factories keyed by task name."""
        ...


class ParallelPhpcsExtension:
    """Extension contributing the parallel phpcs task."""

    def tasks(self) -> Mapping[str, TaskFactory]:
        """Return the ``phpcs_parallel`` task factory.

        The factory accepts the same arguments as
        :meth:`ParallelPhpcsTask.from_options`.
        """

        return {TASK_NAME: ParallelPhpcsTask.from_options}


def _select_entry_points(entries: _EntryPointSource, group: str) -> Iterable[EntryPoint]:
    if isinstance(entries, Mapping):
        return entries.get(group, ())
    return entries.select(group=group)


def _load_extension(entry: EntryPoint) -> Extension:
    """Load ``entry`` and instantiate it when it points at a class or factory."""

    loaded = entry.load()
    if isinstance(loaded, type) or (callable(loaded) and not hasattr(loaded, "tasks")):
        extension = loaded()
    else:
        extension = loaded
    if not callable(getattr(extension, "tasks", None)):
        raise ValueError(f"entry point {entry.name!r} does not provide tasks()")
    return cast(Extension, extension)


def load_extensions(group: str = EXTENSION_GROUP) -> tuple[Extension, ...]:
    """Return extensions advertised under the entry-point ``group``.

    Args:
        group: Entry-point group name to inspect.

    Returns:
        tuple[Extension, ...]: Loaded extensions. Entries that fail to import
        are logged at debug level and skipped.
    """

    selected = _select_entry_points(cast(_EntryPointSource, metadata.entry_points()), group)
    extensions: list[Extension] = []
    for entry in selected:
        try:
            extensions.append(_load_extension(entry))
        except (AttributeError, ImportError, ValueError, RuntimeError, TypeError) as exc:
            LOGGER.debug("skipping extension %s: %s", entry.name, exc)
    return tuple(extensions)


def build_task_registry(extensions: Iterable[Extension] | None = None) -> dict[str, TaskFactory]:
    """Merge task factories from the built-in extension and ``extensions``.

    Args:
        extensions: Additional extensions; entry-point extensions are loaded
            when omitted. Later extensions override earlier names.

    Returns:
        dict[str, TaskFactory]: Task factories keyed by name.
    """

    registry: dict[str, TaskFactory] = dict(ParallelPhpcsExtension().tasks())
    for extension in extensions if extensions is not None else load_extensions():
        registry.update(extension.tasks())
    return registry


__all__ = [
    "EXTENSION_GROUP",
    "Extension",
    "ParallelPhpcsExtension",
    "TaskFactory",
    "build_task_registry",
    "load_extensions",
]
