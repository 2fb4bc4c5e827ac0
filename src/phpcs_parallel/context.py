# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run contexts and the candidate file collection handed to tasks."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import ClassVar, Final

from .process import CommandOptions, CommandRunner, run_command

LOGGER = logging.getLogger(__name__)

STAGED_FILES_COMMAND: Final[tuple[str, ...]] = ("git", "diff", "--name-only", "--cached", "--diff-filter=ACMR")


def _normalise_extension(extension: str) -> str:
    return extension.lstrip(".").lower()


def _matches(relative: str, pattern: str) -> bool:
    """Return ``True`` when ``relative`` matches ``pattern`` as a glob or a directory prefix."""

    if fnmatchcase(relative, pattern):
        return True
    prefix = pattern.rstrip("/")
    return bool(prefix) and relative.startswith(f"{prefix}/")


@dataclass(frozen=True, slots=True)
class FileCollection:
    """Immutable, filterable set of candidate files below ``root``."""

    root: Path
    files: tuple[Path, ...] = ()

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.files)

    def relative(self, path: Path) -> str:
        """Return ``path`` relative to :attr:`root` in POSIX form when possible."""

        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def _filtered(self, keep: Iterable[Path]) -> FileCollection:
        return FileCollection(root=self.root, files=tuple(keep))

    def extensions(self, extensions: Sequence[str]) -> FileCollection:
        """Keep files whose suffix is one of ``extensions`` (with or without the dot)."""

        wanted = {_normalise_extension(ext) for ext in extensions}
        return self._filtered(path for path in self.files if _normalise_extension(path.suffix) in wanted)

    def paths(self, patterns: Sequence[str]) -> FileCollection:
        """Keep files matching at least one pattern; an empty pattern list keeps everything."""

        if not patterns:
            return self
        return self._filtered(
            path for path in self.files if any(_matches(self.relative(path), pattern) for pattern in patterns)
        )

    def not_paths(self, patterns: Sequence[str]) -> FileCollection:
        """Drop files matching any pattern."""

        if not patterns:
            return self
        return self._filtered(
            path for path in self.files if not any(_matches(self.relative(path), pattern) for pattern in patterns)
        )


@dataclass(frozen=True, slots=True)
class TaskContext:
    """Base context describing the files a task may inspect."""

    files: FileCollection
    name: ClassVar[str] = "context"

    @property
    def root(self) -> Path:
        return self.files.root


class RunContext(TaskContext):
    """Ad hoc run over explicitly selected paths."""

    name: ClassVar[str] = "run"

    @classmethod
    def from_paths(cls, root: Path, paths: Sequence[Path] = ()) -> RunContext:
        """Collect files from ``paths`` (directories expanded recursively).

        Args:
            root: Project root; relative ``paths`` are resolved against it.
            paths: Files or directories to include; defaults to ``root`` itself.

        Returns:
            RunContext: Context over the sorted, de-duplicated files.
        """

        resolved_root = root.resolve()
        collected: set[Path] = set()
        for entry in paths or (resolved_root,):
            candidate = entry if entry.is_absolute() else resolved_root / entry
            if candidate.is_dir():
                collected.update(path.resolve() for path in candidate.rglob("*") if path.is_file())
            elif candidate.is_file():
                collected.add(candidate.resolve())
            else:
                LOGGER.debug("skipping missing path %s", candidate)
        return cls(files=FileCollection(root=resolved_root, files=tuple(sorted(collected))))


class GitPreCommitContext(TaskContext):
    """Run triggered from a git pre-commit hook over the staged files."""

    name: ClassVar[str] = "git_pre_commit"

    @classmethod
    def from_git(cls, root: Path, *, runner: CommandRunner = run_command) -> GitPreCommitContext:
        """Collect staged files that still exist in the working tree.

        Args:
            root: Repository root directory.
            runner: Command runner used to query git.

        Returns:
            GitPreCommitContext: Context over the staged files; empty when git fails.
        """

        resolved_root = root.resolve()
        completed = runner(
            list(STAGED_FILES_COMMAND),
            options=CommandOptions(cwd=resolved_root, capture_output=True, check=False, discard_stdin=True),
        )
        if completed.returncode != 0:
            LOGGER.debug("git diff failed with status %s: %s", completed.returncode, completed.stderr)
            return cls(files=FileCollection(root=resolved_root))
        staged: list[Path] = []
        for raw in (completed.stdout or "").splitlines():
            stripped = raw.strip()
            if not stripped:
                continue
            candidate = (resolved_root / stripped).resolve()
            if candidate.exists():
                staged.append(candidate)
        return cls(files=FileCollection(root=resolved_root, files=tuple(sorted(set(staged)))))


__all__ = [
    "FileCollection",
    "GitPreCommitContext",
    "RunContext",
    "TaskContext",
]
