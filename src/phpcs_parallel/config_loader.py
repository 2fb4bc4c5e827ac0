# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Load phpcs task options from ``pyproject.toml`` and ``.phpcs-parallel.toml``."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from .config import LintConfig
from .errors import InvalidConfigurationError

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PROJECT_CONFIG_FILENAME: Final[str] = ".phpcs-parallel.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "phpcs-parallel"

_ENV_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class TomlConfigSource:
    """Read a TOML document and return its top-level table."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        self.path = path
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise InvalidConfigurationError(f"Malformed TOML in {self.path}: {exc}") from exc
        return _expand_env(self._select(data), self._env)

    def _select(self, data: Mapping[str, Any]) -> Mapping[str, Any]:
        return data

    def describe(self) -> str:
        return f"TOML configuration at {self.path}"


class PyProjectConfigSource(TomlConfigSource):
    """Read options from ``[tool.phpcs-parallel]`` within ``pyproject.toml``."""

    def _select(self, data: Mapping[str, Any]) -> Mapping[str, Any]:
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise InvalidConfigurationError(
                f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {self.path} must be a table",
            )
        return section

    def describe(self) -> str:
        return f"pyproject.toml ({self.path})"


def _expand_env(value: Any, env: Mapping[str, str]) -> Any:
    """Substitute ``${VAR}`` references inside strings nested in ``value``.

    Unknown variables are left untouched.
    """

    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda match: env.get(match.group(1), match.group(0)), value)
    if isinstance(value, Mapping):
        return {key: _expand_env(entry, env) for key, entry in value.items()}
    if isinstance(value, list):
        return [_expand_env(entry, env) for entry in value]
    return value


def config_sources(root: Path, path: Path | None = None) -> list[TomlConfigSource]:
    """Return configuration sources in increasing precedence order.

    Args:
        root: Project root holding ``pyproject.toml``.
        path: Optional explicit configuration file replacing ``.phpcs-parallel.toml``.

    Returns:
        list[TomlConfigSource]: Sources to merge, lowest precedence first.

    Raises:
        InvalidConfigurationError: If an explicit ``path`` does not exist.
    """

    sources: list[TomlConfigSource] = [PyProjectConfigSource(root / PYPROJECT_FILENAME)]
    if path is not None:
        if not path.exists():
            raise InvalidConfigurationError(f"Configuration file {path} does not exist")
        sources.append(TomlConfigSource(path))
    else:
        sources.append(TomlConfigSource(root / PROJECT_CONFIG_FILENAME))
    return sources


def load_options(root: Path, path: Path | None = None) -> dict[str, Any]:
    """Return merged raw options for ``root`` without validating them."""

    merged: dict[str, Any] = {}
    for source in config_sources(root, path):
        merged.update(source.load())
    return merged


def load_lint_config(root: Path, path: Path | None = None) -> LintConfig:
    """Load and validate the phpcs options applicable to ``root``.

    Args:
        root: Project root directory.
        path: Optional explicit configuration file.

    Returns:
        LintConfig: Defaults overlaid with ``pyproject.toml`` and the project file.

    Raises:
        InvalidConfigurationError: If a file is malformed or an option is invalid.
    """

    return LintConfig.from_options(load_options(root, path))


__all__ = [
    "PROJECT_CONFIG_FILENAME",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "config_sources",
    "load_lint_config",
    "load_options",
]
