# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the parallel phpcs task."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from .errors import InvalidConfigurationError

DEFAULT_LINTER: Final[str] = "phpcs"
DEFAULT_FIXER: Final[str] = "phpcbf"
DEFAULT_PROBE_TIMEOUT: Final[float] = 5.0

ParallelSetting = StrictInt | StrictStr


def _coerce_string_tuple(value: Sequence[str] | str | None) -> tuple[str, ...] | Any:
    """Return ``value`` as a tuple of strings, leaving foreign types for pydantic to reject."""

    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


class LintConfig(BaseModel):
    """Validated phpcs options for a single task run.

    Field aliases match the option names accepted in configuration files, so
    ``LintConfig.model_validate({"triggered_by": ["php"], "parallel": "auto"})``
    and ``LintConfig(triggered_by_extensions=("php",), parallelism="auto")``
    are equivalent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    standard: tuple[str, ...] = ()
    tab_width: PositiveInt | None = None
    encoding: str | None = None
    whitelist_patterns: tuple[str, ...] = ()
    ignore_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = Field(default=(), alias="exclude")
    sniffs: tuple[str, ...] = ()
    severity: NonNegativeInt | None = None
    error_severity: NonNegativeInt | None = None
    warning_severity: NonNegativeInt | None = None
    triggered_by_extensions: tuple[str, ...] = Field(default=("php",), alias="triggered_by", min_length=1)
    report_format: str | None = Field(default="full", alias="report")
    report_width: PositiveInt | None = None
    show_sniff_path: StrictBool = Field(default=True, alias="show_sniffs_error_path")
    parallelism: ParallelSetting = Field(default=1, alias="parallel")

    @field_validator(
        "standard",
        "whitelist_patterns",
        "ignore_patterns",
        "exclude_patterns",
        "sniffs",
        "triggered_by_extensions",
        mode="before",
    )
    @classmethod
    def _coerce_sequences(cls, value: Sequence[str] | str | None) -> tuple[str, ...] | Any:
        return _coerce_string_tuple(value)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> LintConfig:
        """Build a configuration from raw option names, translating validation errors.

        Args:
            options: Mapping keyed by option names such as ``tab_width`` or ``parallel``.

        Returns:
            LintConfig: Validated, immutable configuration.

        Raises:
            InvalidConfigurationError: If any option has an unexpected type or value.
        """

        try:
            return cls.model_validate(dict(options))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                for error in exc.errors()
            )
            raise InvalidConfigurationError(f"Invalid phpcs options: {problems}") from exc


class TaskSettings(BaseModel):
    """Host-side settings that are not phpcs options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    root: Path = Field(default_factory=Path.cwd)
    linter: str = DEFAULT_LINTER
    fixer: str = DEFAULT_FIXER
    probe_timeout: float = Field(default=DEFAULT_PROBE_TIMEOUT, gt=0)


__all__ = [
    "DEFAULT_FIXER",
    "DEFAULT_LINTER",
    "DEFAULT_PROBE_TIMEOUT",
    "LintConfig",
    "ParallelSetting",
    "TaskSettings",
]
