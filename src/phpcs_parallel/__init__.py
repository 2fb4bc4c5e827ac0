# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parallel phpcs task for code-quality pipelines."""

from __future__ import annotations

from importlib import metadata

from .arguments import build_fix_args, build_lint_args
from .config import LintConfig
from .errors import InvalidConfigurationError, PhpcsParallelError, ToolMissingError
from .extension import ParallelPhpcsExtension, build_task_registry
from .results import FixerAction, FixerResult, TaskResult, TaskResultStatus
from .task import ParallelPhpcsTask
from .workers import AUTO, probe_cpu_cores, resolve_parallel

__all__ = [
    "AUTO",
    "FixerAction",
    "FixerResult",
    "InvalidConfigurationError",
    "LintConfig",
    "ParallelPhpcsExtension",
    "ParallelPhpcsTask",
    "PhpcsParallelError",
    "TaskResult",
    "TaskResultStatus",
    "ToolMissingError",
    "__version__",
    "build_fix_args",
    "build_lint_args",
    "build_task_registry",
    "probe_cpu_cores",
    "resolve_parallel",
]

try:
    __version__ = metadata.version("phpcs-parallel")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
