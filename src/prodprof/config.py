"""Configuration parsing from ``.prodprof.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".prodprof.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

_DEFAULT_MAPPING = "instrumentReport.txt"
_DEFAULT_REPORTS_DIR = "reports"
_DEFAULT_OUTPUT = "finalResult.json"
_DEFAULT_PATTERN = "*"


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass
class ReportConfig:
    """Inputs and output of a profiling run."""

    mapping: str = _DEFAULT_MAPPING
    """Instrumentation mapping document written by the compiler."""

    reports_dir: str = _DEFAULT_REPORTS_DIR
    """Directory holding one execution report per deployment."""

    output: str = _DEFAULT_OUTPUT
    """Path of the aggregated JSON result."""

    pattern: str = _DEFAULT_PATTERN
    """Glob selecting report files inside ``reports_dir``."""

    workers: int = 1
    """Number of threads used to read reports."""


@dataclass
class ProdprofConfig:
    """Top-level ``.prodprof.yml`` configuration."""

    root: str
    """Project root; relative paths are resolved against it."""

    report: ReportConfig = field(default_factory=ReportConfig)

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML, after environment variable resolution."""

    def resolve_path(self, value: str) -> Path:
        """Return *value* as an absolute path anchored at :attr:`root`."""
        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return Path(self.root) / path

    @property
    def mapping_path(self) -> Path:
        return self.resolve_path(self.report.mapping)

    @property
    def reports_path(self) -> Path:
        return self.resolve_path(self.report.reports_dir)

    @property
    def output_path(self) -> Path:
        return self.resolve_path(self.report.output)


def _setting(report_raw: dict[str, Any], key: str, env_var: str | None, default: Any) -> Any:
    """Return a ``report`` setting; an absent or empty key falls back to *env_var*."""
    value = report_raw.get(key)
    if value is None and env_var:
        value = os.environ.get(env_var)
    return default if value is None else value


def _parse_report_config(raw: dict[str, Any]) -> ReportConfig:
    """Parse the ``report`` section, falling back to environment variables.

    Raises:
        ValueError: If ``workers`` is not an integer.
    """
    report_raw = raw.get("report", {})
    if not isinstance(report_raw, dict):
        report_raw = {}

    workers = _setting(report_raw, "workers", "PRODPROF_WORKERS", 1)
    try:
        workers = int(workers)
    except (TypeError, ValueError) as e:
        msg = f"report.workers must be an integer (got: {workers!r})"
        raise ValueError(msg) from e

    return ReportConfig(
        mapping=str(_setting(report_raw, "mapping", "PRODPROF_MAPPING", _DEFAULT_MAPPING)),
        reports_dir=str(
            _setting(report_raw, "reports_dir", "PRODPROF_REPORTS_DIR", _DEFAULT_REPORTS_DIR)
        ),
        output=str(_setting(report_raw, "output", "PRODPROF_OUTPUT", _DEFAULT_OUTPUT)),
        pattern=str(_setting(report_raw, "pattern", None, _DEFAULT_PATTERN)),
        workers=workers,
    )


def load_config(root: str | Path) -> ProdprofConfig:
    """Load and parse ``.prodprof.yml`` from *root*.

    Falls back to defaults and environment variables when the YAML file
    is missing or incomplete.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILE_NAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        text = config_file.read_text(encoding="utf-8")
        parsed = yaml.safe_load(text)
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        else:
            logger.warning("Ignoring %s: top level is not a mapping", config_file)

    return ProdprofConfig(
        root=str(root_path),
        report=_parse_report_config(raw),
        raw=raw,
    )


def validate_config(config: ProdprofConfig) -> list[str]:
    """Validate configuration values.

    Returns:
        List of error messages (empty if valid)
    """
    errors: list[str] = []
    report = config.report

    for name in ("mapping", "reports_dir", "output"):
        if not getattr(report, name).strip():
            errors.append(f"report.{name} must not be empty")

    if not report.pattern.strip():
        errors.append("report.pattern must not be empty")

    if report.workers < 1:
        errors.append(f"report.workers must be at least 1 (got: {report.workers})")

    return errors
