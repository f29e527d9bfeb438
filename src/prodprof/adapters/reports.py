"""Execution report loader.

Each deployment of the instrumented code sends one JSON report mapping
point identifiers to the data collected for them::

    {
      "aB3": {"frequency": 12},
      "x_9": {"frequency": 1}
    }

Reports are returned sorted by file name so that aggregation always sees
them in the same order, even when they are read in parallel.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from prodprof.errors import ReportParseError
from prodprof.models.profiling import ProfilingData

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_DEFAULT_PATTERN = "*"


def find_report_files(reports_dir: Path, pattern: str = _DEFAULT_PATTERN) -> list[Path]:
    """Return the report files in *reports_dir* matching *pattern*, sorted by name.

    Subdirectories and hidden files are skipped.
    """
    if not reports_dir.is_dir():
        raise ReportParseError(reports_dir, "directory does not exist")

    return sorted(
        path
        for path in reports_dir.glob(pattern)
        if path.is_file() and not path.name.startswith(".")
    )


def parse_report(content: str, source: Path | str = "<string>") -> dict[str, ProfilingData]:
    """Parse one report document.

    Raises:
        ReportParseError: If the document is not a JSON object of
            ``{"frequency": <non-negative int>}`` objects.
    """
    try:
        raw: Any = json.loads(content)
    except json.JSONDecodeError as e:
        raise ReportParseError(source, f"invalid JSON ({e})") from e

    if not isinstance(raw, dict):
        raise ReportParseError(source, f"expected a JSON object, got {type(raw).__name__}")

    report: dict[str, ProfilingData] = {}
    for point_id, measurement in raw.items():
        if not isinstance(measurement, dict):
            raise ReportParseError(source, f"measurement for {point_id!r} is not an object")

        frequency = measurement.get("frequency")
        # bool is an int subclass; reject it explicitly
        if isinstance(frequency, bool) or not isinstance(frequency, int) or frequency < 0:
            raise ReportParseError(
                source,
                f"frequency for {point_id!r} must be a non-negative integer, got {frequency!r}",
            )
        report[point_id] = ProfilingData(frequency=frequency)
    return report


def load_report(path: Path) -> dict[str, ProfilingData]:
    """Read and parse the report stored at *path*."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReportParseError(path, f"cannot be read ({e})") from e
    return parse_report(content, path)


def load_reports(
    reports_dir: Path,
    *,
    pattern: str = _DEFAULT_PATTERN,
    workers: int = 1,
) -> list[dict[str, ProfilingData]]:
    """Load every report in *reports_dir*.

    Args:
        reports_dir: Directory holding one report file per deployment.
        pattern: Glob selecting the report files.
        workers: Number of threads reading reports. Order of the result
            does not depend on it.

    Returns:
        Parsed reports, in file name order.

    Raises:
        ReportParseError: If the directory is missing or any report is
            malformed. Nothing is returned for a partially valid batch.
    """
    paths = find_report_files(reports_dir, pattern)
    logger.info("Loading %d execution reports from %s", len(paths), reports_dir)

    if workers <= 1 or len(paths) <= 1:
        reports = [load_report(path) for path in paths]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            reports = list(executor.map(load_report, paths))

    logger.debug("Loaded reports: %s", ", ".join(path.name for path in paths))
    return reports
