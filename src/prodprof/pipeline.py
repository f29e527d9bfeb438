"""End-to-end profiling run: mapping + reports -> aggregated JSON."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from prodprof.adapters.reports import load_reports
from prodprof.aggregation import aggregate
from prodprof.parsing.mapping import MappingTable
from prodprof.reporters.json_reporter import JSONReporter

if TYPE_CHECKING:
    from pathlib import Path

    from prodprof.models.profiling import ProfilingResultByFile

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of a successful profiling run."""

    mapping: MappingTable
    results: list[ProfilingResultByFile] = field(default_factory=list)
    report_count: int = 0
    output_path: Path | None = None
    duration_s: float = 0.0


def run_pipeline(
    mapping_path: Path,
    reports_dir: Path,
    output_path: Path | None = None,
    *,
    pattern: str = "*",
    workers: int = 1,
) -> PipelineResult:
    """Parse the mapping, load every report, aggregate and write the result.

    Each stage finishes before the next starts. Any ``ProfilingError``
    propagates and nothing is written.

    Args:
        mapping_path: Instrumentation mapping document.
        reports_dir: Directory with one JSON report per deployment.
        output_path: Where to write the JSON result. ``None`` skips writing.
        pattern: Glob selecting report files inside *reports_dir*.
        workers: Threads used to read reports.
    """
    start = time.monotonic()

    mapping = MappingTable.from_path(mapping_path)
    reports = load_reports(reports_dir, pattern=pattern, workers=workers)
    results = aggregate(mapping, reports)

    written: Path | None = None
    if output_path is not None:
        written = JSONReporter().generate(output_path, results)

    duration = time.monotonic() - start
    logger.info("Profiling run finished in %.2fs", duration)
    return PipelineResult(
        mapping=mapping,
        results=results,
        report_count=len(reports),
        output_path=written,
        duration_s=duration,
    )
