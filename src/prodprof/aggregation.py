"""Aggregation of execution reports into per-file profiling results.

Every instrumentation point known to the mapping gets two statistics over
the whole batch of reports:

- ``executed``: percentage of reports in which the point appears;
- ``data.frequency``: mean frequency, counting a missing point as 0.

Points that appear in a report but not in the mapping are never looked up.
Both statistics are computed from integer counts, so the rounded result is
exact and does not depend on report order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from prodprof.models.profiling import ProfilingData, ProfilingResult, ProfilingResultByFile

if TYPE_CHECKING:
    from prodprof.parsing.mapping import MappingTable

logger = logging.getLogger(__name__)

ExecutionReport = Mapping[str, ProfilingData]

# executed is a percentage with two decimals, i.e. hundredths of a percent
_EXECUTED_SCALE = 100
_PERCENT = 100


def divide_half_up(numerator: int, denominator: int) -> int:
    """Return ``numerator / denominator`` rounded to the nearest integer, halves up.

    Both operands must be non-negative and *denominator* positive.
    """
    return (2 * numerator + denominator) // (2 * denominator)


class PointTally:
    """Counters for one instrumentation point over a batch of reports."""

    def __init__(self) -> None:
        self.reports = 0
        self.present = 0
        self.frequency_total = 0

    def add(self, data: ProfilingData | None) -> None:
        """Count one report; *data* is ``None`` when the point is absent."""
        self.reports += 1
        if data is not None:
            self.present += 1
            self.frequency_total += data.frequency

    @property
    def executed_percent(self) -> float:
        if not self.reports:
            return 0.0
        hundredths = divide_half_up(self.present * _PERCENT * _EXECUTED_SCALE, self.reports)
        return hundredths / _EXECUTED_SCALE

    @property
    def average_frequency(self) -> int:
        if not self.reports:
            return 0
        return divide_half_up(self.frequency_total, self.reports)


def aggregate(
    mapping: MappingTable,
    reports: Sequence[ExecutionReport],
) -> list[ProfilingResultByFile]:
    """Combine *reports* into profiling results grouped by file and function.

    Args:
        mapping: The parsed instrumentation mapping.
        reports: Execution reports in a stable order. An empty sequence
            yields zero statistics for every point.

    Returns:
        One entry per file name of the mapping, in mapping order. Files with
        no instrumentation points get an empty function grouping.
    """
    results: list[ProfilingResultByFile] = []

    for file_name in mapping.file_names:
        point_ids = mapping.matching(lambda pid, name=file_name: mapping.file_name(pid) == name)

        per_function: dict[str, list[ProfilingResult]] = {}
        for point_id in point_ids:
            result = _profile_point(mapping, point_id, reports)
            per_function.setdefault(mapping.function_name(point_id), []).append(result)

        results.append(
            ProfilingResultByFile(file_name=file_name, profiling_data_per_function=per_function)
        )
        logger.debug(
            "Aggregated %d points across %d functions for %s",
            len(point_ids),
            len(per_function),
            file_name,
        )

    logger.info(
        "Aggregated %d reports over %d points in %d files",
        len(reports),
        len(mapping),
        len(results),
    )
    return results


def _profile_point(
    mapping: MappingTable,
    point_id: str,
    reports: Sequence[ExecutionReport],
) -> ProfilingResult:
    """Compute the statistics of a single point over all reports."""
    tally = PointTally()
    for report in reports:
        tally.add(report.get(point_id))

    return ProfilingResult(
        param=point_id,
        type=mapping.type_of(point_id),
        line_no=mapping.line_no(point_id),
        col_no=mapping.col_no(point_id),
        executed=tally.executed_percent,
        data=ProfilingData(frequency=tally.average_frequency),
    )
