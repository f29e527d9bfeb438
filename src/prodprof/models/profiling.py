"""Profiling result models produced by report aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from prodprof.models.instrumentation import InstrumentationType


@dataclass
class ProfilingData:
    """Measurement collected for one instrumentation point."""

    frequency: int
    """Number of times the point fired (averaged when aggregated)."""

    def to_dict(self) -> dict[str, Any]:
        return {"frequency": self.frequency}


@dataclass
class ProfilingResult:
    """Aggregated statistics for a single instrumentation point."""

    param: str
    """Point identifier from the mapping."""

    type: InstrumentationType
    """Kind of site the point instruments."""

    line_no: int
    """Source line of the point."""

    col_no: int
    """Source column of the point."""

    executed: float = 0.0
    """Percentage (0.0 to 100.0) of reports in which the point appeared."""

    data: ProfilingData = field(default_factory=lambda: ProfilingData(frequency=0))
    """Average measurement across all reports."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "param": self.param,
            "type": self.type.value,
            "lineNo": self.line_no,
            "colNo": self.col_no,
            "executed": self.executed,
            "data": self.data.to_dict(),
        }


@dataclass
class ProfilingResultByFile:
    """Profiling results of one source file, grouped by function name."""

    file_name: str
    profiling_data_per_function: dict[str, list[ProfilingResult]] = field(default_factory=dict)

    @property
    def point_count(self) -> int:
        """Return the number of instrumentation points in this file."""
        return sum(len(results) for results in self.profiling_data_per_function.values())

    @property
    def executed_point_count(self) -> int:
        """Return the number of points that fired in at least one report."""
        return sum(
            1
            for results in self.profiling_data_per_function.values()
            for result in results
            if result.executed > 0
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileName": self.file_name,
            "profilingDataPerFunction": {
                function_name: [result.to_dict() for result in results]
                for function_name, results in self.profiling_data_per_function.items()
            },
        }
