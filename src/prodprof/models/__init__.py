"""Data models for prodprof."""

from prodprof.models.instrumentation import InstrumentationType, PointRecord
from prodprof.models.profiling import ProfilingData, ProfilingResult, ProfilingResultByFile

__all__ = [
    "InstrumentationType",
    "PointRecord",
    "ProfilingData",
    "ProfilingResult",
    "ProfilingResultByFile",
]
