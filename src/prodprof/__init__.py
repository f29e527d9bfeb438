"""prodprof — aggregate production instrumentation reports into profiling summaries."""

__version__ = "0.1.0"
