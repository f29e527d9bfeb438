"""Output writers for profiling results."""

from prodprof.reporters.json_reporter import JSONReporter
from prodprof.reporters.terminal import CLIReporter, reporter

__all__ = [
    "CLIReporter",
    "JSONReporter",
    "reporter",
]
