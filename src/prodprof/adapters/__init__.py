"""Loaders for execution reports sent by instrumented deployments."""

from prodprof.adapters.reports import find_report_files, load_report, load_reports, parse_report

__all__ = [
    "find_report_files",
    "load_report",
    "load_reports",
    "parse_report",
]
