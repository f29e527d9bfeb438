"""Exceptions raised while decoding mappings and loading execution reports."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class ProfilingError(Exception):
    """Base exception for all fatal input errors."""


class StructuralError(ProfilingError):
    """Raised when the mapping document is missing required lines or headers."""


class DecodeError(ProfilingError):
    """Raised when a VLQ stream is malformed or a decoded value is out of range."""


class UnknownKindError(ProfilingError):
    """Raised when an instrumentation type string is not recognized."""

    def __init__(self, value: str) -> None:
        """Initialize with the offending type string.

        Args:
            value: The raw type string found in the mapping document.
        """
        super().__init__(
            f"A valid type was not provided in the instrumentation mapping report: {value!r}"
        )
        self.value = value


class ReportParseError(ProfilingError):
    """Raised when an execution report does not have the expected shape."""

    def __init__(self, path: Path | str, reason: str) -> None:
        """Initialize with the report location and a description of the problem.

        Args:
            path: Location of the malformed report.
            reason: What was wrong with it.
        """
        super().__init__(f"Malformed execution report {path}: {reason}")
        self.path = path
        self.reason = reason
