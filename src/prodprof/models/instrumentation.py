"""Instrumentation mapping models."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from prodprof.errors import UnknownKindError


class InstrumentationType(Enum):
    """Kind of code site an instrumentation point was placed on."""

    FUNCTION = "FUNCTION"
    BRANCH = "BRANCH"
    BRANCH_DEFAULT = "BRANCH_DEFAULT"

    @classmethod
    def parse(cls, value: str) -> InstrumentationType:
        """Return the member named by *value*.

        Raises:
            UnknownKindError: If *value* is not one of the known kinds.
        """
        try:
            return cls(value)
        except ValueError:
            raise UnknownKindError(value) from None

    @classmethod
    def parse_all(cls, values: list[str]) -> list[InstrumentationType]:
        """Parse a list of type strings, failing on the first unknown one."""
        return [cls.parse(value) for value in values]


class PointRecord(NamedTuple):
    """Decoded metadata of one instrumentation point.

    The three index fields refer into the file, function and type
    sequences of the mapping that owns the record.
    """

    file_index: int
    function_index: int
    type_index: int
    line_no: int
    col_no: int
