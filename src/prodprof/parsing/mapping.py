"""Instrumentation mapping parser.

The mapping document is written once by the production instrumentation
pass of the compiler. It has three header lines followed by one line per
instrumentation point::

    FileNames:["a.js","b.js"]
    FunctionNames:["foo","bar"]
    Types:["FUNCTION","BRANCH"]
    <pointId>:<VLQ><VLQ><VLQ><VLQ><VLQ>

Each record holds five VLQ integers: file index, function index, type
index, line number and column number.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from prodprof.errors import DecodeError, StructuralError
from prodprof.models.instrumentation import InstrumentationType, PointRecord
from prodprof.parsing.vlq import CharCursor, decode

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_FILE_NAMES_PREFIX = "FileNames:"
_FUNCTION_NAMES_PREFIX = "FunctionNames:"
_TYPES_PREFIX = "Types:"
_HEADER_LINES = 3


class MappingTable:
    """Immutable lookup table from point identifier to source location.

    Build it with :meth:`parse` or :meth:`from_path`; the sequences and
    the point table are read-only afterwards.
    """

    def __init__(
        self,
        file_names: list[str],
        function_names: list[str],
        types: list[InstrumentationType],
        points: dict[str, PointRecord],
    ) -> None:
        self._file_names = tuple(file_names)
        self._function_names = tuple(function_names)
        self._types = tuple(types)
        self._points: Mapping[str, PointRecord] = MappingProxyType(dict(points))

    # ── Construction ─────────────────────────────────────────────

    @classmethod
    def from_path(cls, path: Path) -> MappingTable:
        """Read and parse the mapping document at *path*."""
        logger.info("Reading instrumentation mapping from %s", path)
        try:
            document = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            msg = f"Mapping document is not valid UTF-8 ({path}): {e}"
            raise StructuralError(msg) from e
        return cls.parse(document)

    @classmethod
    def parse(cls, document: str) -> MappingTable:
        """Parse a mapping document.

        Raises:
            StructuralError: If the headers are missing or malformed, or a
                record line has no ``:`` separator.
            DecodeError: If a record cannot be decoded or references an
                index outside its sequence.
            UnknownKindError: If the ``Types`` header names an unknown kind.
        """
        # Only "\n" ends a line; point identifiers may hold other line breaks.
        lines = [line.removesuffix("\r") for line in document.split("\n")]
        while lines and not lines[-1].strip():
            lines.pop()

        if len(lines) < _HEADER_LINES:
            msg = (
                f"Mapping document must contain at least {_HEADER_LINES} lines, "
                f"found {len(lines)}"
            )
            raise StructuralError(msg)

        file_names = _parse_header(lines[0], _FILE_NAMES_PREFIX)
        function_names = _parse_header(lines[1], _FUNCTION_NAMES_PREFIX)
        types = InstrumentationType.parse_all(_parse_header(lines[2], _TYPES_PREFIX))

        points: dict[str, PointRecord] = {}
        for line_number, line in enumerate(lines[_HEADER_LINES:], start=_HEADER_LINES + 1):
            if not line.strip():
                continue

            separator = line.find(":")
            if separator < 0:
                msg = f"Line {line_number}: expected '<pointId>:<record>', got {line!r}"
                raise StructuralError(msg)

            point_id = line[:separator]
            record = _decode_record(line[separator + 1 :], line_number)
            _check_record(record, line_number, file_names, function_names, types)

            if point_id in points:
                logger.debug("Ignoring duplicate point %r on line %d", point_id, line_number)
                continue
            points[point_id] = record

        logger.info(
            "Parsed mapping: %d files, %d functions, %d points",
            len(file_names),
            len(function_names),
            len(points),
        )
        return cls(file_names, function_names, types, points)

    # ── Sequences ────────────────────────────────────────────────

    @property
    def file_names(self) -> tuple[str, ...]:
        return self._file_names

    @property
    def function_names(self) -> tuple[str, ...]:
        return self._function_names

    @property
    def types(self) -> tuple[InstrumentationType, ...]:
        return self._types

    @property
    def points(self) -> Mapping[str, PointRecord]:
        """Read-only view of the point table, in document order."""
        return self._points

    # ── Accessors ────────────────────────────────────────────────
    # Unknown identifiers raise KeyError: callers only pass identifiers
    # obtained from this table.

    def file_name(self, point_id: str) -> str:
        return self._file_names[self._points[point_id].file_index]

    def function_name(self, point_id: str) -> str:
        return self._function_names[self._points[point_id].function_index]

    def type_of(self, point_id: str) -> InstrumentationType:
        return self._types[self._points[point_id].type_index]

    def line_no(self, point_id: str) -> int:
        return self._points[point_id].line_no

    def col_no(self, point_id: str) -> int:
        return self._points[point_id].col_no

    def matching(self, predicate: Callable[[str], bool]) -> list[str]:
        """Return identifiers satisfying *predicate*, in document order.

        Example:
            table.matching(lambda pid: table.file_name(pid) == "a.js")
        """
        return [point_id for point_id in self._points if predicate(point_id)]

    # ── Container protocol ───────────────────────────────────────

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[str]:
        return iter(self._points)

    def __contains__(self, point_id: object) -> bool:
        return point_id in self._points

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingTable):
            return NotImplemented
        return (
            self._file_names == other._file_names
            and self._function_names == other._function_names
            and self._types == other._types
            and dict(self._points) == dict(other._points)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"MappingTable(files={len(self._file_names)}, "
            f"functions={len(self._function_names)}, points={len(self._points)})"
        )


# ── Helper functions ─────────────────────────────────────────────


def _parse_header(line: str, prefix: str) -> list[str]:
    """Parse a ``<Prefix>:<JSON string array>`` header line."""
    stripped = line.strip()
    if not stripped.startswith(prefix):
        msg = f"Expected header line starting with {prefix!r}, got {stripped!r}"
        raise StructuralError(msg)

    payload = stripped[stripped.index(":") + 1 :]
    try:
        values: Any = json.loads(payload)
    except json.JSONDecodeError as e:
        msg = f"Header {prefix!r} is not valid JSON: {e}"
        raise StructuralError(msg) from e

    if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
        msg = f"Header {prefix!r} must be a JSON array of strings"
        raise StructuralError(msg)
    return values


def _decode_record(encoded: str, line_number: int) -> PointRecord:
    """Decode the five VLQ values of one record line."""
    cursor = CharCursor(encoded)
    try:
        record = PointRecord(
            file_index=decode(cursor),
            function_index=decode(cursor),
            type_index=decode(cursor),
            line_no=decode(cursor),
            col_no=decode(cursor),
        )
    except DecodeError as e:
        msg = f"Line {line_number}: {e}"
        raise DecodeError(msg) from e

    if cursor.has_next():
        logger.debug(
            "Line %d: ignoring trailing characters %r after record", line_number, cursor.remaining
        )
    return record


def _check_record(
    record: PointRecord,
    line_number: int,
    file_names: list[str],
    function_names: list[str],
    types: list[InstrumentationType],
) -> None:
    """Verify that every index of *record* is valid for its sequence."""
    bounds = (
        ("file index", record.file_index, len(file_names)),
        ("function index", record.function_index, len(function_names)),
        ("type index", record.type_index, len(types)),
    )
    for label, value, size in bounds:
        if not 0 <= value < size:
            msg = f"Line {line_number}: {label} {value} out of range for {size} entries"
            raise DecodeError(msg)

    if record.line_no < 0 or record.col_no < 0:
        msg = (
            f"Line {line_number}: negative source position "
            f"({record.line_no}, {record.col_no})"
        )
        raise DecodeError(msg)
