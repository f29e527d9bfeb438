"""Decoding of instrumentation mapping documents."""

from prodprof.parsing.mapping import MappingTable
from prodprof.parsing.vlq import CharCursor, decode, encode

__all__ = [
    "CharCursor",
    "MappingTable",
    "decode",
    "encode",
]
