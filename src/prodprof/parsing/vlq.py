"""Base64 variable-length quantity (VLQ) integers.

Each Base64 digit holds five data bits and a continuation bit (the
value 32). Digits are little-endian: the first digit carries the
lowest five bits. Once all digits are collected, bit 0 of the value is
the sign and the remaining bits are the magnitude.
"""

from __future__ import annotations

from prodprof.errors import DecodeError

BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

_BASE_SHIFT = 5
_BASE = 1 << _BASE_SHIFT
_BASE_MASK = _BASE - 1
_CONTINUATION_BIT = _BASE

_DIGIT_VALUES = {char: index for index, char in enumerate(BASE64_ALPHABET)}


class CharCursor:
    """Forward-only cursor over a string, shared across successive decodes."""

    def __init__(self, content: str) -> None:
        self.content = content
        self.position = 0

    def has_next(self) -> bool:
        return self.position < len(self.content)

    def next(self) -> str:
        char = self.content[self.position]
        self.position += 1
        return char

    @property
    def remaining(self) -> str:
        """Return the characters not consumed yet."""
        return self.content[self.position :]


def decode(cursor: CharCursor) -> int:
    """Decode one VLQ integer starting at the cursor position.

    The cursor is left just past the last digit of the integer.

    Raises:
        DecodeError: If the input ends mid-integer or holds a character
            outside the Base64 alphabet.
    """
    result = 0
    shift = 0
    while True:
        if not cursor.has_next():
            raise DecodeError(
                f"VLQ value truncated at offset {cursor.position} in {cursor.content!r}"
            )
        char = cursor.next()
        digit = _DIGIT_VALUES.get(char)
        if digit is None:
            raise DecodeError(
                f"Invalid Base64 character {char!r} at offset {cursor.position - 1} "
                f"in {cursor.content!r}"
            )
        result += (digit & _BASE_MASK) << shift
        shift += _BASE_SHIFT
        if not digit & _CONTINUATION_BIT:
            break

    magnitude = result >> 1
    return -magnitude if result & 1 else magnitude


def encode(value: int) -> str:
    """Encode *value* as a VLQ string (inverse of :func:`decode`)."""
    vlq = ((-value) << 1) + 1 if value < 0 else value << 1

    digits: list[str] = []
    while True:
        digit = vlq & _BASE_MASK
        vlq >>= _BASE_SHIFT
        if vlq > 0:
            digit |= _CONTINUATION_BIT
        digits.append(BASE64_ALPHABET[digit])
        if vlq == 0:
            break
    return "".join(digits)
