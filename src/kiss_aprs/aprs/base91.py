"""Base-91 coordinate codec used by compressed APRS positions.

A coordinate is packed as ``degrees * 380926 + minutes * 6351 + seconds * 105``
and written most-significant digit first using :data:`ALPHABET`.
"""

from __future__ import annotations

ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789"
    "!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"
)
# Digits are ALPHABET indices, so the trailing "|}~" decode as 91-93.
# encode() never emits them.
BASE = 91

_DEGREE_UNITS = 380926
_MINUTE_UNITS = 6351
_SECOND_UNITS = 105

_DIGITS = {char: index for index, char in enumerate(ALPHABET)}


def decode(text: str) -> float:
    """Decode a base-91 coordinate group into decimal degrees."""
    if not text:
        raise ValueError("Empty base-91 coordinate")
    value = 0
    for char in text:
        try:
            digit = _DIGITS[char]
        except KeyError as exc:
            raise ValueError(f"Invalid base-91 character: {char!r}") from exc
        value = value * BASE + digit
    degrees = value // _DEGREE_UNITS
    minutes = (value % _DEGREE_UNITS) // _MINUTE_UNITS
    seconds = (value % _MINUTE_UNITS) / float(_SECOND_UNITS)
    return degrees + minutes / 60.0 + seconds / 3600.0


def encode(degrees: float, width: int = 4) -> str:
    """Encode decimal degrees as a base-91 group, left-padded to ``width``."""
    if degrees < 0:
        raise ValueError("Base-91 coordinates must be non-negative")
    whole = int(degrees)
    minutes_float = (degrees - whole) * 60.0
    minutes = int(minutes_float)
    seconds = int((minutes_float - minutes) * 60.0)
    value = whole * _DEGREE_UNITS + minutes * _MINUTE_UNITS + seconds * _SECOND_UNITS

    chars: list[str] = []
    while value > 0:
        value, digit = divmod(value, BASE)
        chars.append(ALPHABET[digit])
    while len(chars) < width:
        chars.append(ALPHABET[0])
    return "".join(reversed(chars))
