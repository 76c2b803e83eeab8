"""Per-value normalization applied to every row before it is serialized."""

import base64
import json
import math
import uuid
from datetime import date, datetime, time
from typing import Any, Dict, Mapping

BINARY_TYPES = (bytes, bytearray, memoryview)

_PRINTABLE_CONTROLS = frozenset("\n\r\t\v\b\f\x1b\x7f\a")


def _is_printable_char(char: str) -> bool:
    if char in _PRINTABLE_CONTROLS:
        return True
    cp = ord(char)
    return (
        0x20 <= cp <= 0x7E
        or 0xA0 <= cp <= 0xD7FF
        or 0xE000 <= cp <= 0xFFFD
        or 0x10000 <= cp <= 0x10FFFF
    )


def is_printable(data: bytes) -> bool:
    """True when ``data`` is valid UTF-8 made only of printable characters."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return all(_is_printable_char(char) for char in text)


def encode_value(value: Any) -> Any:
    """Normalizes one column value.

    - 16-byte binaries become lowercase hyphenated UUID strings.
    - Other binaries pass through as text when printable, else base64.
    - NaN and infinite floats become the strings ``"NaN"``, ``"Infinity"``
      and ``"-Infinity"``.
    - Everything else is returned unchanged.
    """
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    if not isinstance(value, BINARY_TYPES):
        return value

    data = bytes(value)
    if len(data) == 16:
        return str(uuid.UUID(bytes=data))
    if is_printable(data):
        return data.decode("utf-8")
    return base64.b64encode(data).decode("ascii")


def encode_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: encode_value(value) for key, value in row.items()}


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    # Decimal, UUID and anything else json cannot handle.
    return str(value)


def dumps_row(row: Mapping[str, Any]) -> str:
    """Serializes an encoded row as one compact JSON object (no newline)."""
    return json.dumps(
        row,
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
        default=_json_default,
    )
