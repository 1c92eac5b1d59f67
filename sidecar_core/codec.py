"""
Value Codec — Conversion between untyped values and SQLite values.

Untyped values are the JSON-like values exchanged with the front-end:
``None``, ``bool``, ``int``, ``float`` and ``str``. Binary column data
leaves this module as base64 text, never as raw bytes.

Column decoding tries native types in a fixed order (text, integer,
float, boolean, binary) and returns the first that matches. The order
is part of the contract: a TEXT column holding ``"42"`` decodes as the
string ``"42"``, never as an integer.
"""
import base64
import numbers
from collections.abc import Sequence
from typing import Any, Callable, Optional, Union

import orjson

Value = Union[None, bool, int, float, str]
Parameter = Union[None, bool, int, float, str, bytes]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

def to_parameter(value: Any) -> Parameter:
    """Map an untyped value to a native statement parameter.

    Total: every input has a mapping, nothing raises.

    Args:
        value: Untyped value from the caller.

    Returns:
        Value suitable for positional binding with ``sqlite3``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if INT64_MIN <= value <= INT64_MAX:
            return value
        # Exact decimal text instead of the lossy float other hosts fall back to.
        return str(value)
    if isinstance(value, float):
        return value
    if isinstance(value, numbers.Number):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return orjson.dumps(value, default=str).decode("utf-8")


def to_parameters(values: Optional[Sequence[Any]]) -> tuple:
    """Convert positional parameters, preserving their order."""
    if not values:
        return ()
    return tuple(to_parameter(v) for v in values)


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

def _as_text(raw: Any) -> Optional[str]:
    return raw if isinstance(raw, str) else None


def _as_integer(raw: Any) -> Optional[int]:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    return None


def _as_float(raw: Any) -> Optional[float]:
    return raw if isinstance(raw, float) else None


def _as_boolean(raw: Any) -> Optional[bool]:
    return raw if isinstance(raw, bool) else None


def _as_binary(raw: Any) -> Optional[str]:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(raw)).decode("ascii")
    return None


# Extraction priority; do not reorder.
_EXTRACTORS: tuple[Callable[[Any], Any], ...] = (
    _as_text,
    _as_integer,
    _as_float,
    _as_boolean,
    _as_binary,
)


def from_column(raw: Any) -> Value:
    """Decode a raw column value into an untyped value.

    Args:
        raw: Value as returned by the ``sqlite3`` cursor.

    Returns:
        First successful extraction in priority order, or ``None``.
    """
    for extract in _EXTRACTORS:
        value = extract(raw)
        if value is not None:
            return value
    return None


def decode_row(names: Sequence[str], row: Sequence[Any]) -> dict[str, Value]:
    """Build a column name -> value mapping for one result row.

    Duplicate column names overwrite left-to-right; the last one wins.
    """
    record: dict[str, Value] = {}
    for name, raw in zip(names, row):
        record[name] = from_column(raw)
    return record
