"""
Column type inference (the widening lattice).

Inference rules — applied in this order to every non-null, non-empty value:

  1. boolean    — ``true/false``, ``yes/no``, ``on/off`` in lower, Title or
                  UPPER case
  2. long       — matches r'^[+-]?\\d+$'
  3. double     — decimal or exponent notation, e.g. ``1.5``, ``-.5``, ``1e3``
  4. timestamp  — the first entry of ``TIMESTAMP_FORMATS`` whose pattern
                  matches and whose ``strptime`` format parses the value;
                  the type carries that format
  5. string     — fallback

Column-level resolution
-----------------------
The column type is the join of its value types:
  - Equal types stay (timestamps only when the formats are equal too).
  - long + double → double.
  - Any other mixture → string.
  - No constraining value (all null/empty) → string.

The result depends only on the input rows, so identical samples always give
identical types.
"""

from __future__ import annotations

import re
from datetime import datetime
from functools import reduce
from typing import Sequence

from csvguess.models.models import ColumnType


# Compiled patterns

_LONG_RE = re.compile(r"^[+-]?\d+$")
_DOUBLE_RE = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")

_TRUE_STRINGS = frozenset(
    v for w in ("true", "yes", "on") for v in (w, w.title(), w.upper())
)
_FALSE_STRINGS = frozenset(
    v for w in ("false", "no", "off") for v in (w, w.title(), w.upper())
)

_TZ = r"(?:Z|[+-]\d{2}:?\d{2})"
_FRACTION = r"\.\d{1,6}"

TIMESTAMP_FORMATS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(rf"^\d{{4}}-\d{{2}}-\d{{2}}T\d{{2}}:\d{{2}}:\d{{2}}{_FRACTION}{_TZ}$"), "%Y-%m-%dT%H:%M:%S.%f%z"),
    (re.compile(rf"^\d{{4}}-\d{{2}}-\d{{2}}T\d{{2}}:\d{{2}}:\d{{2}}{_TZ}$"), "%Y-%m-%dT%H:%M:%S%z"),
    (re.compile(rf"^\d{{4}}-\d{{2}}-\d{{2}}T\d{{2}}:\d{{2}}:\d{{2}}{_FRACTION}$"), "%Y-%m-%dT%H:%M:%S.%f"),
    (re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$"), "%Y-%m-%dT%H:%M:%S"),
    (re.compile(rf"^\d{{4}}-\d{{2}}-\d{{2}} \d{{2}}:\d{{2}}:\d{{2}}{_FRACTION} {_TZ}$"), "%Y-%m-%d %H:%M:%S.%f %z"),
    (re.compile(rf"^\d{{4}}-\d{{2}}-\d{{2}} \d{{2}}:\d{{2}}:\d{{2}} {_TZ}$"), "%Y-%m-%d %H:%M:%S %z"),
    (re.compile(rf"^\d{{4}}-\d{{2}}-\d{{2}} \d{{2}}:\d{{2}}:\d{{2}}{_FRACTION}$"), "%Y-%m-%d %H:%M:%S.%f"),
    (re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$"), "%Y-%m-%d %H:%M:%S"),
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}$"), "%Y/%m/%d %H:%M:%S"),
    (re.compile(r"^\d{4}/\d{2}/\d{2}$"), "%Y/%m/%d"),
    (re.compile(r"^\d{2}/[A-Z][a-z]{2}/\d{4}:\d{2}:\d{2}:\d{2} [+-]\d{4}$"), "%d/%b/%Y:%H:%M:%S %z"),
)


# Value-level inference


def guess_timestamp_format(value: str) -> str | None:
    """Return the strptime format of ``value``, or ``None`` if it is not a timestamp."""
    for pattern, fmt in TIMESTAMP_FORMATS:
        if not pattern.fullmatch(value):
            continue
        try:
            datetime.strptime(value, fmt)
        except ValueError:
            # shape matched but the fields are out of range, e.g. month 13
            continue
        return fmt
    return None


def infer_value_type(value: str | None) -> ColumnType | None:
    """
    Infer the type of a single value.

    Returns:
        ``None`` for null or empty values (they do not constrain the column).
    """
    if value is None or value == "":
        return None
    if value in _TRUE_STRINGS or value in _FALSE_STRINGS:
        return ColumnType.BOOLEAN
    if _LONG_RE.fullmatch(value):
        return ColumnType.LONG
    if _DOUBLE_RE.fullmatch(value):
        return ColumnType.DOUBLE
    fmt = guess_timestamp_format(value)
    if fmt is not None:
        return ColumnType.timestamp(fmt)
    return ColumnType.STRING


# Column-level inference


def merge_types(a: ColumnType, b: ColumnType) -> ColumnType:
    """Join of two value types in the widening lattice."""
    if a == b:
        return a
    if {a.name, b.name} == {"long", "double"}:
        return ColumnType.DOUBLE
    return ColumnType.STRING


def infer_column_type(values: Sequence[str | None]) -> ColumnType:
    """Type of one column from all its values; string when nothing constrains it."""
    types = [t for t in (infer_value_type(v) for v in values) if t is not None]
    if not types:
        return ColumnType.STRING
    return reduce(merge_types, types)


def types_from_records(rows: Sequence[Sequence[str | None]]) -> list[ColumnType]:
    """
    One type per column for column-aligned ``rows``.

    Rows may be ragged; the column count is the longest row's length and
    missing cells count as absent.
    """
    width = max((len(row) for row in rows), default=0)
    return [
        infer_column_type([row[i] for row in rows if i < len(row)])
        for i in range(width)
    ]
