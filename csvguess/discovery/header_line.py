"""
Header-row decision.

A first record is a header when its types differ from the body's types and
consist only of strings and booleans, or when one of its columns has a
value length that stands out against a very uniform body
(``guess_string_header_line``).  The type inferrer acts as the oracle for
the first rule.
"""

from __future__ import annotations

import logging
from typing import Sequence

from csvguess.configs.config import GuessConfig
from csvguess.models.models import ColumnType
from csvguess.utils.stats import mean, variance

logger = logging.getLogger(__name__)


def guess_string_header_line(
    rows: Sequence[Sequence[str | None]],
    config: GuessConfig,
) -> bool:
    """
    Length-based header test.

    For each column of the first row, collect the lengths of that column's
    non-null values over all rows.  The body lengths (everything after the
    first collected length) must be nearly constant and the first length
    must deviate from their mean by more than ``header_length_deviation_min``
    relatively (or exceed one character when the mean is zero).
    """
    if not rows:
        return False
    for column_index in range(len(rows[0])):
        lengths = [
            len(row[column_index])
            for row in rows
            if column_index < len(row) and row[column_index] is not None
        ]
        if len(lengths) <= 1:
            continue
        body = lengths[1:]
        if variance(body) > config.header_length_variance_max:
            continue
        avg = mean(body)
        if avg == 0.0:
            stands_out = lengths[0] > 1
        else:
            stands_out = abs(avg - lengths[0]) / avg > config.header_length_deviation_min
        if stands_out:
            logger.debug("Column %d: first value length stands out; header assumed", column_index)
            return True
    return False


def is_header_line(
    rows: Sequence[Sequence[str | None]],
    first_types: Sequence[ColumnType],
    other_types: Sequence[ColumnType],
    config: GuessConfig,
) -> bool:
    """Combine the type-oracle rule and the length rule."""
    by_types = list(first_types) != list(other_types) and all(
        t.is_textual() for t in first_types
    )
    return by_types or guess_string_header_line(rows, config)
