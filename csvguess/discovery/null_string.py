"""
Null-string guess.

Counts whole-field occurrences of each candidate (bounded by the line start
or end, or a delimiter).  The greatest non-zero count wins, first listed
wins ties.  With no evidence the null string stays unset: an emitted empty
value would read back as "the empty string is null", which is a different
configuration.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from csvguess.configs.config import GuessConfig
from csvguess.discovery.quote import count_matches

logger = logging.getLogger(__name__)


def null_string_count(lines: Sequence[str], delimiter: str, candidate: str) -> int:
    d = re.escape(delimiter)
    pattern = re.compile(rf"(?:^|{d}){re.escape(candidate)}(?:$|{d})")
    return sum(count_matches(line, pattern) for line in lines)


def guess_null_string(
    lines: Sequence[str],
    delimiter: str,
    config: GuessConfig,
) -> str | None:
    max_count = 0
    selected: str | None = None
    for candidate in config.null_string_candidates:
        count = null_string_count(lines, delimiter, candidate)
        if count > max_count:
            selected = candidate
            max_count = count

    if selected is not None:
        logger.debug("Null string %r selected (count=%d)", selected, max_count)
    return selected
