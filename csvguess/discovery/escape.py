"""
Escape guess.

An escape character shows itself by standing right before a delimiter or a
quote.  Candidates are counted over all lines; the greatest non-zero count
wins (first listed wins ties).  Without evidence, a ``"`` quote implies the
RFC 4180 doubled-quote convention and any other quote disables escaping.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from csvguess.configs.config import GuessConfig
from csvguess.discovery.quote import count_matches

logger = logging.getLogger(__name__)


def escape_count(lines: Sequence[str], delimiter: str, quote: str, candidate: str) -> int:
    pattern = re.compile(
        rf"{re.escape(candidate)}(?:{re.escape(delimiter)}|{re.escape(quote)})"
    )
    return sum(count_matches(line, pattern) for line in lines)


def guess_escape(
    lines: Sequence[str],
    delimiter: str,
    quote: str,
    config: GuessConfig,
) -> str | None:
    """
    Pick the escape character, given an enabled ``quote``.

    Returns:
        The selected escape, ``'"'`` for RFC quoting, or ``None``.
    """
    max_count = 0
    selected: str | None = None
    for candidate in config.escape_candidates_for(quote):
        count = escape_count(lines, delimiter, quote, candidate)
        if count > max_count:
            selected = candidate
            max_count = count

    if selected is not None:
        logger.debug("Escape %r selected (count=%d)", selected, max_count)
        return selected

    if quote == '"':
        # assume the file follows RFC 4180 for escaping
        return '"'
    return None
