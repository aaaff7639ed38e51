"""
Quote guess.

Every line containing a candidate quote scores its raw occurrence count plus
a structural bonus:

  - ``quote_clean_field_bonus`` (20) per cleanly quoted field: the quote
    opens right after the line start or a delimiter and closes right before
    the line end or a delimiter, with no quote in between.
  - ``quote_delimited_field_bonus`` (40) per quoted field of the same shape
    that has no delimiter between its quotes.

The per-line scores are averaged per candidate.  A best average of at least
``quote_min_score`` selects the candidate.  Otherwise the default quote is
kept unless some line uses it in the middle of an unquoted value, in which
case quoting is disabled (``None``).
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from csvguess.configs.config import GuessConfig
from csvguess.utils.stats import mean

logger = logging.getLogger(__name__)


def _field_patterns(delimiter: str, quote: str) -> tuple[re.Pattern, re.Pattern]:
    d = re.escape(delimiter)
    q = re.escape(quote)
    clean = re.compile(rf"(?:\A|{d})\s*{q}(?:(?!{q}).)*\s*{q}(?:$|{d})")
    undelimited = re.compile(rf"(?:\A|{d})\s*{q}(?:(?!{d}).)*\s*{q}(?:$|{d})")
    return clean, undelimited


def count_matches(line: str, pattern: re.Pattern) -> int:
    """Count non-overlapping matches, scanning left to right."""
    return sum(1 for _ in pattern.finditer(line))


def quote_score(lines: Sequence[str], delimiter: str, quote: str, config: GuessConfig) -> float:
    """Average score of ``quote`` over the lines that contain it (0.0 if none)."""
    clean, undelimited = _field_patterns(delimiter, quote)
    scores: list[int] = []
    for line in lines:
        count = line.count(quote)
        if count > 0:
            bonus = (
                count_matches(line, clean) * config.quote_clean_field_bonus
                + count_matches(line, undelimited) * config.quote_delimited_field_bonus
            )
            scores.append(count + bonus)
    return mean(scores)


def force_no_quote(lines: Sequence[str], delimiter: str, quote: str) -> bool:
    """
    True if ``quote`` appears after unquoted characters of some field.

    Such a file cannot be read with ``quote`` enabled: the quote is data.
    """
    d = re.escape(delimiter)
    q = re.escape(quote)
    pattern = re.compile(rf"(?:\A|{d})\s*[^{q}]+{q}")
    return any(pattern.search(line) for line in lines)


def guess_quote(lines: Sequence[str], delimiter: str, config: GuessConfig) -> str | None:
    """
    Pick the quote character for ``lines``.

    Returns:
        The selected quote, ``config.default_quote``, or ``None`` to disable
        quoting.
    """
    selected: str | None = None
    most_weight = 0.0
    for candidate in config.quote_candidates:
        weight = quote_score(lines, delimiter, candidate, config)
        if weight > most_weight:
            selected = candidate
            most_weight = weight

    if selected is not None and most_weight >= config.quote_min_score:
        logger.debug("Quote %r selected (score=%.3f)", selected, most_weight)
        return selected

    if force_no_quote(lines, delimiter, config.default_quote):
        logger.debug("Default quote appears inside unquoted values; quoting disabled.")
        return None

    # assume the file follows RFC 4180 for quoting
    return config.default_quote
