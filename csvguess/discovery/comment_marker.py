"""
Comment-line marker guess.

Runs on the sample after the ragged prefix is dropped.  Lines that start
with the active quote, or with the null string followed by a delimiter or
the line end, are data and never count as comments (``#N/A`` would
otherwise look like a ``#`` comment).
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from csvguess.configs.config import GuessConfig
from csvguess.models.models import SampleLine

logger = logging.getLogger(__name__)


def _exclusions(delimiter: str, quote: str | None, null_string: str | None) -> list[re.Pattern]:
    exclude: list[re.Pattern] = []
    if quote:
        exclude.append(re.compile(rf"^{re.escape(quote)}"))
    if null_string is not None:
        exclude.append(
            re.compile(rf"^{re.escape(null_string)}(?:{re.escape(delimiter)}|$)")
        )
    return exclude


def is_comment_line(text: str, marker: str, exclude: Sequence[re.Pattern]) -> bool:
    return text.startswith(marker) and not any(ex.search(text) for ex in exclude)


def guess_comment_line_marker(
    lines: Sequence[SampleLine],
    delimiter: str,
    quote: str | None,
    null_string: str | None,
    config: GuessConfig,
) -> tuple[str | None, list[SampleLine]]:
    """
    Pick a comment marker and filter the lines it marks.

    Returns:
        ``(marker, kept_lines)``.  ``kept_lines`` are the lines the winning
        marker did not match, in order.  ``(None, lines)`` if no candidate
        matches any line.
    """
    exclude = _exclusions(delimiter, quote, null_string)

    selected: str | None = None
    max_count = 0
    kept: list[SampleLine] = list(lines)
    for candidate in config.comment_line_marker_candidates:
        unmatched = [l for l in lines if not is_comment_line(l.text, candidate, exclude)]
        count = len(lines) - len(unmatched)
        if count > max_count:
            selected = candidate
            max_count = count
            kept = unmatched

    if selected is not None:
        logger.debug("Comment marker %r selected (%d line(s) dropped)", selected, max_count)
    return selected, kept


def drop_comment_lines(lines: Sequence[SampleLine], marker: str) -> list[SampleLine]:
    """Filter lines starting with an explicitly configured ``marker``."""
    return [l for l in lines if not l.text.startswith(marker)]
