"""
Delimiter guess.

For each candidate, count its occurrences on every sample line.  A real
delimiter appears often and about equally often on every line, so the
weight is ``total / stddev(per-line counts)``.  The candidate with the
greatest weight wins (first listed wins ties); if even that weight is not
above ``delimiter_min_weight`` the file is assumed to have a single column
and the first candidate is returned.
"""

from __future__ import annotations

import logging
from typing import Sequence

from csvguess.configs.config import GuessConfig
from csvguess.utils.stats import stddev

logger = logging.getLogger(__name__)


def delimiter_weight(lines: Sequence[str], candidate: str, config: GuessConfig) -> float:
    """Return the weight of ``candidate``, or 0.0 if it never occurs."""
    counts = [line.count(candidate) for line in lines]
    total = sum(counts)
    if total == 0:
        return 0.0
    return total / stddev(
        counts,
        floor=config.delimiter_stddev_floor,
        epsilon=config.delimiter_stddev_epsilon,
    )


def guess_delimiter(lines: Sequence[str], config: GuessConfig) -> str:
    """
    Pick the field separator for ``lines``.

    Args:
        lines:  Raw sample line texts.
        config: Supplies the candidates and ``delimiter_min_weight``.

    Returns:
        The selected delimiter; the first candidate when nothing convinces.
    """
    selected: str | None = None
    most_weight = 0.0
    for candidate in config.delimiter_candidates:
        weight = delimiter_weight(lines, candidate, config)
        if weight > most_weight:
            selected = candidate
            most_weight = weight

    if selected is not None and most_weight > config.delimiter_min_weight:
        logger.debug("Delimiter %r selected (weight=%.3f)", selected, most_weight)
        return selected

    logger.debug("No convincing delimiter; assuming a single-column file.")
    return config.delimiter_candidates[0]
