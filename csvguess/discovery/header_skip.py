"""
Ragged-prefix (banner) detection.

Banner and metadata rows that precede a table tend to have fewer columns
than the table body.  Walking forward from the first record, the first
record whose column count is not exceeded by any of the following
``no_skip_detect_lines`` records is taken as the start of the table.
"""

from __future__ import annotations

import logging
from typing import Sequence

from csvguess.configs.config import GuessConfig

logger = logging.getLogger(__name__)


def guess_skip_header_lines(column_counts: Sequence[int], config: GuessConfig) -> int:
    """
    Return how many leading records to skip.

    Args:
        column_counts: Column count of each record, in order, from a tokenizer
                       pass with empty lines kept.
        config:        Supplies ``max_skip_lines`` and ``no_skip_detect_lines``.

    Returns:
        0 when the first record already starts the stable body.
    """
    counts = list(column_counts)
    last = min(config.max_skip_lines, len(counts) - 1)
    for i in range(1, last + 1):
        threshold = counts[i - 1]
        following = counts[i:i + config.no_skip_detect_lines]
        if all(c <= threshold for c in following):
            if i > 1:
                logger.debug("Skipping %d ragged leading line(s)", i - 1)
            return i - 1
    return 0
