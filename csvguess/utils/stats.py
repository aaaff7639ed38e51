"""
Numeric helpers shared by the guessers.

Population statistics (divide by ``n``, not ``n - 1``); the heuristic
thresholds were tuned against population variance.  Empty input returns
0.0 rather than numpy's NaN so callers can compare the result directly.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def variance(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.var(values))


def stddev(values: Sequence[float], floor: float, epsilon: float) -> float:
    """
    Population standard deviation, replaced by ``floor`` when below ``epsilon``.

    A perfectly uniform per-line count has a deviation of zero; the floor
    turns it into a very large weight instead of a division by zero.
    """
    if len(values) == 0:
        return floor
    result = float(np.std(values))
    if result < epsilon:
        return floor
    return result
