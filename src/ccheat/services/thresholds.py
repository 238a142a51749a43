"""Adaptive intensity thresholds.

Cut points are taken from the quartiles of the window's non-zero values, so
light and heavy users both get a spread of colors regardless of magnitude.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from ccheat.models.heatmap import DEFAULT_THRESHOLDS, IntensityThresholds

QUANTILES = (0.25, 0.50, 0.75, 1.0)


def quantile(values: Sequence[float], q: float) -> float:
    """Linear-interpolated quantile between order statistics (R-7)."""
    if not values:
        return 0
    ordered = sorted(values)
    pos = (len(ordered) - 1) * q
    lo = math.floor(pos)
    hi = math.ceil(pos)
    if lo == hi:
        return ordered[lo]
    return ordered[lo] + (pos - lo) * (ordered[hi] - ordered[lo])


def compute_thresholds(values: Iterable[float]) -> IntensityThresholds:
    """Four cut points from the positive values; fixed defaults when there are none."""
    non_zero = [value for value in values if value > 0]
    if not non_zero:
        return IntensityThresholds(values=DEFAULT_THRESHOLDS)

    raw = [max(1, math.ceil(quantile(non_zero, q))) for q in QUANTILES]
    thresholds = sorted(set(raw))
    while len(thresholds) < 4:
        thresholds.append(thresholds[-1] * 2 if thresholds else 1)
    return IntensityThresholds(values=tuple(thresholds[:4]))


def classify(value: float | None, thresholds: IntensityThresholds) -> int:
    """Intensity level 0-4 for a value."""
    if not value:
        return 0
    t0, t1, t2, _ = thresholds.values
    if value <= t0:
        return 1
    if value <= t1:
        return 2
    if value <= t2:
        return 3
    return 4
