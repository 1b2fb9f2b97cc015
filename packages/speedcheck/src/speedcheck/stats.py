from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class SampleStats:
    count: int
    mean: float
    stdev: float
    minimum: float
    maximum: float


def summarize(values: Sequence[float]) -> SampleStats:
    """Mean, population standard deviation, min and max of ``values``.

    Raises ValueError for an empty sequence.
    """

    if not values:
        raise ValueError("no samples to summarize")

    n = len(values)
    mean = math.fsum(values) / n
    variance = math.fsum((v - mean) ** 2 for v in values) / n
    return SampleStats(
        count=n,
        mean=mean,
        stdev=math.sqrt(variance),
        minimum=min(values),
        maximum=max(values),
    )


def safe_ratio(numerator: float, denominator: float) -> float:
    """Division returning 0.0 for denominator <= 0."""

    if denominator <= 0.0:
        return 0.0
    return float(numerator) / float(denominator)
