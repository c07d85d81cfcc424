"""Summary statistics for lap-time samples."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

__all__ = ["LapStats", "compute_stats"]


@dataclass(frozen=True, slots=True)
class LapStats:
    count: int
    mean: float
    stddev: float


def compute_stats(samples: Sequence[float] | None) -> LapStats:
    """Return count, mean and spread of ``samples``.

    The spread is ``sqrt(sum((t - mean) ** 2))`` and is not divided by the
    sample count.
    """

    count = len(samples) if samples else 0
    if count < 1:
        return LapStats(0, 0.0, 0.0)

    mean = math.fsum(samples) / count
    spread = math.sqrt(math.fsum((time - mean) ** 2 for time in samples))
    return LapStats(count, mean, spread)
