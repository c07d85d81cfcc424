"""Accept/reject gate for per-track lap time curves.

A track is fitted with a straight line of lap time against AI skill and the
line is only trusted when three conditions hold:

* the recorded levels span at least ``min_skill_spread`` skill points,
* the prediction never gets slower as skill increases,
* few enough observations fall outside a tolerance band derived from the
  mean lap time at the lowest recorded level.

Rejected tracks are not errors.  :func:`build_predictor` returns ``None`` and
callers drop the track from the processed output.
"""

from __future__ import annotations

from dataclasses import dataclass

from aiprimer_core.equations.least_squares import LinearFit, fit_linear
from aiprimer_core.equations.stats import compute_stats
from aiprimer_core.models import TrackRecord
from aiprimer_core.settings import FitSettings

__all__ = [
    "CurveVerdict",
    "REJECT_LEVELS",
    "REJECT_MONOTONIC",
    "REJECT_RESIDUAL",
    "REJECT_SPREAD",
    "build_predictor",
    "fit_points",
    "validate_track",
]

REJECT_SPREAD = "spread"
REJECT_LEVELS = "levels"
REJECT_MONOTONIC = "monotonic"
REJECT_RESIDUAL = "residual"


@dataclass(frozen=True, slots=True)
class CurveVerdict:
    """Outcome of validating one track."""

    predictor: LinearFit | None
    tested: int = 0
    passed: int = 0
    reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.predictor is not None

    @property
    def failed(self) -> int:
        return self.tested - self.passed


def fit_points(track: TrackRecord, settings: FitSettings) -> tuple[list[float], list[float]]:
    """Return the ``(levels, times)`` series fed to the solver."""

    xs: list[float] = []
    ys: list[float] = []
    if track.min_ai is None or track.max_ai is None:
        return xs, ys

    for level in range(track.min_ai, track.max_ai + 1):
        times = track.times_at(level)
        if settings.use_all_samples:
            for time in times:
                xs.append(float(level))
                ys.append(float(time))
            continue
        stats = compute_stats(times)
        if stats.count > 0:
            xs.append(float(level))
            ys.append(stats.mean)
    return xs, ys


def _observations(times: list[float], settings: FitSettings) -> list[float]:
    if settings.use_all_samples:
        return list(times)
    stats = compute_stats(times)
    return [stats.mean] if stats.count > 0 else []


def validate_track(track: TrackRecord, settings: FitSettings) -> CurveVerdict:
    """Fit ``track`` and apply the spread, monotonicity and residual checks."""

    min_ai, max_ai = track.min_ai, track.max_ai
    if min_ai is None or max_ai is None or max_ai - min_ai < settings.min_skill_spread:
        return CurveVerdict(None, reason=REJECT_SPREAD)

    xs, ys = fit_points(track, settings)
    if len(set(xs)) < 2:
        return CurveVerdict(None, reason=REJECT_LEVELS)

    predictor = fit_linear(xs, ys)

    threshold = compute_stats(track.times_at(min_ai)).mean * settings.max_residual_pct

    tested = 0
    passed = 0
    previous: float | None = None
    for level in range(min_ai, max_ai + 1):
        predicted = predictor(level)
        if previous is not None and predicted > previous:
            return CurveVerdict(None, tested, passed, REJECT_MONOTONIC)
        previous = predicted

        for observed in _observations(track.times_at(level), settings):
            tested += 1
            if abs(predicted - observed) < threshold:
                passed += 1

    allowed = max(1.0, tested * settings.max_fail_fraction_pct)
    if tested - passed <= allowed:
        return CurveVerdict(predictor, tested, passed)
    return CurveVerdict(None, tested, passed, REJECT_RESIDUAL)


def build_predictor(track: TrackRecord, settings: FitSettings) -> LinearFit | None:
    """Return the accepted predictor for ``track`` or ``None``."""

    return validate_track(track, settings).predictor
