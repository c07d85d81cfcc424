"""Numerical building blocks used by the fitting pipeline."""

from aiprimer_core.equations.least_squares import (
    LinearFit,
    QuadraticFit,
    fit_linear,
    fit_quadratic,
)
from aiprimer_core.equations.rounding import round_half_up, to_fixed
from aiprimer_core.equations.stats import LapStats, compute_stats

__all__ = [
    "LapStats",
    "LinearFit",
    "QuadraticFit",
    "compute_stats",
    "fit_linear",
    "fit_quadratic",
    "round_half_up",
    "to_fixed",
]
