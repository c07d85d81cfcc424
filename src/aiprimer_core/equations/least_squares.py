"""Normal-equation least-squares fits for lap time against AI skill."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from aiprimer_core.errors import InsufficientData

__all__ = ["LinearFit", "QuadraticFit", "fit_linear", "fit_quadratic"]


@dataclass(frozen=True, slots=True)
class LinearFit:
    """Coefficients of ``y = a + b * x``."""

    a: float
    b: float

    def __call__(self, x: float) -> float:
        return self.a + self.b * x


@dataclass(frozen=True, slots=True)
class QuadraticFit:
    """Coefficients of ``y = a + b * x + c * x**2``."""

    a: float
    b: float
    c: float

    def __call__(self, x: float) -> float:
        return self.a + self.b * x + self.c * x * x


def _solve_normal_equations(
    xs: Sequence[float], ys: Sequence[float], degree: int
) -> np.ndarray:
    minimum = degree + 1
    if len(xs) != len(ys) or len(xs) < minimum:
        raise InsufficientData(
            f"x and y must have the same length and at least {minimum} points "
            f"(got {len(xs)} and {len(ys)})."
        )

    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if np.unique(x).size < minimum:
        raise InsufficientData(
            f"Degenerate design: the points span fewer than {minimum} distinct x values."
        )
    design = np.vander(x, N=minimum, increasing=True)
    normal = design.T @ design
    rhs = design.T @ y
    try:
        # LAPACK gesv, an LU factorisation with partial pivoting.
        return np.linalg.solve(normal, rhs)
    except np.linalg.LinAlgError as exc:
        raise InsufficientData(
            f"Degenerate design: the points span fewer than {minimum} distinct x values."
        ) from exc


def fit_linear(xs: Sequence[float], ys: Sequence[float]) -> LinearFit:
    """Fit ``y = a + b * x`` by ordinary least squares.

    Raises
    ------
    InsufficientData
        With fewer than two points, sequences of different length, or when
        every point shares the same ``x``.
    """

    theta = _solve_normal_equations(xs, ys, degree=1)
    return LinearFit(a=float(theta[0]), b=float(theta[1]))


def fit_quadratic(xs: Sequence[float], ys: Sequence[float]) -> QuadraticFit:
    """Fit ``y = a + b * x + c * x**2``; needs at least three points."""

    theta = _solve_normal_equations(xs, ys, degree=2)
    return QuadraticFit(a=float(theta[0]), b=float(theta[1]), c=float(theta[2]))
