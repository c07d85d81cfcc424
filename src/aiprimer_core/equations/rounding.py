"""Fixed-point rounding matching the simulator's lap time text."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

__all__ = ["round_half_up", "to_fixed"]


def to_fixed(value: float, places: int) -> str:
    """Render ``value`` with exactly ``places`` decimals.

    The exact binary value of ``value`` is rounded and ties go away from
    zero, so ``100.03125`` becomes ``"100.0313"`` while ``1.005``, stored
    just below the tie, becomes ``"1.00"`` at two places.
    """

    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def round_half_up(value: float, places: int) -> float:
    return float(to_fixed(value, places))
