"""Curve validation and database-wide prediction."""

from aiprimer_core.fitting.orchestrator import evaluate_database, process_database
from aiprimer_core.fitting.validator import (
    REJECT_LEVELS,
    REJECT_MONOTONIC,
    REJECT_RESIDUAL,
    REJECT_SPREAD,
    CurveVerdict,
    build_predictor,
    fit_points,
    validate_track,
)

__all__ = [
    "CurveVerdict",
    "REJECT_LEVELS",
    "REJECT_MONOTONIC",
    "REJECT_RESIDUAL",
    "REJECT_SPREAD",
    "build_predictor",
    "evaluate_database",
    "fit_points",
    "process_database",
    "validate_track",
]
