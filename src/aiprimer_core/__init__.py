"""Core fitting engine for AI lap time versus skill level.

The package is independent from any simulator file format: it works on the
records of :mod:`aiprimer_core.models` and takes its configuration through
explicit :class:`~aiprimer_core.settings.FitSettings` values.
"""

from __future__ import annotations

from aiprimer_core.equations import (
    LapStats,
    LinearFit,
    QuadraticFit,
    compute_stats,
    fit_linear,
    fit_quadratic,
)
from aiprimer_core.errors import AIPrimerError, InsufficientData, InvalidRange, NotFitted
from aiprimer_core.fitting import (
    CurveVerdict,
    build_predictor,
    evaluate_database,
    process_database,
    validate_track,
)
from aiprimer_core.models import (
    GENERATED_SAMPLES,
    ClassRecord,
    Database,
    PlayerClassTimes,
    PlayerTimes,
    PlayerTrackTimes,
    ProcessedDatabase,
    TrackRecord,
)
from aiprimer_core.reconciler import (
    ApplyResult,
    RemovalResult,
    apply_generated_range,
    generated_range_bounds,
    merge_databases,
    merge_player_times,
    remove_generated,
    reset_all,
)
from aiprimer_core.settings import FitSettings

__all__ = [
    "AIPrimerError",
    "ApplyResult",
    "ClassRecord",
    "CurveVerdict",
    "Database",
    "FitSettings",
    "GENERATED_SAMPLES",
    "InsufficientData",
    "InvalidRange",
    "LapStats",
    "LinearFit",
    "NotFitted",
    "PlayerClassTimes",
    "PlayerTimes",
    "PlayerTrackTimes",
    "ProcessedDatabase",
    "QuadraticFit",
    "RemovalResult",
    "TrackRecord",
    "apply_generated_range",
    "build_predictor",
    "compute_stats",
    "evaluate_database",
    "fit_linear",
    "fit_quadratic",
    "generated_range_bounds",
    "merge_databases",
    "merge_player_times",
    "process_database",
    "remove_generated",
    "reset_all",
    "validate_track",
]
