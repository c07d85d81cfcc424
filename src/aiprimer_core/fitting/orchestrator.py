"""Apply curve validation across every class/track pair of a database."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from aiprimer_core.config.loader import resolve_settings
from aiprimer_core.equations.rounding import round_half_up
from aiprimer_core.fitting.validator import CurveVerdict, validate_track
from aiprimer_core.models import ClassRecord, Database, ProcessedDatabase, TrackRecord
from aiprimer_core.settings import FitSettings

__all__ = ["evaluate_database", "process_database"]

logger = logging.getLogger(__name__)


def evaluate_database(
    database: Database,
    settings: FitSettings,
    overrides: Mapping[str, Any] | None = None,
) -> dict[tuple[str, str], CurveVerdict]:
    """Validate every track of ``database`` keyed by ``(class_id, track_id)``."""

    verdicts: dict[tuple[str, str], CurveVerdict] = {}
    for class_id, track_id, track in database.iter_tracks():
        track_settings = resolve_settings(
            settings, overrides, class_id=class_id, track_id=track_id
        )
        verdict = validate_track(track, track_settings)
        if not verdict.accepted:
            logger.debug(
                "Rejected curve for class %s on track %s",
                class_id,
                track_id,
                extra={
                    "event": "fitting.rejected",
                    "reason": verdict.reason,
                    "tested": verdict.tested,
                    "passed": verdict.passed,
                },
            )
        verdicts[(class_id, track_id)] = verdict
    return verdicts


def process_database(
    database: Database,
    settings: FitSettings | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ProcessedDatabase:
    """Return dense predicted lap times for every accepted track.

    ``database`` is only read. Each accepted track receives one prediction,
    rounded to two decimals, at every level of the configured band; the band
    also becomes the bounds of the processed tracks and classes.
    """

    settings = settings or FitSettings()
    processed = ProcessedDatabase()
    verdicts = evaluate_database(database, settings, overrides)

    for (class_id, track_id), verdict in verdicts.items():
        predictor = verdict.predictor
        if predictor is None:
            continue
        class_record = processed.classes.setdefault(class_id, ClassRecord())
        class_record.min_ai = settings.min_ai
        class_record.max_ai = settings.max_ai
        class_record.tracks[track_id] = TrackRecord(
            ailevels={
                level: [round_half_up(predictor(level), 2)] for level in settings.levels
            },
            min_ai=settings.min_ai,
            max_ai=settings.max_ai,
        )

    logger.info(
        "Processed %d of %d tracks",
        sum(len(record.tracks) for record in processed.classes.values()),
        len(verdicts),
        extra={"event": "fitting.processed"},
    )
    return processed
