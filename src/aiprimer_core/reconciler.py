"""Database transforms that keep measured and generated samples apart.

Every operation returns a new value.  Inputs are deep-copied before they are
changed, so the previous database stays valid after a call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from aiprimer_core.errors import InvalidRange, NotFitted
from aiprimer_core.models import (
    GENERATED_SAMPLES,
    ClassRecord,
    Database,
    PlayerTimes,
    ProcessedDatabase,
    TrackRecord,
)
from aiprimer_core.settings import FitSettings

__all__ = [
    "ApplyResult",
    "RemovalResult",
    "apply_generated_range",
    "generated_range_bounds",
    "merge_databases",
    "merge_player_times",
    "remove_generated",
    "reset_all",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ApplyResult:
    database: Database
    levels: tuple[int, ...] = ()
    error: NotFitted | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class RemovalResult:
    database: Database
    removed: dict[tuple[str, str], int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.removed.values())


def generated_range_bounds(
    selected_level: int | None, settings: FitSettings
) -> tuple[int, int]:
    """Return the ``(start, stop)`` levels centred on ``selected_level``."""

    spacing = settings.generated_range_spacing
    levels = settings.generated_range_levels
    if selected_level is None:
        start = settings.min_ai
    else:
        start = max(settings.min_ai, selected_level - (levels // 2) * spacing)
    stop = min(settings.max_ai, start + (levels - 1) * spacing)
    return start, stop


def _check_range(start: int, stop: int, spacing: int) -> None:
    if spacing < 1:
        raise InvalidRange(f"Spacing must be at least 1 (got {spacing}).")
    if start > stop:
        raise InvalidRange(f"Range start {start} is above range stop {stop}.")


def apply_generated_range(
    database: Database,
    processed: ProcessedDatabase,
    class_id: str,
    track_id: str,
    start: int,
    stop: int,
    spacing: int = 1,
) -> ApplyResult:
    """Replace one track's samples with predictions from ``processed``.

    Every level ``start, start + spacing, ...`` up to ``stop`` is written with
    the predicted time and the generated sentinel; whatever the track held
    before, measured data included, is discarded.
    """

    _check_range(start, stop, spacing)
    class_id = str(class_id)
    track_id = str(track_id)

    fitted = processed.track(class_id, track_id)
    if fitted is None:
        logger.warning(
            "No processed data for class %s on track %s",
            class_id,
            track_id,
            extra={"event": "reconciler.not_fitted"},
        )
        return ApplyResult(database, error=NotFitted(class_id, track_id))

    if fitted.min_ai is None or start < fitted.min_ai or stop > fitted.max_ai:
        raise InvalidRange(
            f"Range {start}-{stop} is outside the fitted band "
            f"{fitted.min_ai}-{fitted.max_ai}."
        )

    result = database.copy()
    class_record = result.classes.setdefault(class_id, ClassRecord())
    track = TrackRecord()
    for level in range(start, stop + 1, spacing):
        times = fitted.ailevels.get(level)
        if not times:
            continue
        track.ailevels[level] = [times[0]]
        track.samples_count[level] = GENERATED_SAMPLES
    track.refresh_bounds()
    class_record.tracks[track_id] = track
    class_record.refresh_bounds()

    levels = tuple(sorted(track.ailevels))
    logger.info(
        "Generated %d AI level(s) for class %s on track %s",
        len(levels),
        class_id,
        track_id,
        extra={"event": "reconciler.applied", "start": start, "stop": stop, "spacing": spacing},
    )
    return ApplyResult(result, levels)


def remove_generated(database: Database) -> RemovalResult:
    """Drop every level tagged with the generated sentinel."""

    result = database.copy()
    removed: dict[tuple[str, str], int] = {}
    for class_id, class_record in result.classes.items():
        for track_id, track in class_record.tracks.items():
            generated = [level for level in track.ailevels if track.is_generated(level)]
            for level in generated:
                del track.ailevels[level]
                del track.samples_count[level]
            if generated:
                removed[(class_id, track_id)] = len(generated)
            track.refresh_bounds()
        class_record.refresh_bounds()

    if removed:
        logger.info(
            "Removed %d generated AI level(s)",
            sum(removed.values()),
            extra={"event": "reconciler.removed"},
        )
    else:
        logger.warning(
            "No generated AI levels found to remove",
            extra={"event": "reconciler.removed"},
        )
    return RemovalResult(result, removed)


def reset_all(
    database: Database,
    player_times: PlayerTimes,
    *,
    include_player_times: bool = False,
) -> tuple[Database, PlayerTimes]:
    """Return an empty database, and empty player times when requested.

    No history is kept; callers holding the previous values may restore them.
    """

    cleared_times = PlayerTimes() if include_player_times else player_times.copy()
    logger.info(
        "Reset all AI times",
        extra={"event": "reconciler.reset", "player_times": include_player_times},
    )
    return Database(), cleared_times


def merge_databases(base: Database, incoming: Database) -> Database:
    """Fold ``incoming`` samples into a copy of ``base``.

    Per level the incoming sample count wins and lap times not already present
    are appended.
    """

    result = base.copy()
    for class_id, track_id, track in incoming.iter_tracks():
        if not track.ailevels:
            continue
        class_record = result.classes.setdefault(class_id, ClassRecord())
        target = class_record.tracks.setdefault(track_id, TrackRecord())
        for level, times in track.ailevels.items():
            existing = target.ailevels.setdefault(level, [])
            for time in times:
                if time not in existing:
                    existing.append(time)
            if level in track.samples_count:
                target.samples_count[level] = track.samples_count[level]
            else:
                target.samples_count.setdefault(level, 1)
        target.refresh_bounds()
        class_record.refresh_bounds()
    return result


def merge_player_times(base: PlayerTimes, incoming: PlayerTimes) -> PlayerTimes:
    """Copy of ``base`` where non-empty incoming cells replace existing ones."""

    result = base.copy()
    for class_id, class_times in incoming.classes.items():
        for track_id, cell in class_times.tracks.items():
            if cell.times:
                result.set_times(class_id, track_id, cell.times)
    return result
