"""Data model for AI lap-time databases.

The records mirror the JSON layout used by the desktop tooling around the
simulator so they can be persisted with :func:`json.dumps` on ``to_dict()``
payloads.  Level keys are integers in memory and strings once serialised.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterator

__all__ = [
    "GENERATED_SAMPLES",
    "ClassRecord",
    "Database",
    "PlayerClassTimes",
    "PlayerTimes",
    "PlayerTrackTimes",
    "ProcessedDatabase",
    "TrackRecord",
]


#: ``samples_count`` value reserved for levels written from a fitted curve.
#: Measured levels always carry the real number of sampled races (>= 1).
GENERATED_SAMPLES = 0


def _level_key(raw: Any) -> int:
    return int(str(raw).strip())


@dataclass(slots=True)
class TrackRecord:
    """Lap times recorded for one class on one track layout."""

    ailevels: dict[int, list[float]] = field(default_factory=dict)
    samples_count: dict[int, int] = field(default_factory=dict)
    min_ai: int | None = None
    max_ai: int | None = None

    def refresh_bounds(self) -> None:
        if self.ailevels:
            self.min_ai = min(self.ailevels)
            self.max_ai = max(self.ailevels)
        else:
            self.min_ai = None
            self.max_ai = None

    def is_generated(self, level: int) -> bool:
        return self.samples_count.get(level) == GENERATED_SAMPLES

    def times_at(self, level: int) -> list[float]:
        return self.ailevels.get(level, [])

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "ailevels": {
                str(level): list(times) for level, times in sorted(self.ailevels.items())
            },
            "samplesCount": {
                str(level): int(count)
                for level, count in sorted(self.samples_count.items())
            },
        }
        if self.min_ai is not None:
            payload["minAI"] = self.min_ai
            payload["maxAI"] = self.max_ai
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TrackRecord":
        ailevels = {
            _level_key(level): [float(time) for time in times]
            for level, times in (payload.get("ailevels") or {}).items()
        }
        samples_count = {
            _level_key(level): int(count)
            for level, count in (payload.get("samplesCount") or {}).items()
        }
        record = cls(ailevels=ailevels, samples_count=samples_count)
        # Stored bounds are not trusted, they are derived from the level keys.
        record.refresh_bounds()
        return record


@dataclass(slots=True)
class ClassRecord:
    """All tracks sampled for one car class."""

    tracks: dict[str, TrackRecord] = field(default_factory=dict)
    min_ai: int | None = None
    max_ai: int | None = None

    def refresh_bounds(self) -> None:
        levels = [level for track in self.tracks.values() for level in track.ailevels]
        if levels:
            self.min_ai = min(levels)
            self.max_ai = max(levels)
        else:
            self.min_ai = None
            self.max_ai = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "tracks": {track_id: track.to_dict() for track_id, track in self.tracks.items()}
        }
        if self.min_ai is not None:
            payload["minAI"] = self.min_ai
            payload["maxAI"] = self.max_ai
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ClassRecord":
        tracks = {
            str(track_id): TrackRecord.from_dict(track)
            for track_id, track in (payload.get("tracks") or {}).items()
        }
        record = cls(tracks=tracks)
        record.refresh_bounds()
        return record


@dataclass(slots=True)
class Database:
    """Root mapping from class id to :class:`ClassRecord`."""

    classes: dict[str, ClassRecord] = field(default_factory=dict)

    def track(self, class_id: str, track_id: str) -> TrackRecord | None:
        class_record = self.classes.get(str(class_id))
        if class_record is None:
            return None
        return class_record.tracks.get(str(track_id))

    def iter_tracks(self) -> Iterator[tuple[str, str, TrackRecord]]:
        for class_id, class_record in self.classes.items():
            for track_id, track in class_record.tracks.items():
                yield class_id, track_id, track

    def is_empty(self) -> bool:
        return not any(track.ailevels for _, _, track in self.iter_tracks())

    def copy(self):
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "classes": {
                class_id: class_record.to_dict()
                for class_id, class_record in self.classes.items()
            }
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]):
        return cls(
            classes={
                str(class_id): ClassRecord.from_dict(class_record)
                for class_id, class_record in (payload.get("classes") or {}).items()
            }
        )


class ProcessedDatabase(Database):
    """Accepted predictions only, dense over the configured skill band."""

    __slots__ = ()

    def predicted_time(self, class_id: str, track_id: str, level: int) -> float | None:
        track = self.track(class_id, track_id)
        if track is None:
            return None
        times = track.ailevels.get(level)
        if not times:
            return None
        return times[0]


@dataclass(slots=True)
class PlayerTrackTimes:
    """Human best lap times for one class/track cell, in document order."""

    times: list[float] = field(default_factory=list)

    @property
    def best(self) -> float | None:
        return min(self.times) if self.times else None


@dataclass(slots=True)
class PlayerClassTimes:
    tracks: dict[str, PlayerTrackTimes] = field(default_factory=dict)


@dataclass(slots=True)
class PlayerTimes:
    """Root mapping class id → track id → player best lap times."""

    classes: dict[str, PlayerClassTimes] = field(default_factory=dict)

    def times_for(self, class_id: str, track_id: str) -> list[float]:
        class_times = self.classes.get(str(class_id))
        if class_times is None:
            return []
        cell = class_times.tracks.get(str(track_id))
        if cell is None:
            return []
        return cell.times

    def set_times(self, class_id: str, track_id: str, times: list[float]) -> None:
        class_times = self.classes.setdefault(str(class_id), PlayerClassTimes())
        class_times.tracks[str(track_id)] = PlayerTrackTimes(times=list(times))

    def copy(self) -> "PlayerTimes":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "classes": {
                class_id: {
                    "tracks": {
                        track_id: {"playertimes": list(cell.times), "playertime": cell.best}
                        for track_id, cell in class_times.tracks.items()
                    }
                }
                for class_id, class_times in self.classes.items()
            }
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PlayerTimes":
        result = cls()
        for class_id, class_payload in (payload.get("classes") or {}).items():
            for track_id, cell in ((class_payload or {}).get("tracks") or {}).items():
                times = cell.get("playertimes")
                if isinstance(times, list):
                    values = [float(value) for value in times]
                elif cell.get("playertime") is not None:
                    values = [float(cell["playertime"])]
                else:
                    values = []
                result.set_times(str(class_id), str(track_id), values)
        return result
