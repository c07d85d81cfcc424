"""Class and track catalog parsed from the RaceRoom data dump."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from aiprimer_core.errors import AIPrimerError
from aiprimer_core.models import Database, PlayerTimes

__all__ = [
    "Catalog",
    "CatalogError",
    "CatalogValidation",
    "load_catalog",
    "parse_catalog",
    "validate_catalog",
]

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"[0-9]+")


class CatalogError(AIPrimerError, ValueError):
    """Raised for unusable catalog identifiers or a malformed data dump."""

    def __init__(self, message: str, errors: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.errors = tuple(errors)


def _numeric_key(identifier: str) -> int:
    if _IDENTIFIER.fullmatch(identifier) is None:
        raise ValueError(f"{identifier!r} is not a decimal identifier.")
    return int(identifier)


def _validated(entries: Mapping[str, str], kind: str) -> Mapping[str, str]:
    seen: dict[int, str] = {}
    for identifier in entries:
        try:
            numeric = _numeric_key(identifier)
        except ValueError as exc:
            raise CatalogError(f"{kind} id {identifier!r} is not numeric.") from exc
        if numeric in seen:
            raise CatalogError(
                f"{kind} ids {seen[numeric]!r} and {identifier!r} collide numerically."
            )
        seen[numeric] = identifier
    return MappingProxyType(dict(entries))


@dataclass(frozen=True)
class Catalog:
    """Display names keyed by class id and by track layout id."""

    classes: Mapping[str, str] = field(default_factory=dict)
    tracks: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "classes", _validated({str(k): str(v) for k, v in self.classes.items()}, "Class")
        )
        object.__setattr__(
            self, "tracks", _validated({str(k): str(v) for k, v in self.tracks.items()}, "Track")
        )

    @property
    def sorted_classes(self) -> list[str]:
        return sorted(self.classes, key=_numeric_key)

    @property
    def sorted_tracks(self) -> list[str]:
        return sorted(self.tracks, key=_numeric_key)

    def class_name(self, class_id: str) -> str:
        return self.classes.get(str(class_id), str(class_id))

    def track_name(self, track_id: str) -> str:
        return self.tracks.get(str(track_id), str(track_id))

    def merged(self, other: "Catalog") -> "Catalog":
        """Union of both catalogs, names from ``self`` take precedence."""

        return Catalog(
            classes={**other.classes, **self.classes},
            tracks={**other.tracks, **self.tracks},
        )

    @classmethod
    def from_database(
        cls, database: Database, player_times: PlayerTimes | None = None
    ) -> "Catalog":
        """Build an id-only catalog covering every cell with data."""

        class_ids: set[str] = set()
        track_ids: set[str] = set()
        for class_id, track_id, _ in database.iter_tracks():
            class_ids.add(class_id)
            track_ids.add(track_id)
        if player_times is not None:
            for class_id, class_times in player_times.classes.items():
                class_ids.add(class_id)
                track_ids.update(class_times.tracks)
        return cls(
            classes={identifier: identifier for identifier in class_ids},
            tracks={identifier: identifier for identifier in track_ids},
        )




@dataclass(frozen=True, slots=True)
class CatalogValidation:
    """Problems found in an ``r3e-data.json`` payload.

    Errors make the dump unusable; warnings only describe optional fields
    with an unexpected shape.
    """

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _check_classes(
    classes: Mapping[str, Any], errors: list[str], warnings: list[str]
) -> None:
    if not classes:
        warnings.append("No classes found in data")
        return

    valid = 0
    for key, entry in classes.items():
        if _IDENTIFIER.fullmatch(str(key)) is None:
            errors.append(f"Class ID {key!r} is not numeric")
            continue
        if not isinstance(entry, ABCMapping):
            errors.append(f"Class {key}: invalid data structure")
            continue
        if not _is_number(entry.get("Id")):
            errors.append(f"Class {key}: missing or invalid 'Id' field")
            continue
        if not _is_name(entry.get("Name")):
            errors.append(f"Class {key}: missing or invalid 'Name' field")
            continue
        if entry["Id"] != int(key):
            warnings.append(f"Class {key}: ID mismatch (key: {key}, Id: {entry['Id']})")
        cars = entry.get("Cars")
        if cars is not None:
            if not isinstance(cars, list):
                warnings.append(f"Class {key}: 'Cars' is not an array")
            else:
                broken = [
                    car
                    for car in cars
                    if not isinstance(car, ABCMapping) or not _is_number(car.get("Id"))
                ]
                if broken:
                    warnings.append(f"Class {key}: {len(broken)} cars with invalid structure")
        valid += 1

    if valid == 0:
        errors.append("No valid classes found in data")


def _check_layouts(
    key: str, track_name: str, layouts: list[Any], errors: list[str], warnings: list[str]
) -> None:
    if not layouts:
        warnings.append(f"Track {key} ({track_name}): no layouts defined")
    for index, layout in enumerate(layouts):
        if not isinstance(layout, ABCMapping):
            errors.append(f"Track {key}, layout {index}: invalid layout structure")
            continue
        if not _is_number(layout.get("Id")):
            errors.append(f"Track {key}, layout {index}: missing or invalid 'Id' field")
        if not _is_name(layout.get("Name")):
            errors.append(f"Track {key}, layout {index}: missing or invalid 'Name' field")
        label = layout.get("Name", index)
        vehicles = layout.get("MaxNumberOfVehicles")
        if vehicles is not None and not _is_number(vehicles):
            warnings.append(
                f"Track {key}, layout {label}: 'MaxNumberOfVehicles' is not a number"
            )
        parent = layout.get("Track")
        if parent is not None and not _is_number(parent):
            warnings.append(f"Track {key}, layout {label}: 'Track' reference is not a number")


def _check_tracks(
    tracks: Mapping[str, Any], errors: list[str], warnings: list[str]
) -> None:
    if not tracks:
        warnings.append("No tracks found in data")
        return

    valid = 0
    for key, entry in tracks.items():
        if _IDENTIFIER.fullmatch(str(key)) is None:
            errors.append(f"Track ID {key!r} is not numeric")
            continue
        if not isinstance(entry, ABCMapping):
            errors.append(f"Track {key}: invalid data structure")
            continue
        if not _is_number(entry.get("Id")):
            errors.append(f"Track {key}: missing or invalid 'Id' field")
            continue
        if not _is_name(entry.get("Name")):
            errors.append(f"Track {key}: missing or invalid 'Name' field")
            continue
        if entry["Id"] != int(key):
            warnings.append(f"Track {key}: ID mismatch (key: {key}, Id: {entry['Id']})")
        layouts = entry.get("layouts")
        if not isinstance(layouts, list):
            errors.append(f"Track {key}: missing or invalid 'layouts' array")
            continue
        _check_layouts(key, entry["Name"], layouts, errors, warnings)
        valid += 1

    if valid == 0:
        errors.append("No valid tracks found in data")


def validate_catalog(payload: Any) -> CatalogValidation:
    """Check the structure of an ``r3e-data.json`` payload."""

    if not isinstance(payload, ABCMapping):
        return CatalogValidation(errors=("Invalid data: must be a JSON object",))

    errors: list[str] = []
    warnings: list[str] = []
    classes = payload.get("classes")
    tracks = payload.get("tracks")
    if not isinstance(classes, ABCMapping):
        errors.append("Missing or invalid 'classes' property")
    if not isinstance(tracks, ABCMapping):
        errors.append("Missing or invalid 'tracks' property")
    for optional in ("cars", "teams"):
        if optional in payload and not isinstance(payload[optional], ABCMapping):
            warnings.append(f"{optional!r} property exists but is not an object")
    if errors:
        return CatalogValidation(tuple(errors), tuple(warnings))

    _check_classes(classes, errors, warnings)
    _check_tracks(tracks, errors, warnings)
    return CatalogValidation(tuple(errors), tuple(warnings))


def parse_catalog(payload: Any) -> Catalog:
    """Extract classes and track layouts from the ``r3e-data.json`` payload.

    Each layout becomes one catalog track named ``"<track> - <layout>"``.
    Structural errors raise :class:`CatalogError`; warnings are logged.
    """

    validation = validate_catalog(payload)
    for warning in validation.warnings:
        logger.warning(warning, extra={"event": "catalog.warning"})
    if not validation.valid:
        raise CatalogError(
            "Invalid r3e-data.json structure: " + "; ".join(validation.errors),
            validation.errors,
        )

    classes = {str(key): entry["Name"] for key, entry in payload["classes"].items()}
    tracks: dict[str, str] = {}
    for entry in payload["tracks"].values():
        for layout in entry["layouts"]:
            tracks[str(layout["Id"])] = f"{entry['Name']} - {layout['Name']}"
    return Catalog(classes=classes, tracks=tracks)


def load_catalog(path: str | Path) -> Catalog:
    """Read and parse the RaceRoom JSON dump stored at ``path``."""

    source = Path(path).expanduser()
    with source.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise CatalogError(f"Failed to parse JSON in {source}: {exc}") from exc
    return parse_catalog(payload)
