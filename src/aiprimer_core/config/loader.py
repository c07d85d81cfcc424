"""Resolve per-class and per-track fitting overrides."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as MappingABC
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from aiprimer_core.settings import FitSettings

__all__ = ["get_fit_params", "load_fit_overrides", "resolve_settings"]


_OVERRIDES_RESOURCE_PACKAGE = "aiprimer_core.config"
_OVERRIDES_RESOURCE_NAME = "fitting.yaml"


def get_fit_params(
    config: Mapping[str, Any],
    *,
    class_id: str | None = None,
    track_id: str | None = None,
) -> Mapping[str, Any]:
    """Merge the override sections that apply to ``class_id``/``track_id``.

    Sections are merged in increasing order of specificity: ``defaults``,
    ``tracks.__default__``, ``tracks.<track>``, ``classes.__default__``,
    ``classes.<class>`` and finally ``classes.<class>.tracks.<track>``.
    """

    result: dict[str, Any] = {}

    def merge(payload: Mapping[str, Any] | None) -> None:
        if not isinstance(payload, MappingABC):
            return
        _deep_merge(result, {key: value for key, value in payload.items() if key != "tracks"})

    merge(config.get("defaults"))

    tracks_table = config.get("tracks")
    if isinstance(tracks_table, MappingABC):
        merge(_lookup_section(tracks_table, "__default__"))
        merge(_lookup_section(tracks_table, track_id))

    classes_table = config.get("classes")
    if isinstance(classes_table, MappingABC):
        merge(_lookup_section(classes_table, "__default__"))
        class_section = _lookup_section(classes_table, class_id)
        merge(class_section)
        if isinstance(class_section, MappingABC):
            track_overrides = class_section.get("tracks")
            if isinstance(track_overrides, MappingABC):
                merge(_lookup_section(track_overrides, "__default__"))
                merge(_lookup_section(track_overrides, track_id))

    return MappingProxyType(dict(result))


def resolve_settings(
    base: FitSettings,
    overrides: Mapping[str, Any] | None,
    *,
    class_id: str | None = None,
    track_id: str | None = None,
) -> FitSettings:
    """Return ``base`` with the overrides for one class/track applied.

    The skill band is never overridden per track; processed tables stay dense
    over the same levels for every class.
    """

    if not overrides:
        return base
    params = dict(get_fit_params(overrides, class_id=class_id, track_id=track_id))
    params.pop("min_ai", None)
    params.pop("max_ai", None)
    return base.with_overrides(params)


def load_fit_overrides(
    path: str | Path | None = None,
    *,
    search_paths: Iterable[str | Path] | None = None,
) -> Mapping[str, Any]:
    """Load the override table honouring site-specific fallbacks.

    Parameters
    ----------
    path:
        Absolute or relative path to a YAML file. When supplied the loader
        skips the search order and reads this file directly.
    search_paths:
        Optional iterable of directories or files to inspect. Entries pointing
        to directories are resolved against ``fitting.yaml``. The first
        existing file wins, otherwise the packaged defaults are used.
    """

    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(candidate)
        return _load_overrides_payload(candidate)

    candidates: list[Path] = []
    if search_paths is not None:
        for entry in search_paths:
            entry_path = Path(entry).expanduser()
            if entry_path.is_dir():
                candidates.append(entry_path / _OVERRIDES_RESOURCE_NAME)
            else:
                candidates.append(entry_path)

    for candidate in candidates:
        if candidate.is_file():
            return _load_overrides_payload(candidate)

    resource = resources.files(_OVERRIDES_RESOURCE_PACKAGE).joinpath(
        _OVERRIDES_RESOURCE_NAME
    )
    payload = resource.read_text(encoding="utf-8")
    return _load_overrides_from_text(payload, source=str(resource))


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        key_str = str(key)
        existing = target.get(key_str)
        if isinstance(existing, MappingABC) and isinstance(value, MappingABC):
            merged = dict(existing)
            _deep_merge(merged, value)
            target[key_str] = merged
        elif isinstance(value, MappingABC):
            target[key_str] = _deep_copy_mapping(value)
        else:
            target[key_str] = value


def _deep_copy_mapping(source: Mapping[str, Any]) -> dict[str, Any]:
    copied: dict[str, Any] = {}
    for key, value in source.items():
        key_str = str(key)
        if isinstance(value, MappingABC):
            copied[key_str] = _deep_copy_mapping(value)
        else:
            copied[key_str] = value
    return copied


def _load_overrides_payload(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as buffer:
        payload = buffer.read()
    return _load_overrides_from_text(payload, source=str(path))


def _load_overrides_from_text(payload: str, *, source: str) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in fitting overrides: {source}") from exc

    if data is None:
        return MappingProxyType({})
    if not isinstance(data, MappingABC):
        raise TypeError(f"Fitting overrides in {source!s} must decode to a mapping")
    return MappingProxyType(_deep_copy_mapping(data))


def _lookup_section(
    table: Mapping[str, Any] | None, key: str | None
) -> Mapping[str, Any] | None:
    if not isinstance(table, MappingABC) or key is None:
        return None
    candidate = table.get(key)
    if isinstance(candidate, MappingABC):
        return candidate
    normalised = _normalise_identifier(key)
    if normalised is None:
        return None
    for raw_key, value in table.items():
        if not isinstance(value, MappingABC):
            continue
        if _normalise_identifier(raw_key) == normalised:
            return value
    return None


def _normalise_identifier(value: Any) -> str | None:
    if value is None:
        return None
    filtered = [char for char in str(value).lower() if char.isalnum() or char == "_"]
    cleaned = "".join(filtered).strip("_")
    return cleaned or None
