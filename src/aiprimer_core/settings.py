"""Fitting configuration passed explicitly through the pipeline."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

from aiprimer_core.errors import InvalidRange

__all__ = [
    "DEFAULT_MAX_AI",
    "DEFAULT_MIN_AI",
    "FitSettings",
    "MAX_RANGE_SPACING",
]


DEFAULT_MIN_AI = 80
DEFAULT_MAX_AI = 120
MAX_RANGE_SPACING = 5

# Keys used by the JSON configuration of the desktop tooling.
_LEGACY_KEYS: Mapping[str, str] = {
    "minAI": "min_ai",
    "maxAI": "max_ai",
    "fitAll": "use_all_samples",
    "testMinAIdiffs": "min_skill_spread",
    "testMaxTimePct": "max_residual_pct",
    "testMaxFailsPct": "max_fail_fraction_pct",
    "aiNumLevels": "generated_range_levels",
    "aiSpacing": "generated_range_spacing",
}


def _coerce_bool(value: Any, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return fallback


def _coerce_int(value: Any, fallback: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback


def _coerce_fraction(value: Any, fallback: float) -> float:
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    if numeric < 0.0:
        return 0.0
    return numeric


@dataclass(frozen=True, slots=True)
class FitSettings:
    """Immutable fitting and range configuration."""

    min_ai: int = DEFAULT_MIN_AI
    max_ai: int = DEFAULT_MAX_AI
    min_skill_spread: int = 10
    use_all_samples: bool = False
    max_residual_pct: float = 0.05
    max_fail_fraction_pct: float = 0.1
    generated_range_levels: int = 5
    generated_range_spacing: int = 1
    reset_player_times: bool = False

    def __post_init__(self) -> None:
        if self.min_ai > self.max_ai:
            raise InvalidRange(
                f"Skill band is inverted: min_ai={self.min_ai} > max_ai={self.max_ai}."
            )

    @property
    def levels(self) -> range:
        """Every skill level of the configured band, inclusive."""

        return range(self.min_ai, self.max_ai + 1)

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "FitSettings":
        """Coerce a raw ``[fitting]`` table (or a full config) into settings."""

        if not config:
            return cls()
        section = config.get("fitting")
        payload: Mapping[str, Any] = section if isinstance(section, ABCMapping) else config
        return cls().with_overrides(payload)

    def with_overrides(self, payload: Mapping[str, Any] | None) -> "FitSettings":
        """Return a copy with the recognised keys of ``payload`` applied."""

        if not payload:
            return self
        known = {item.name for item in fields(self)}
        raw: dict[str, Any] = {}
        for key, value in payload.items():
            name = _LEGACY_KEYS.get(str(key), str(key))
            if name in known:
                raw[name] = value

        updates: dict[str, Any] = {}
        for name, value in raw.items():
            current = getattr(self, name)
            if isinstance(current, bool):
                updates[name] = _coerce_bool(value, current)
            elif isinstance(current, int):
                updates[name] = _coerce_int(value, current)
            else:
                updates[name] = _coerce_fraction(value, current)

        if "generated_range_spacing" in updates:
            updates["generated_range_spacing"] = max(
                1, min(MAX_RANGE_SPACING, updates["generated_range_spacing"])
            )
        if "generated_range_levels" in updates:
            updates["generated_range_levels"] = max(1, updates["generated_range_levels"])
        if "min_skill_spread" in updates:
            updates["min_skill_spread"] = max(0, updates["min_skill_spread"])
        return replace(self, **updates)

    def as_dict(self) -> dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in fields(self)}
