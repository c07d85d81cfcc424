"""Lap time parsing and formatting."""

from __future__ import annotations

import math
import re

from aiprimer_core.equations.rounding import to_fixed

__all__ = ["make_time", "output_time", "parse_time"]

_HOURS_PATTERN = re.compile(r"(\d+):(\d+):([0-9.]+)")
_MINUTES_PATTERN = re.compile(r"(\d+):([0-9.]+)")


def parse_time(text: str | None) -> float | None:
    """Convert ``H:MM:SS.ffff`` or ``M:SS.ffff`` into seconds."""

    if not text:
        return None
    try:
        match = _HOURS_PATTERN.search(text)
        if match:
            hours, minutes, seconds = match.groups()
            return int(hours) * 3600 + int(minutes) * 60 + float(seconds)
        match = _MINUTES_PATTERN.search(text)
        if match:
            minutes, seconds = match.groups()
            return int(minutes) * 60 + float(seconds)
    except ValueError:
        return None
    return None


def make_time(seconds: float, sep: str = ":") -> str:
    """Format ``seconds`` as ``M:SS.ffff``, or ``H:MM:SS.ffff`` past one hour."""

    hours = math.floor(seconds / 3600)
    seconds -= hours * 3600
    minutes = math.floor(seconds / 60)
    seconds -= minutes * 60

    whole = math.floor(seconds)
    fraction = to_fixed(seconds - whole, 4)
    if fraction.startswith("1"):
        # Rounding carried into the next second.
        whole += 1
    text = f"{whole:02d}{fraction[1:]}"
    if hours > 0:
        return f"{hours}{sep}{minutes:02d}{sep}{text}"
    return f"{minutes}{sep}{text}"


def output_time(seconds: float) -> str:
    return to_fixed(seconds, 2)
