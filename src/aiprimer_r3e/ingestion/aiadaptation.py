"""Decode RaceRoom ``aiadaptation.xml`` documents into database records."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from aiprimer_core.errors import AIPrimerError
from aiprimer_core.models import ClassRecord, Database, PlayerTimes, TrackRecord

__all__ = ["AdaptationDocument", "DocumentError", "decode", "read_document"]

logger = logging.getLogger(__name__)


class DocumentError(AIPrimerError, ValueError):
    """Raised when a document is not well-formed ``aiadaptation.xml``."""


@dataclass(slots=True)
class AdaptationDocument:
    database: Database = field(default_factory=Database)
    player_times: PlayerTimes = field(default_factory=PlayerTimes)

    @property
    def has_ai_data(self) -> bool:
        return not self.database.is_empty()


def _text(element: ET.Element | None) -> str | None:
    if element is None or element.text is None:
        return None
    stripped = element.text.strip()
    return stripped or None


def _parse_float(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _paired_children(
    parent: ET.Element, key_tag: str, value_tag: str
) -> Iterator[tuple[ET.Element, ET.Element]]:
    """Pair ``key_tag``/``value_tag`` siblings by position.

    A block whose counts disagree cannot be aligned and yields nothing.
    """

    keys = parent.findall(key_tag)
    values = parent.findall(value_tag)
    if len(keys) != len(values):
        logger.warning(
            "Skipping <%s> block with %d %s and %d %s entries",
            parent.tag,
            len(keys),
            key_tag,
            len(values),
            value_tag,
            extra={"event": "decoder.misaligned"},
        )
        return iter(())
    return zip(keys, values)


def _decode_player_times(
    entries: ET.Element, player_times: PlayerTimes, class_id: str, track_id: str
) -> None:
    times: list[float] = []
    for lap_time in entries.findall("lapTime"):
        value = _parse_float(_text(lap_time))
        if value is not None:
            times.append(value)
    if times:
        player_times.set_times(class_id, track_id, times)


def _decode_ai_entries(entries: ET.Element) -> TrackRecord:
    track = TrackRecord()
    for skill, data in _paired_children(entries, "aiSkill", "aiData"):
        level = _parse_int(_text(skill))
        lap_time = _parse_float(_text(data.find("averagedLapTime")))
        if level is None or lap_time is None:
            continue
        samples = _parse_int(_text(data.find("numberOfSampledRaces")))
        times = track.ailevels.setdefault(level, [])
        if lap_time not in times:
            times.append(lap_time)
        track.samples_count[level] = 1 if samples is None else samples
    track.refresh_bounds()
    return track


def decode(text: str) -> AdaptationDocument:
    """Parse ``text`` into a fresh :class:`AdaptationDocument`.

    Cells without AI entries are not added to the database and cells without
    player times are not added to the player times.
    """

    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise DocumentError(f"Malformed aiadaptation document: {exc}") from exc
    if root.tag != "AiAdaptation":
        raise DocumentError(f"Unexpected root element <{root.tag}>.")

    document = AdaptationDocument()
    tracklist = root.find("aiAdaptationData")
    if tracklist is None:
        return document

    for layout, value in _paired_children(tracklist, "layoutId", "value"):
        track_id = _text(layout)
        if track_id is None:
            continue
        for class_key, sampled in _paired_children(value, "carClassId", "sampledData"):
            class_id = _text(class_key)
            if class_id is None:
                continue

            player_entries = sampled.find("playerBestLapTimes")
            if player_entries is not None:
                _decode_player_times(
                    player_entries, document.player_times, class_id, track_id
                )

            ai_entries = sampled.find("aiSkillVsLapTimes")
            if ai_entries is None:
                continue
            track = _decode_ai_entries(ai_entries)
            if track.max_ai is None:
                continue
            class_record = document.database.classes.setdefault(class_id, ClassRecord())
            class_record.tracks[track_id] = track
            class_record.refresh_bounds()

    return document


def read_document(path: str | Path) -> AdaptationDocument:
    """Decode the document stored at ``path``."""

    source = Path(path).expanduser()
    return decode(source.read_text(encoding="utf-8"))
