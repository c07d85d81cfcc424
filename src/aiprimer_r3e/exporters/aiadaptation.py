"""Serialise AI lap time databases into RaceRoom's ``aiadaptation.xml``.

The simulator expects a fixed-shape table: every catalog track carries one
block per catalog class even when the cell is empty.  Tracks and classes are
ordered by numeric id and every repeated element is preceded by an
``<!-- Index:n -->`` comment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from aiprimer_core.equations.rounding import to_fixed
from aiprimer_core.equations.stats import compute_stats
from aiprimer_core.models import Database, PlayerTimes

from aiprimer_r3e.catalog import Catalog

__all__ = [
    "DOCUMENT_FILENAME",
    "encode",
    "format_number",
    "write_document",
]

DOCUMENT_FILENAME = "aiadaptation.xml"
_INDENT = "  "


def format_number(value: float) -> str:
    """Render ``value`` with four decimals minus trailing zeros.

    >>> format_number(5.0), format_number(10.05), format_number(0.1234)
    ('5', '10.05', '0.1234')
    """

    formatted = to_fixed(value, 4)
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    if formatted == "-0":
        return "0"
    return formatted


@dataclass(slots=True)
class _Cell:
    ailevels: dict[int, list[float]] = field(default_factory=dict)
    samples_count: dict[int, int] = field(default_factory=dict)
    player_times: list[float] = field(default_factory=list)


def _build_matrix(
    database: Database, player_times: PlayerTimes, catalog: Catalog
) -> dict[str, dict[str, _Cell]]:
    matrix = {
        track_id: {class_id: _Cell() for class_id in catalog.sorted_classes}
        for track_id in catalog.sorted_tracks
    }

    for class_id, track_id, track in database.iter_tracks():
        cell = matrix.get(track_id, {}).get(class_id)
        if cell is None:
            continue
        cell.ailevels = track.ailevels
        cell.samples_count = track.samples_count

    for class_id, class_times in player_times.classes.items():
        for track_id, times in class_times.tracks.items():
            cell = matrix.get(track_id, {}).get(class_id)
            if cell is None:
                continue
            cell.player_times = times.times

    return matrix


def encode(database: Database, player_times: PlayerTimes, catalog: Catalog) -> str:
    """Return the ``aiadaptation.xml`` document for the catalog matrix.

    Cells without a catalog entry are dropped; cells in the catalog without
    data are emitted empty.
    """

    matrix = _build_matrix(database, player_times, catalog)
    lines: list[str] = [
        '<AiAdaptation ID="/aiadaptation">',
        f'{_INDENT}<latestVersion type="uint32">0</latestVersion>',
        f"{_INDENT}<aiAdaptationData>",
    ]

    track_pad = _INDENT * 2
    class_pad = _INDENT * 3
    data_pad = _INDENT * 4
    entry_pad = _INDENT * 5
    value_pad = _INDENT * 6

    for track_index, track_id in enumerate(catalog.sorted_tracks):
        lines.append(f"{track_pad}<!-- Index:{track_index} -->")
        lines.append(f'{track_pad}<layoutId type="int32">{track_id}</layoutId>')
        lines.append(f"{track_pad}<value>")

        for class_index, class_id in enumerate(catalog.sorted_classes):
            cell = matrix[track_id][class_id]
            lines.append(f"{class_pad}<!-- Index:{class_index} -->")
            lines.append(f'{class_pad}<carClassId type="int32">{class_id}</carClassId>')
            lines.append(f"{class_pad}<sampledData>")

            lines.append(f"{data_pad}<playerBestLapTimes>")
            for time_index, lap_time in enumerate(cell.player_times):
                lines.append(f"{entry_pad}<!-- Index:{time_index} -->")
                lines.append(
                    f'{entry_pad}<lapTime type="float32">{format_number(lap_time)}</lapTime>'
                )
            lines.append(f"{data_pad}</playerBestLapTimes>")

            lines.append(f"{data_pad}<aiSkillVsLapTimes>")
            ai_index = 0
            for level in sorted(cell.ailevels):
                stats = compute_stats(cell.ailevels[level])
                if stats.count == 0:
                    continue
                samples = cell.samples_count.get(level, 1)
                lines.append(f"{entry_pad}<!-- Index:{ai_index} -->")
                lines.append(f'{entry_pad}<aiSkill type="uint32">{level}</aiSkill>')
                lines.append(f"{entry_pad}<aiData>")
                lines.append(
                    f'{value_pad}<averagedLapTime type="float32">'
                    f"{format_number(stats.mean)}</averagedLapTime>"
                )
                lines.append(
                    f'{value_pad}<numberOfSampledRaces type="uint32">'
                    f"{samples}</numberOfSampledRaces>"
                )
                lines.append(f"{entry_pad}</aiData>")
                ai_index += 1
            lines.append(f"{data_pad}</aiSkillVsLapTimes>")

            lines.append(f"{class_pad}</sampledData>")

        lines.append(f"{track_pad}</value>")

    lines.append(f"{_INDENT}</aiAdaptationData>")
    lines.append("</AiAdaptation>")
    return "\n".join(lines)


def write_document(
    path: str | Path,
    database: Database,
    player_times: PlayerTimes,
    catalog: Catalog,
) -> Path:
    """Encode and write the document to ``path`` as UTF-8."""

    destination = Path(path).expanduser()
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(encode(database, player_times, catalog), encoding="utf-8")
    return destination
