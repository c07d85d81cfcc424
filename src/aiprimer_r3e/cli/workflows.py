"""Command handlers for the aiprimer CLI.

Each handler receives the parsed namespace plus the loaded configuration and
returns the text printed by :func:`aiprimer_r3e.cli.app.run_cli`.
"""

from __future__ import annotations

import argparse
from typing import Any, Mapping

from aiprimer_core.config import resolve_settings
from aiprimer_core.equations.stats import compute_stats
from aiprimer_core.errors import InvalidRange
from aiprimer_core.fitting import evaluate_database, process_database
from aiprimer_core.reconciler import (
    apply_generated_range,
    generated_range_bounds,
    remove_generated,
    reset_all,
)
from aiprimer_core.settings import MAX_RANGE_SPACING

from ..catalog import Catalog
from ..timing import make_time
from .errors import CliError
from .io import (
    load_documents,
    resolve_catalog,
    resolve_fit_settings,
    resolve_overrides,
    write_output,
)


def _cell_label(catalog: Catalog, class_id: str, track_id: str) -> str:
    return f"{catalog.class_name(class_id)} @ {catalog.track_name(track_id)}"


def _handle_fit(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    document = load_documents(namespace.documents)
    catalog = resolve_catalog(namespace.catalog, document)
    settings = resolve_fit_settings(config)
    overrides = resolve_overrides(namespace.overrides)

    verdicts = evaluate_database(document.database, settings, overrides)
    if not verdicts:
        return "No AI lap times found."

    lines: list[str] = []
    accepted = 0
    for (class_id, track_id), verdict in sorted(
        verdicts.items(), key=lambda item: (int(item[0][0]), int(item[0][1]))
    ):
        label = _cell_label(catalog, class_id, track_id)
        if verdict.accepted:
            accepted += 1
            status = "accepted"
        else:
            status = f"rejected ({verdict.reason})"
        lines.append(
            f"{label}: {status} [{verdict.passed}/{verdict.tested} within tolerance]"
        )
    lines.append(f"{accepted} of {len(verdicts)} curves accepted.")
    return "\n".join(lines)


def _resolve_range(namespace: argparse.Namespace, settings) -> tuple[int, int, int]:
    spacing = namespace.spacing
    if spacing is None:
        spacing = settings.generated_range_spacing
    if not 1 <= spacing <= MAX_RANGE_SPACING:
        raise CliError(
            f"--spacing must be between 1 and {MAX_RANGE_SPACING}.",
            category="usage",
            context={"spacing": spacing},
        )

    if namespace.level is not None:
        if namespace.stop is not None:
            raise CliError("--to cannot be combined with --level.", category="usage")
        ranged = settings.with_overrides({"generated_range_spacing": spacing})
        start, stop = generated_range_bounds(namespace.level, ranged)
        return start, stop, spacing

    if namespace.stop is None:
        raise CliError("--from requires --to.", category="usage")
    return namespace.start, namespace.stop, spacing


def _handle_apply(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    document = load_documents(namespace.documents)
    catalog = resolve_catalog(namespace.catalog, document)
    settings = resolve_fit_settings(config)
    overrides = resolve_overrides(namespace.overrides)
    class_id = str(namespace.class_id)
    track_id = str(namespace.track_id)

    cell_settings = resolve_settings(
        settings, overrides, class_id=class_id, track_id=track_id
    )
    start, stop, spacing = _resolve_range(namespace, cell_settings)
    processed = process_database(document.database, settings, overrides)

    try:
        result = apply_generated_range(
            document.database, processed, class_id, track_id, start, stop, spacing
        )
    except InvalidRange as exc:
        raise CliError.wrap(
            exc, context={"start": start, "stop": stop, "spacing": spacing}
        ) from exc

    label = _cell_label(catalog, class_id, track_id)
    if not result.ok:
        raise CliError.wrap(
            result.error,
            f"No accepted curve for {label}; the document was not written.",
            context={"class_id": class_id, "track_id": track_id},
        )

    # The catalog must also cover a cell that only exists after the apply.
    catalog = catalog.merged(Catalog.from_database(result.database))
    destination = write_output(
        namespace.output, result.database, document.player_times, catalog
    )
    levels = ", ".join(str(level) for level in result.levels)
    return f"Generated AI levels {levels} for {label}.\nWrote {destination}"


def _handle_strip(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    document = load_documents(namespace.documents)
    catalog = resolve_catalog(namespace.catalog, document)

    result = remove_generated(document.database)
    destination = write_output(
        namespace.output, result.database, document.player_times, catalog
    )

    lines = [
        f"{_cell_label(catalog, class_id, track_id)}: removed {count} generated level(s)"
        for (class_id, track_id), count in sorted(result.removed.items())
    ]
    if not lines:
        lines.append("No generated AI levels found.")
    lines.append(f"Wrote {destination}")
    return "\n".join(lines)


def _handle_reset(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    document = load_documents(namespace.documents)
    catalog = resolve_catalog(namespace.catalog, document)
    settings = resolve_fit_settings(config)

    include_player_times = namespace.player_times
    if include_player_times is None:
        include_player_times = settings.reset_player_times

    database, player_times = reset_all(
        document.database,
        document.player_times,
        include_player_times=include_player_times,
    )
    destination = write_output(namespace.output, database, player_times, catalog)
    cleared = "AI and player lap times" if include_player_times else "AI lap times"
    return f"Cleared all {cleared}.\nWrote {destination}"


def _handle_show(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    document = load_documents(namespace.documents)
    catalog = resolve_catalog(namespace.catalog, document)
    settings = resolve_fit_settings(config)
    overrides = resolve_overrides(namespace.overrides)
    class_id = str(namespace.class_id)
    track_id = str(namespace.track_id)
    label = _cell_label(catalog, class_id, track_id)

    track = document.database.track(class_id, track_id)
    player_best = document.player_times.times_for(class_id, track_id)
    if track is None and not player_best:
        raise CliError(
            f"No lap times recorded for {label}.",
            category="not_found",
            context={"class_id": class_id, "track_id": track_id},
        )

    processed = process_database(document.database, settings, overrides)
    lines = [label]
    if player_best:
        lines.append(f"Player best: {make_time(min(player_best))}")

    if track is not None:
        lines.append(f"{'level':>5}  {'laps':>4}  {'mean':>10}  {'stddev':>10}  {'fitted':>10}")
        for level in sorted(track.ailevels):
            stats = compute_stats(track.ailevels[level])
            predicted = processed.predicted_time(class_id, track_id, level)
            fitted = make_time(predicted) if predicted is not None else "-"
            marker = " (generated)" if track.is_generated(level) else ""
            lines.append(
                f"{level:>5}  {stats.count:>4}  {make_time(stats.mean):>10}  "
                f"{make_time(stats.stddev):>10}  {fitted:>10}{marker}"
            )
        if processed.track(class_id, track_id) is None:
            lines.append("No accepted curve for this cell.")
    return "\n".join(lines)


__all__ = [
    "_handle_apply",
    "_handle_fit",
    "_handle_reset",
    "_handle_show",
    "_handle_strip",
]
