from __future__ import annotations

import pytest

from aiprimer_core.errors import InvalidRange, NotFitted
from aiprimer_core.fitting import process_database
from aiprimer_core.models import GENERATED_SAMPLES, Database
from aiprimer_core.reconciler import (
    apply_generated_range,
    generated_range_bounds,
    merge_databases,
    merge_player_times,
    remove_generated,
    reset_all,
)
from aiprimer_core.settings import FitSettings

from tests.helpers import build_database, build_player_times, build_track


def test_apply_replaces_cell_with_generated_levels(spa_monza: Database) -> None:
    processed = process_database(spa_monza)

    result = apply_generated_range(spa_monza, processed, "10", "1", 98, 102)

    assert result.ok
    assert result.levels == (98, 99, 100, 101, 102)
    track = result.database.track("10", "1")
    assert sorted(track.ailevels) == [98, 99, 100, 101, 102]
    assert all(track.samples_count[level] == GENERATED_SAMPLES for level in track.ailevels)
    assert track.ailevels[100] == [processed.predicted_time("10", "1", 100)]
    assert (track.min_ai, track.max_ai) == (98, 102)
    # Measured samples of the replaced cell are gone, others are untouched.
    assert 80 not in track.ailevels
    assert result.database.track("10", "2").ailevels == {95: [90.0]}


def test_apply_honours_spacing(spa_monza: Database) -> None:
    processed = process_database(spa_monza)

    result = apply_generated_range(spa_monza, processed, "10", "1", 90, 100, spacing=5)

    assert result.levels == (90, 95, 100)


def test_apply_is_idempotent(spa_monza: Database) -> None:
    processed = process_database(spa_monza)

    once = apply_generated_range(spa_monza, processed, "10", "1", 98, 102)
    twice = apply_generated_range(once.database, processed, "10", "1", 98, 102)

    assert twice.database.to_dict() == once.database.to_dict()


def test_apply_does_not_mutate_input(spa_monza: Database) -> None:
    before = spa_monza.to_dict()
    processed = process_database(spa_monza)

    apply_generated_range(spa_monza, processed, "10", "1", 80, 120)

    assert spa_monza.to_dict() == before


def test_apply_reports_unfitted_cell(spa_monza: Database) -> None:
    processed = process_database(spa_monza)

    result = apply_generated_range(spa_monza, processed, "10", "2", 90, 100)

    assert not result.ok
    assert isinstance(result.error, NotFitted)
    assert (result.error.class_id, result.error.track_id) == ("10", "2")
    assert result.database is spa_monza
    assert result.levels == ()


@pytest.mark.parametrize(
    ("start", "stop", "spacing"),
    [
        pytest.param(100, 90, 1, id="inverted"),
        pytest.param(90, 100, 0, id="zero-spacing"),
        pytest.param(70, 90, 1, id="below-band"),
        pytest.param(110, 130, 1, id="above-band"),
    ],
)
def test_apply_rejects_invalid_ranges(
    spa_monza: Database, start: int, stop: int, spacing: int
) -> None:
    processed = process_database(spa_monza)

    with pytest.raises(InvalidRange):
        apply_generated_range(spa_monza, processed, "10", "1", start, stop, spacing)


def test_remove_generated_keeps_measured_samples(spa_monza: Database) -> None:
    processed = process_database(spa_monza)
    applied = apply_generated_range(spa_monza, processed, "10", "1", 98, 102).database
    applied.classes["10"].tracks["1"].ailevels[80] = [110.0]
    applied.classes["10"].tracks["1"].samples_count[80] = 3
    applied.classes["10"].tracks["1"].refresh_bounds()

    result = remove_generated(applied)

    assert result.removed == {("10", "1"): 5}
    assert result.total == 5
    track = result.database.track("10", "1")
    assert track.ailevels == {80: [110.0]}
    assert (track.min_ai, track.max_ai) == (80, 80)
    assert 98 in applied.track("10", "1").ailevels


def test_remove_generated_clears_bounds_of_emptied_records() -> None:
    database = build_database(
        {("10", "1"): build_track({80: [110.0], 90: [105.0], 100: [100.0]})}
    )
    processed = process_database(database)
    applied = apply_generated_range(database, processed, "10", "1", 80, 100).database

    result = remove_generated(applied)

    assert result.removed == {("10", "1"): 21}
    class_record = result.database.classes["10"]
    track = class_record.tracks["1"]
    assert track.ailevels == {}
    assert (track.min_ai, track.max_ai) == (None, None)
    assert (class_record.min_ai, class_record.max_ai) == (None, None)
    payload = result.database.to_dict()["classes"]["10"]
    assert "minAI" not in payload
    assert "maxAI" not in payload
    assert "minAI" not in payload["tracks"]["1"]


def test_remove_generated_is_idempotent(spa_monza: Database) -> None:
    processed = process_database(spa_monza)
    applied = apply_generated_range(spa_monza, processed, "10", "1", 98, 102).database

    once = remove_generated(applied)
    twice = remove_generated(once.database)

    assert twice.removed == {}
    assert twice.database.to_dict() == once.database.to_dict()


def test_reset_keeps_player_times_by_default(spa_monza: Database) -> None:
    player_times = build_player_times({("10", "1"): [101.5]})

    database, kept = reset_all(spa_monza, player_times)

    assert database.is_empty()
    assert database.classes == {}
    assert kept.times_for("10", "1") == [101.5]
    assert kept is not player_times
    assert not spa_monza.is_empty()


def test_reset_can_clear_player_times(spa_monza: Database) -> None:
    player_times = build_player_times({("10", "1"): [101.5]})

    _, cleared = reset_all(spa_monza, player_times, include_player_times=True)

    assert cleared.times_for("10", "1") == []
    assert player_times.times_for("10", "1") == [101.5]


@pytest.mark.parametrize(
    ("selected", "expected"),
    [
        pytest.param(100, (98, 102), id="centred"),
        pytest.param(81, (80, 84), id="clamped-low"),
        pytest.param(119, (117, 120), id="clamped-high"),
        pytest.param(None, (80, 84), id="no-selection"),
    ],
)
def test_generated_range_bounds(selected: int | None, expected: tuple[int, int]) -> None:
    assert generated_range_bounds(selected, FitSettings()) == expected


def test_generated_range_bounds_scale_with_spacing() -> None:
    settings = FitSettings(generated_range_levels=3, generated_range_spacing=2)

    assert generated_range_bounds(100, settings) == (98, 102)


def test_merge_databases_appends_unseen_times() -> None:
    base = build_database({("10", "1"): build_track({80: [110.0]}, {80: 2})})
    incoming = build_database(
        {
            ("10", "1"): build_track({80: [110.0, 111.0], 90: [105.0]}, {80: 3}),
            ("20", "2"): build_track({100: [90.0]}),
        }
    )

    merged = merge_databases(base, incoming)

    track = merged.track("10", "1")
    assert track.ailevels == {80: [110.0, 111.0], 90: [105.0]}
    assert track.samples_count == {80: 3, 90: 1}
    assert (track.min_ai, track.max_ai) == (80, 90)
    assert merged.track("20", "2").ailevels == {100: [90.0]}
    assert base.track("10", "1").ailevels == {80: [110.0]}


def test_merge_player_times_prefers_incoming_cells() -> None:
    base = build_player_times({("10", "1"): [101.5], ("10", "2"): [90.0]})
    incoming = build_player_times({("10", "1"): [100.25], ("10", "2"): []})

    merged = merge_player_times(base, incoming)

    assert merged.times_for("10", "1") == [100.25]
    assert merged.times_for("10", "2") == [90.0]
