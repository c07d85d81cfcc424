from __future__ import annotations

import logging

import pytest

from aiprimer_core.equations import LinearFit
from aiprimer_core.fitting import (
    REJECT_SPREAD,
    CurveVerdict,
    evaluate_database,
    process_database,
)
from aiprimer_core.fitting import orchestrator
from aiprimer_core.models import Database, ProcessedDatabase
from aiprimer_core.settings import FitSettings

from tests.helpers import build_database, build_track


def test_accepted_track_is_dense_over_configured_band(spa_monza: Database) -> None:
    processed = process_database(spa_monza)

    assert isinstance(processed, ProcessedDatabase)
    track = processed.track("10", "1")
    assert track is not None
    assert sorted(track.ailevels) == list(range(80, 121))
    assert all(len(times) == 1 for times in track.ailevels.values())
    assert (track.min_ai, track.max_ai) == (80, 120)
    assert (processed.classes["10"].min_ai, processed.classes["10"].max_ai) == (80, 120)

    predicted = [track.ailevels[level][0] for level in range(80, 121)]
    assert all(later <= earlier for earlier, later in zip(predicted, predicted[1:]))


def test_predictions_are_rounded_to_two_decimals(spa_monza: Database) -> None:
    processed = process_database(spa_monza)

    assert processed.predicted_time("10", "1", 80) == pytest.approx(109.67)
    assert processed.predicted_time("10", "1", 85) == round(141.6666667 - 0.4 * 85, 2)


def test_rejected_tracks_and_empty_classes_are_absent(spa_monza: Database) -> None:
    spa_monza.classes.update(
        build_database({("20", "1"): build_track({90: [100.0]})}).classes
    )

    processed = process_database(spa_monza)

    assert processed.track("10", "2") is None
    assert "20" not in processed.classes
    assert processed.predicted_time("10", "2", 95) is None


def test_prediction_ties_round_up(
    spa_monza: Database, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        orchestrator,
        "validate_track",
        lambda track, settings: CurveVerdict(LinearFit(a=200.125, b=-1.0), 3, 3),
    )

    processed = process_database(spa_monza, FitSettings(min_ai=80, max_ai=90))

    assert processed.predicted_time("10", "1", 80) == 120.13
    assert processed.predicted_time("10", "1", 90) == 110.13


def test_source_database_is_not_modified(spa_monza: Database) -> None:
    before = spa_monza.to_dict()

    process_database(spa_monza)

    assert spa_monza.to_dict() == before


def test_band_follows_settings(spa_monza: Database) -> None:
    processed = process_database(spa_monza, FitSettings(min_ai=90, max_ai=110))

    track = processed.track("10", "1")
    assert sorted(track.ailevels) == list(range(90, 111))


def test_overrides_apply_per_track(spa_monza: Database) -> None:
    overrides = {"classes": {"10": {"tracks": {"2": {"min_skill_spread": 0}}}}}
    spa_monza.classes["10"].tracks["2"] = build_track({95: [90.0], 100: [89.0]})

    verdicts = evaluate_database(spa_monza, FitSettings(), overrides)

    assert verdicts[("10", "2")].accepted
    assert evaluate_database(spa_monza, FitSettings())[("10", "2")].reason == REJECT_SPREAD


def test_rejections_are_logged(spa_monza: Database, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="aiprimer_core"):
        process_database(spa_monza)

    rejected = [record for record in caplog.records if getattr(record, "event", None) == "fitting.rejected"]
    assert len(rejected) == 1
    assert rejected[0].reason == REJECT_SPREAD
