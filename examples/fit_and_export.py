"""Example that fits a small database and prints the primed aiadaptation.xml."""

from __future__ import annotations

from aiprimer_core import (
    ClassRecord,
    Database,
    FitSettings,
    PlayerTimes,
    TrackRecord,
    apply_generated_range,
    generated_range_bounds,
    process_database,
)
from aiprimer_r3e import Catalog, encode, make_time


def build_database() -> Database:
    track = TrackRecord(
        ailevels={80: [110.0], 90: [105.0, 105.4], 100: [102.0]},
        samples_count={80: 1, 90: 2, 100: 1},
    )
    track.refresh_bounds()
    record = ClassRecord(tracks={"1": track})
    record.refresh_bounds()
    return Database(classes={"10": record})


def main() -> None:
    settings = FitSettings()
    database = build_database()
    processed = process_database(database, settings)

    for level in (80, 100, 120):
        predicted = processed.predicted_time("10", "1", level)
        print(f"AI {level}: {make_time(predicted)}")

    start, stop = generated_range_bounds(100, settings)
    result = apply_generated_range(database, processed, "10", "1", start, stop)
    catalog = Catalog(classes={"10": "GT3"}, tracks={"1": "Spa - Grand Prix"})
    print(encode(result.database, PlayerTimes(), catalog))


if __name__ == "__main__":
    main()
