"""Convenience re-exports for test helpers."""

from tests.helpers.database import (
    build_database,
    build_linear_track,
    build_player_times,
    build_track,
    linear_time,
    spa_monza_database,
)
from tests.helpers.documents import (
    SINGLE_CELL_DOCUMENT,
    catalog_payload,
    write_catalog,
    write_document_text,
    write_spa_monza_document,
)

__all__ = [
    "SINGLE_CELL_DOCUMENT",
    "build_database",
    "build_linear_track",
    "build_player_times",
    "build_track",
    "catalog_payload",
    "linear_time",
    "spa_monza_database",
    "write_catalog",
    "write_document_text",
    "write_spa_monza_document",
]
