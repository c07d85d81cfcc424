"""Argument parsing helpers for the aiprimer CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from ..exporters import DOCUMENT_FILENAME
from .workflows import (
    _handle_apply,
    _handle_fit,
    _handle_reset,
    _handle_show,
    _handle_strip,
)


def _add_documents_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "documents",
        nargs="+",
        type=Path,
        help=f"{DOCUMENT_FILENAME} files to read; several are merged left to right.",
    )


def _add_output_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        dest="output",
        type=Path,
        required=True,
        help=f"Destination of the rewritten {DOCUMENT_FILENAME}.",
    )


def _add_cell_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--class",
        dest="class_id",
        required=True,
        help="Car class identifier.",
    )
    parser.add_argument(
        "--track",
        dest="track_id",
        required=True,
        help="Track layout identifier.",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg_raw = config.get("logging", {})
    logging_cfg = dict(logging_cfg_raw) if isinstance(logging_cfg_raw, Mapping) else {}
    paths_cfg_raw = config.get("paths", {})
    paths_cfg = dict(paths_cfg_raw) if isinstance(paths_cfg_raw, Mapping) else {}

    parser = argparse.ArgumentParser(
        prog="aiprimer",
        description="Fit RaceRoom AI lap times against skill and prime aiadaptation.xml.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding a [tool.aiprimer] table.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )
    parser.add_argument(
        "--catalog",
        dest="catalog",
        type=Path,
        default=paths_cfg.get("catalog"),
        help="r3e-data.json dump listing every class and track layout.",
    )
    parser.add_argument(
        "--overrides",
        dest="overrides",
        type=Path,
        default=paths_cfg.get("overrides"),
        help="YAML file with per-class and per-track fitting overrides.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    fit_parser = subparsers.add_parser(
        "fit", help="Validate every class/track curve and summarise the outcome."
    )
    _add_documents_argument(fit_parser)
    fit_parser.set_defaults(handler=_handle_fit)

    apply_parser = subparsers.add_parser(
        "apply", help="Replace one cell with lap times predicted by its fitted curve."
    )
    _add_documents_argument(apply_parser)
    _add_cell_arguments(apply_parser)
    selection = apply_parser.add_mutually_exclusive_group(required=True)
    selection.add_argument(
        "--level",
        dest="level",
        type=int,
        default=None,
        help="Centre of the generated range; its width comes from the configuration.",
    )
    selection.add_argument(
        "--from",
        dest="start",
        type=int,
        default=None,
        help="First generated AI level (requires --to).",
    )
    apply_parser.add_argument(
        "--to",
        dest="stop",
        type=int,
        default=None,
        help="Last generated AI level (with --from only).",
    )
    apply_parser.add_argument(
        "--spacing",
        dest="spacing",
        type=int,
        default=None,
        help="Step between generated levels (defaults to the configured spacing).",
    )
    _add_output_argument(apply_parser)
    apply_parser.set_defaults(handler=_handle_apply)

    strip_parser = subparsers.add_parser(
        "strip", help="Remove every generated level and keep measured samples."
    )
    _add_documents_argument(strip_parser)
    _add_output_argument(strip_parser)
    strip_parser.set_defaults(handler=_handle_strip)

    reset_parser = subparsers.add_parser(
        "reset", help="Write a document without any AI lap times."
    )
    _add_documents_argument(reset_parser)
    _add_output_argument(reset_parser)
    reset_parser.add_argument(
        "--player-times",
        dest="player_times",
        action="store_true",
        default=None,
        help="Also clear the player best lap times.",
    )
    reset_parser.set_defaults(handler=_handle_reset)

    show_parser = subparsers.add_parser(
        "show", help="Print per-level statistics and predictions for one cell."
    )
    _add_documents_argument(show_parser)
    _add_cell_arguments(show_parser)
    show_parser.set_defaults(handler=_handle_show)

    return parser


__all__ = ["build_parser"]
