"""Configuration and document helpers for the aiprimer CLI."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from aiprimer_core.config import load_fit_overrides
from aiprimer_core.errors import InvalidRange
from aiprimer_core.models import Database, PlayerTimes
from aiprimer_core.reconciler import merge_databases, merge_player_times
from aiprimer_core.settings import FitSettings

from ..catalog import Catalog, CatalogError, load_catalog
from ..configuration import load_project_config, resolve_pyproject_path
from ..exporters import write_document
from ..ingestion import AdaptationDocument, DocumentError, read_document
from .errors import CliError

__all__ = [
    "CONFIG_ENV_VAR",
    "load_cli_config",
    "load_documents",
    "resolve_catalog",
    "resolve_fit_settings",
    "resolve_overrides",
    "write_output",
]

CONFIG_ENV_VAR = "AIPRIMER_CONFIG"

logger = logging.getLogger(__name__)


def _iter_unique_paths(candidates: List[Path]) -> List[Path]:
    seen: Dict[Path, None] = {}
    ordered: List[Path] = []
    for candidate in candidates:
        resolved = candidate.expanduser().resolve(strict=False)
        if resolved in seen:
            continue
        seen[resolved] = None
        ordered.append(resolved)
    return ordered


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load CLI defaults from ``pyproject.toml`` files.

    The explicit ``path`` is tried first, then ``$AIPRIMER_CONFIG`` and
    finally the working directory.
    """

    bases: List[Path] = []
    if path is not None:
        bases.append(path)
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        bases.append(Path(env_config))
    bases.append(Path.cwd())

    candidates = [resolve_pyproject_path(base) for base in bases]
    for candidate in _iter_unique_paths([item for item in candidates if item is not None]):
        loaded = load_project_config(candidate)
        if not loaded:
            continue
        payload, source = loaded
        payload["_config_path"] = str(source)
        return payload

    return {"_config_path": None}


def load_documents(paths: Sequence[Path]) -> AdaptationDocument:
    """Decode ``paths`` and merge them left to right into one document."""

    database = Database()
    player_times = PlayerTimes()
    for path in paths:
        source = Path(path).expanduser()
        if not source.is_file():
            raise CliError(
                f"Document '{source}' does not exist.",
                category="not_found",
                context={"path": source},
            ).log()
        try:
            document = read_document(source)
        except (DocumentError, OSError) as exc:
            raise CliError.wrap(exc, context={"path": source}) from exc
        database = merge_databases(database, document.database)
        player_times = merge_player_times(player_times, document.player_times)
        logger.debug(
            "Loaded document %s",
            source,
            extra={"event": "cli.document_loaded", "has_ai_data": document.has_ai_data},
        )
    return AdaptationDocument(database=database, player_times=player_times)


def resolve_catalog(path: Optional[Path], document: AdaptationDocument) -> Catalog:
    """Catalog for encoding ``document``; ids without a name use the id itself."""

    try:
        derived = Catalog.from_database(document.database, document.player_times)
    except CatalogError as exc:
        raise CliError.wrap(exc) from exc
    if path is None:
        return derived
    source = Path(path).expanduser()
    if not source.is_file():
        raise CliError(
            f"Catalog '{source}' does not exist.",
            category="not_found",
            context={"path": source},
        ).log()
    try:
        return load_catalog(source).merged(derived)
    except (ValueError, OSError) as exc:
        raise CliError.wrap(
            exc,
            f"Unable to read catalog '{source}': {exc}",
            category="io",
            context={"path": source},
        ) from exc


def resolve_overrides(path: Optional[Path]) -> Mapping[str, Any]:
    """Per-class/track overrides from ``path`` or the packaged defaults."""

    if path is not None and not Path(path).expanduser().is_file():
        raise CliError(
            f"Overrides file '{path}' does not exist.",
            category="not_found",
            context={"path": path},
        ).log()
    try:
        return load_fit_overrides(path)
    except (TypeError, ValueError) as exc:
        raise CliError.wrap(exc, category="usage", context={"path": path}) from exc


def resolve_fit_settings(config: Mapping[str, Any]) -> FitSettings:
    try:
        return FitSettings.from_config(config)
    except InvalidRange as exc:
        raise CliError.wrap(
            exc,
            f"Invalid [fitting] configuration: {exc}",
            context={"config_path": config.get("_config_path")},
        ) from exc


def write_output(
    destination: Path,
    database: Database,
    player_times: PlayerTimes,
    catalog: Catalog,
) -> Path:
    try:
        return write_document(destination, database, player_times, catalog)
    except OSError as exc:
        raise CliError.wrap(
            exc,
            f"Unable to write '{destination}': {exc}",
            category="io",
            context={"path": destination},
        ) from exc
