"""RaceRoom integration for the aiprimer fitting engine.

This package reads and writes the simulator's ``aiadaptation.xml`` document,
resolves class and track names from the ``r3e-data.json`` dump and exposes
the ``aiprimer`` command line tool.
"""

from ._version import __version__
from .catalog import (
    Catalog,
    CatalogError,
    CatalogValidation,
    load_catalog,
    parse_catalog,
    validate_catalog,
)
from .exporters import DOCUMENT_FILENAME, encode, format_number, write_document
from .ingestion import AdaptationDocument, DocumentError, decode, read_document
from .timing import make_time, output_time, parse_time

__all__ = [
    "AdaptationDocument",
    "Catalog",
    "CatalogError",
    "CatalogValidation",
    "DOCUMENT_FILENAME",
    "DocumentError",
    "__version__",
    "decode",
    "encode",
    "format_number",
    "load_catalog",
    "make_time",
    "output_time",
    "parse_catalog",
    "parse_time",
    "read_document",
    "validate_catalog",
    "write_document",
]
