"""Readers for simulator documents."""

from aiprimer_r3e.ingestion.aiadaptation import (
    AdaptationDocument,
    DocumentError,
    decode,
    read_document,
)

__all__ = ["AdaptationDocument", "DocumentError", "decode", "read_document"]
