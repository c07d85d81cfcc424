"""Writers for simulator documents."""

from aiprimer_r3e.exporters.aiadaptation import (
    DOCUMENT_FILENAME,
    encode,
    format_number,
    write_document,
)

__all__ = ["DOCUMENT_FILENAME", "encode", "format_number", "write_document"]
