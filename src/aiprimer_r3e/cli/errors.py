"""Errors reported by the aiprimer command line tool.

Every failure surfaces as a :class:`CliError` whose category selects the
process exit status.  Failures raised by the fitting engine or by the
document and catalog readers are translated by :meth:`CliError.wrap`.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

from aiprimer_core.errors import InvalidRange, NotFitted

from ..catalog import CatalogError
from ..ingestion import DocumentError

__all__ = ["EXIT_STATUS", "CliError", "category_for"]

logger = logging.getLogger(__name__)

EXIT_STATUS: Mapping[str, int] = MappingProxyType(
    {
        "runtime": 1,
        "usage": 2,
        "io": 3,
        "not_found": 4,
    }
)

# First match wins.
_EXCEPTION_CATEGORIES: tuple[tuple[type[BaseException], str], ...] = (
    (NotFitted, "not_found"),
    (InvalidRange, "usage"),
    (DocumentError, "io"),
    (CatalogError, "io"),
    (FileNotFoundError, "not_found"),
    (OSError, "io"),
)


def category_for(exc: BaseException) -> str:
    """Return the CLI category of a failure raised below the CLI layer."""

    for exc_type, category in _EXCEPTION_CATEGORIES:
        if isinstance(exc, exc_type):
            return category
    return "runtime"


def _serialisable(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key, value in (context or {}).items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            payload[key] = value
        else:
            payload[key] = str(value)
    return payload


class CliError(RuntimeError):
    """Failure of a CLI command, carrying its exit status and context."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "runtime",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category if category in EXIT_STATUS else "runtime"
        self.status_code = EXIT_STATUS[self.category]
        self.context = _serialisable(context)
        self.logged = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }

    def log(
        self,
        *,
        cause: Optional[BaseException] = None,
        target: Optional[logging.Logger] = None,
    ) -> "CliError":
        """Log the error once at ``ERROR`` level and return it."""

        if self.logged:
            return self
        (target or logger).error(
            self.message,
            extra={
                "event": "cli.error",
                "category": self.category,
                "status_code": self.status_code,
                "context": dict(self.context),
            },
            exc_info=cause,
        )
        self.logged = True
        return self

    @classmethod
    def wrap(
        cls,
        exc: BaseException,
        message: Optional[str] = None,
        *,
        category: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> "CliError":
        """Translate ``exc`` and log it with its traceback; the caller raises."""

        error = cls(
            message or str(exc),
            category=category or category_for(exc),
            context=context,
        )
        return error.log(cause=exc)
