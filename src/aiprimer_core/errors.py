"""Exception taxonomy shared by the fitting engine."""

from __future__ import annotations

__all__ = [
    "AIPrimerError",
    "InsufficientData",
    "InvalidRange",
    "NotFitted",
]


class AIPrimerError(Exception):
    """Base class for errors raised by :mod:`aiprimer_core`."""


class InsufficientData(AIPrimerError, ValueError):
    """Raised when a least-squares system has too few usable points."""


class NotFitted(AIPrimerError, LookupError):
    """An operation needs an accepted predictor that does not exist.

    Reconciler operations return this error inside their result instead of
    raising it, callers decide whether the condition is fatal.
    """

    def __init__(self, class_id: str, track_id: str) -> None:
        super().__init__(
            f"No accepted prediction for class {class_id!r} on track {track_id!r}."
        )
        self.class_id = class_id
        self.track_id = track_id


class InvalidRange(AIPrimerError, ValueError):
    """Raised for malformed skill-level ranges or spacing arguments."""
