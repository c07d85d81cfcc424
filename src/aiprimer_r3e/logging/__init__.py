"""Logging utilities for aiprimer."""

from aiprimer_r3e.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
