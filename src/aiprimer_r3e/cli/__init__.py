"""Command line utilities for aiprimer."""

from aiprimer_r3e.cli.app import main, run_cli
from aiprimer_r3e.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
