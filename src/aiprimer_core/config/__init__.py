"""Configuration helpers for the fitting engine."""

from aiprimer_core.config.loader import get_fit_params, load_fit_overrides, resolve_settings

__all__ = ["get_fit_params", "load_fit_overrides", "resolve_settings"]
