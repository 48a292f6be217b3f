"""Configuration loading utilities for spanner-pitr."""

from .settings import (
    DEFAULT_CONFIG_PATH,
    ConnectionSettings,
    ExportSettings,
    SearchSettings,
    Settings,
    bootstrap_settings,
    load_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConnectionSettings",
    "ExportSettings",
    "SearchSettings",
    "Settings",
    "bootstrap_settings",
    "load_settings",
]
