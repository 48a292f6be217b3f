"""Typed settings for spanner-pitr.

Settings are assembled from three layers, later layers winning:
1. an optional JSON config file (``~/.spanner-pitr/config.json``),
2. environment variables,
3. explicit overrides, normally the CLI's global options.

Pydantic validates the merged result so commands can rely on it.
"""

from __future__ import annotations

import copy
import json
import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from spanner_pitr.database.config import SpannerClientConfig
from spanner_pitr.errors import InvalidConfigError, MissingConfigError


DEFAULT_CONFIG_PATH = Path.home() / ".spanner-pitr" / "config.json"

CONNECTION_FIELDS = ("project", "instance", "database")


class ConnectionSettings(BaseModel):
    """Identity of the Spanner database being recovered."""

    project: str = Field(..., min_length=1, description="Google Cloud project ID")
    instance: str = Field(..., min_length=1, description="Spanner instance ID")
    database: str = Field(..., min_length=1, description="Spanner database ID")
    credentials_file: Optional[Path] = Field(
        default=None,
        description="Service account key file; application default credentials when unset",
    )

    @field_validator("credentials_file")
    def _validate_credentials_file(cls, value: Optional[Path]) -> Optional[Path]:
        if value is not None and not value.expanduser().is_file():
            raise ValueError(f"credentials file {value} does not exist")
        return value.expanduser() if value is not None else None


class SearchSettings(BaseModel):
    """Defaults for the timeline search command."""

    accuracy: timedelta = Field(
        default=timedelta(milliseconds=500),
        description="Target accuracy of the returned timestamp",
    )
    window: timedelta = Field(
        default=timedelta(hours=1),
        description="Search window ending now, used when --start is omitted",
    )

    @field_validator("accuracy", "window")
    def _validate_positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("must be a positive duration")
        return value


class ExportSettings(BaseModel):
    """Defaults for the export command."""

    temp_prefix: str = Field(default="spanner-pitr-query", description="Default output file prefix")
    temp_suffix: str = Field(default=".csv.gz", description="Default output file suffix")


class Settings(BaseModel):
    """Root configuration state."""

    connection: Optional[ConnectionSettings] = None
    search: SearchSettings = Field(default_factory=SearchSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    client: SpannerClientConfig = Field(default_factory=SpannerClientConfig)

    def require_connection(self) -> ConnectionSettings:
        """Return the connection settings or raise if they were never provided."""
        if self.connection is None:
            raise MissingConfigError(
                "Spanner connection is not configured: pass --project, --instance "
                "and --database or set them in the config file.",
                details={"missing": ", ".join(CONNECTION_FIELDS)},
            )
        return self.connection


def load_settings(path: Path = DEFAULT_CONFIG_PATH) -> Settings:
    """Load settings from disk or raise if invalid."""

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at {path}")
    return _validate(_read_config(path))


def bootstrap_settings(
    *,
    path: Path = DEFAULT_CONFIG_PATH,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Resolve settings from the config file, environment and overrides."""

    data: Dict[str, Any] = {}
    if path.exists():
        data = _read_config(path)

    try:
        data = _apply_env_overrides(data)
    except ValueError as exc:
        raise InvalidConfigError(f"Invalid environment configuration: {exc}") from exc
    data = _apply_overrides(data, overrides or {})
    _check_connection(data)
    return _validate(data)


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidConfigError(f"Config file {path} must hold a JSON object")
    return payload


def _validate(payload: Dict[str, Any]) -> Settings:
    try:
        return Settings.model_validate(payload)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc}") from exc


def _apply_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _apply_overrides(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    connection = data["connection"] = dict(data.get("connection") or {})
    _set_env_override(connection, "project", "SPANNER_PITR_PROJECT")
    _set_env_override(connection, "instance", "SPANNER_PITR_INSTANCE")
    _set_env_override(connection, "database", "SPANNER_PITR_DATABASE")
    _set_env_override(connection, "credentials_file", "GOOGLE_APPLICATION_CREDENTIALS")

    search = data["search"] = dict(data.get("search") or {})
    _set_env_override(search, "accuracy", "SPANNER_PITR_ACCURACY")
    _set_env_override(search, "window", "SPANNER_PITR_WINDOW")

    client = SpannerClientConfig.model_validate(data.get("client") or {})
    data["client"] = SpannerClientConfig.with_env_overrides(client).model_dump()
    return data


def _set_env_override(mapping: Dict[str, Any], key: str, env_name: str) -> None:
    raw = os.getenv(env_name)
    if raw:
        mapping[key] = raw


def _check_connection(data: Dict[str, Any]) -> None:
    connection = data.get("connection") or {}
    present = [name for name in CONNECTION_FIELDS if connection.get(name)]
    if not present:
        data["connection"] = None
        return
    missing = [name for name in CONNECTION_FIELDS if not connection.get(name)]
    if missing:
        raise MissingConfigError(
            f"Incomplete Spanner connection settings, missing: {', '.join(missing)}",
            details={"missing": ", ".join(missing)},
        )
