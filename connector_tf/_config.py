"""Settings loader shared by the generator, validator and CLI."""

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ._logging import get_logger

LOGGER = get_logger("config")

SENSITIVE_PLACEHOLDER = "<REPLACE_WITH_ACTUAL_VALUE>"


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    placeholder: str = Field(default=SENSITIVE_PLACEHOLDER, min_length=1)
    resource_type: str = Field(default="confluent_connector", min_length=1)
    status_variable: str = Field(default="var.status", min_length=1)
    environment_variable: str = Field(default="var.environment_id", min_length=1)
    kafka_cluster_variable: str = Field(default="var.kafka_cluster_id", min_length=1)
    format_table: str = Field(default="local.schema_formats", min_length=1)
    catalog_path: str | None = None


DEFAULT_SETTINGS = Settings()


def _read_prefixed_env(prefix: str) -> dict[str, Any]:
    """Read environment keys matching <PREFIX>_* and normalize key names."""
    prefix_token = f"{prefix.upper()}_"
    values: dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix_token):
            normalized_key = key.removeprefix(prefix_token).lower()
            values[normalized_key] = value

    LOGGER.debug("Loaded %s settings keys from environment prefix %s", len(values), prefix_token)
    return values


def _read_json_file(file_path: str | None) -> dict[str, Any]:
    """Read a JSON settings file when provided, otherwise return an empty mapping."""
    if not file_path:
        return {}

    path = Path(file_path)
    if not path.exists():
        LOGGER.error("Settings file not found: %s", file_path)
        raise FileNotFoundError(f"Settings file not found: {file_path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw_data, dict):
        raise ValueError("Settings file must contain a JSON object at the root")
    LOGGER.debug("Loaded JSON settings from %s", file_path)
    return raw_data


def _not_none_values(values: dict[str, Any] | None) -> dict[str, Any]:
    """Drop keys with None values to avoid overriding previous layers."""
    if not values:
        return {}
    return {key: value for key, value in values.items() if value is not None}


def _merge_layers(layers: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge dictionaries in order where the last layer wins."""
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer)
    return merged


def load_settings(
    *,
    file_path: str | None = None,
    env_prefix: str | None = "CONNECTOR_TF",
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Resolve settings from defaults, file, environment and explicit overrides."""
    env_values = _read_prefixed_env(env_prefix) if env_prefix else {}
    # LOG_LEVEL is consumed by the logging module, not by Settings.
    env_values.pop("log_level", None)

    merged = _merge_layers(
        [
            _read_json_file(file_path),
            env_values,
            _not_none_values(overrides),
        ]
    )
    settings = Settings.model_validate(merged)
    LOGGER.debug("Settings resolved: %s", settings.model_dump())
    return settings
