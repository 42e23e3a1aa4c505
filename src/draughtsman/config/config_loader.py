"""Configuration loading with environment variable substitution."""

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from src.draughtsman.config.config_data import ConfigData
from src.draughtsman.config.config_utils import deep_merge, substitute_env_vars
from src.draughtsman.errors import ConfigurationError


def load_config(
    file_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ConfigData:
    """
    Load the agent configuration.

    Args:
        file_path: Optional YAML file with a top-level 'config:' key. Values
            may reference environment variables with ${VAR}, ${VAR:-default}
            or ${VAR:?message}.
        overrides: Nested settings applied on top of the file, typically
            built from command line flags. Keys whose value is None are
            ignored.

    Returns:
        Validated, immutable ConfigData

    Raises:
        ConfigurationError: If the file is missing or malformed, a required
            environment variable is missing, or validation fails
    """
    loaded: dict[str, Any] = {}

    if file_path is not None:
        logger.info(f"Loading configuration from {file_path}")
        try:
            content = file_path.read_text()
        except OSError as e:
            raise ConfigurationError(f"Unable to read configuration file {file_path}: {e}") from e

        try:
            content = substitute_env_vars(content)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        try:
            document = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing YAML: {e}") from e

        if not isinstance(document, dict) or "config" not in document:
            raise ConfigurationError("Invalid YAML structure: missing 'config' key")
        loaded = document["config"] or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError("Invalid configuration: 'config' must be a mapping")

    cleaned = _drop_unset(overrides or {})
    if cleaned:
        logger.debug(f"Applying configuration overrides: {sorted(cleaned)}")
        loaded = deep_merge(loaded, cleaned)

    try:
        return ConfigData.model_validate(loaded)
    except ValidationError as e:
        raise ConfigurationError("Invalid configuration", details=str(e)) from e


def _drop_unset(overrides: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in overrides.items():
        if isinstance(value, dict):
            nested = _drop_unset(value)
            if nested:
                cleaned[key] = nested
        elif value is not None:
            cleaned[key] = value
    return cleaned
