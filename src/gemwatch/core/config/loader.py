"""
Reads configs/app.yaml into an AppConfig.

String values may reference the environment as ${VAR} or ${VAR:-default};
references are expanded before validation.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import AppConfig

DEFAULT_CONFIG_PATH = Path("configs/app.yaml")

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """The configuration file is unreadable or fails validation."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        super().__init__(message)
        self.path = path
        self.details = details


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Parse path as YAML; an empty document yields {}.

    Raises:
        ConfigError: If the file is unreadable, not YAML, or not a mapping
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", path=path, details=str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", path=path, details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping", path=path)
    return data


def _expand_env_vars(data: Any) -> Any:
    """Expand environment references in every string of a parsed document."""
    if isinstance(data, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), data)
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    return data


def load_app_config(
    path: Path | str | None = None,
    expand_env: bool = True,
) -> AppConfig:
    """Load and validate the application configuration.

    A missing file is not an error: every setting then takes its default.

    Args:
        path: YAML file (default: configs/app.yaml)
        expand_env: Expand ${VAR} references before validating

    Raises:
        ConfigError: If the file exists but cannot be used
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not path.is_file():
        return AppConfig()

    data = _load_yaml_file(path)
    if expand_env:
        data = _expand_env_vars(data)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid app configuration in {path}", path=path, details=str(e)) from e
