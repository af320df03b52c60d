# file: furet/config.py

"""
Configuration loading.

Defaults live in default_config.yaml next to this module. A user file
passed with --config is merged over them key by key.
"""

import copy
import os
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigurationError


DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "default_config.yaml")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path!r}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path!r}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path!r} must contain a mapping")
    return data


def _require_int(config: Dict[str, Any], section: str, key: str, minimum: int) -> None:
    values = config.get(section, {})
    if not isinstance(values, dict):
        raise ConfigurationError(f"{section} must be a mapping, got {values!r}")

    value = values.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigurationError(
            f"{section}.{key} must be an integer >= {minimum}, got {value!r}"
        )


def validate_config(config: Dict[str, Any]) -> None:
    """
    Check the values the pipeline relies on.

    Raises:
        ConfigurationError: If a required value is missing or out of range
    """
    _require_int(config, 'token', 'ttl_seconds', 0)
    _require_int(config, 'token', 'max_clock_skew_seconds', 0)
    _require_int(config, 'pipeline', 'max_record_size', 1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration.

    Args:
        path: Optional user YAML file merged over the defaults

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If a file cannot be read or values are invalid
    """
    config = _read_yaml(DEFAULT_CONFIG_PATH)
    if path is not None:
        config = _merge(config, _read_yaml(path))

    validate_config(config)
    return config
