"""
Config Module - Black Box Interface

Purpose: Provisioner configuration parsing, defaults and validation
Interface: parse_config(), build_request(), load_config(), get_config_schema()
Hidden: Config sources, validation logic, default resolution

Can be replaced with different config systems as long as it produces a
ProvisioningRequest.
"""

import logging
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from ...errors import ConfigValidationError, ValidationFailure
from ..api import ProvisioningRequest
from .schema import (
    CONFIG_KEYS,
    DEFAULT_ELEVATED_EXECUTE_COMMAND,
    DEFAULT_EXECUTE_COMMAND,
    DEFAULT_START_RETRY_TIMEOUT,
    ProvisionerConfig,
    parse_duration,
)
from .validation import failures_from_pydantic, validate_config

logger = logging.getLogger("psprovisioner.config")


def merge_raws(*raws: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge raw config mappings left to right; later keys win."""
    merged: Dict[str, Any] = {}
    for raw in raws:
        if raw:
            merged.update(raw)
    return merged


def parse_config(*raws: Mapping[str, Any]) -> ProvisionerConfig:
    """
    Parse and validate raw configuration.

    Raises:
        ConfigValidationError: With every problem found
    """
    try:
        config = ProvisionerConfig(**merge_raws(*raws))
    except ValidationError as e:
        raise ConfigValidationError(failures_from_pydantic(e)) from e

    failures = validate_config(config)
    if failures:
        raise ConfigValidationError(failures)

    return config


def build_request(config: ProvisionerConfig) -> ProvisioningRequest:
    """Freeze a validated config into a ProvisioningRequest."""
    scripts = [config.script] if config.script else list(config.scripts)

    return ProvisioningRequest(
        scripts=tuple(scripts),
        inline=tuple(config.inline or ()),
        remote_path=config.remote_path,
        execute_command=config.execute_command,
        elevated_execute_command=config.elevated_execute_command,
        env_var_format=config.env_var_format,
        elevated_env_var_format=config.elevated_env_var_format,
        start_retry_timeout=config.start_retry_timeout,
        environment_vars=tuple(config.environment_vars),
        valid_exit_codes=tuple(config.valid_exit_codes),
        elevated_user=config.elevated_user or None,
        elevated_password=config.elevated_password or None,
        binary=config.binary,
        build_name=config.build_name,
        builder_type=config.builder_type,
    )


def load_config(path: str) -> Dict[str, Any]:
    """
    Read a raw configuration mapping from a YAML file.

    Raises:
        ConfigValidationError: If the file is unreadable or not a mapping
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigValidationError([ValidationFailure("config", f"Cannot read config '{path}': {e}")]) from e

    if not isinstance(data, dict):
        raise ConfigValidationError(
            [ValidationFailure("config", f"Config '{path}' must be a mapping, got {type(data).__name__}")]
        )

    logger.debug(f"Loaded {len(data)} config keys from {path}")
    return data


def get_config_schema() -> Dict[str, Any]:
    """
    Get the configuration schema (contract) for this module.

    Returns:
        Mapping of key -> {'description', 'default'}

    Example:
        >>> schema = get_config_schema()
        >>> schema['valid_exit_codes']['default']
        [0]
    """
    return {key: dict(spec) for key, spec in CONFIG_KEYS.items()}


__all__ = [
    "DEFAULT_ELEVATED_EXECUTE_COMMAND",
    "DEFAULT_EXECUTE_COMMAND",
    "DEFAULT_START_RETRY_TIMEOUT",
    "ProvisionerConfig",
    "build_request",
    "get_config_schema",
    "load_config",
    "merge_raws",
    "parse_config",
    "parse_duration",
    "validate_config",
]
