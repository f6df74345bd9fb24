"""
YAML configuration loading.

``load_config`` accepts a path to a YAML file, an already-parsed dictionary,
an existing :class:`RunCompareConfig`, or ``None`` for defaults, and always
returns a validated :class:`RunCompareConfig`.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from runcompare import logger
from runcompare.exceptions import ConfigError

from .models import RunCompareConfig

ConfigSource = Union[str, Path, Dict[str, Any], RunCompareConfig, None]


def _format_validation_errors(error: ValidationError) -> List[str]:
    details = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item['loc']) or "<root>"
        details.append(f"Field '{field_path}': {item['msg']}")
    return details


def validate_config_dict(config: Dict[str, Any]) -> RunCompareConfig:
    """
    Validate a configuration dictionary.

    Args:
        config: Parsed configuration mapping

    Returns:
        The validated configuration model

    Raises:
        ConfigError: If the mapping is not a dictionary or fails validation
    """
    if not isinstance(config, dict):
        raise ConfigError(
            f"Configuration must be a mapping, got {type(config).__name__}",
            error_code="CONFIG_003",
        )

    try:
        model = RunCompareConfig.model_validate(config)
    except ValidationError as e:
        error_details = _format_validation_errors(e)
        detailed_error = "Configuration validation failed:\n" + "\n".join(error_details)
        logger.error(detailed_error)
        raise ConfigError(
            detailed_error,
            error_code="CONFIG_003",
            context={"validation_errors": error_details},
        ) from e

    logger.debug("Configuration validation successful")
    return model


def _read_yaml_file(config_path: Path) -> Dict[str, Any]:
    if not config_path.is_file():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            error_code="CONFIG_001",
            context={"config_path": config_path},
        )

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(
            f"Cannot read configuration file {config_path}: {e}",
            error_code="CONFIG_001",
            context={"config_path": config_path},
        ) from e
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(
            f"Error parsing YAML configuration {config_path}: {e}",
            error_code="CONFIG_002",
            context={"config_path": config_path},
        ) from e

    # An empty file means "all defaults"
    return data if data is not None else {}


def load_config(source: ConfigSource = None) -> RunCompareConfig:
    """Load and validate a configuration.

    Args:
        source: YAML file path, configuration dictionary, existing model, or
            ``None`` for the default configuration.

    Returns:
        RunCompareConfig: The validated configuration.

    Raises:
        ConfigError: If the file is missing or unreadable (CONFIG_001), is not
            valid YAML text (CONFIG_002), or fails validation (CONFIG_003).

    Example:
        >>> config = load_config({"ingest": {"delimiter": ";"}})
        >>> config.ingest.delimiter
        ';'
    """
    if source is None:
        logger.debug("No configuration supplied, using defaults")
        return RunCompareConfig()

    if isinstance(source, RunCompareConfig):
        return source

    if isinstance(source, dict):
        logger.debug("Processing dictionary-based configuration input")
        return validate_config_dict(source)

    config_path = Path(source)
    logger.info(f"Loading configuration from {config_path}")
    try:
        return validate_config_dict(_read_yaml_file(config_path))
    except ConfigError as e:
        raise e.with_context({"config_path": str(config_path)})


__all__ = ["load_config", "validate_config_dict", "ConfigSource"]
