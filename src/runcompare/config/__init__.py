"""Configuration models and loaders for RunCompare."""

from runcompare.config.models import ChartConfig, ColumnMapping, IngestConfig, RunCompareConfig
from runcompare.config.versioning import CURRENT_SCHEMA_VERSION
from runcompare.config.yaml_config import load_config, validate_config_dict

__all__ = [
    "ChartConfig",
    "ColumnMapping",
    "IngestConfig",
    "RunCompareConfig",
    "CURRENT_SCHEMA_VERSION",
    "load_config",
    "validate_config_dict",
]
