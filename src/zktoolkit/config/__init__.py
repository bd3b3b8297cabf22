"""Configuration models and YAML loading."""

from zktoolkit.config.loader import ConfigError, load_config, save_config
from zktoolkit.config.schema import (
    CommitmentConfig,
    FieldConfig,
    NullifierConfig,
    OracleConfig,
    RangeConfig,
    ToolkitConfig,
)

__all__ = [
    "CommitmentConfig",
    "ConfigError",
    "FieldConfig",
    "NullifierConfig",
    "OracleConfig",
    "RangeConfig",
    "ToolkitConfig",
    "load_config",
    "save_config",
]
