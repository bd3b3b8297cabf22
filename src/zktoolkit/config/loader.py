"""Reading and writing zktoolkit.yaml.

The file mirrors :class:`ToolkitConfig` section by section; any section or
key left out keeps its default. A typical file pins the oracle and the
range ceiling:

    oracle:
      backend: blake2b
      domain: my-app
    range:
      upper_bound: 1099511627776
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from zktoolkit.config.schema import ToolkitConfig
from zktoolkit.exceptions import ZKToolkitError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".zktoolkit" / "zktoolkit.yaml"


class ConfigError(ZKToolkitError):
    """Configuration loading or validation error."""


def _resolve(path: Path | str | None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def load_config(path: Path | str | None = None) -> ToolkitConfig:
    """Load and validate toolkit configuration from a YAML file.

    Args:
        path: Path to config file. If None, tries the default location.
              A missing or empty file yields the default config.

    Returns:
        Validated configuration object

    Raises:
        ConfigError: If the file is not valid YAML, is not a mapping of
            sections, or fails validation (for example an unknown oracle
            backend or a truncation width not below the element width).
    """
    path = _resolve(path)

    if not path.exists():
        logger.debug("No config at %s; using defaults", path)
        return ToolkitConfig()

    try:
        config_data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config from {path}: {e}") from e

    if config_data is None:
        return ToolkitConfig()
    if not isinstance(config_data, dict):
        raise ConfigError(
            f"Config in {path} must be a mapping of sections, got {type(config_data).__name__}"
        )

    try:
        config = ToolkitConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e

    logger.info("Loaded config from %s (oracle backend %s)", path, config.oracle.backend)
    return config


def save_config(config: ToolkitConfig, path: Path | str | None = None) -> None:
    """Save configuration to a YAML file, creating parent directories.

    The field modulus is a large integer; YAML keeps it exact, so a saved
    file loads back to an equal config.
    """
    path = _resolve(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
