"""
Config Loader - Load and save analysis configuration as YAML.
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from shared.config import AnalysisConfig
from shared.logging import get_logger, log_config_validation

from .exceptions import ConfigurationError

logger = get_logger(__name__)


class ConfigLoader:
    """
    Load and validate analysis configuration.

    The YAML file holds the config fields at the top level, or under an
    'analysis' section.

    Example:
        >>> loader = ConfigLoader('config.yml')
        >>> config = loader.load()
    """

    def __init__(self, config_path: Union[str, Path]):
        self.config_path = Path(config_path)
        self.raw: Dict[str, Any] = {}

    def read(self) -> Dict[str, Any]:
        """Read the raw settings dictionary."""
        if not self.config_path.exists():
            raise ConfigurationError(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {self.config_path} must contain a mapping"
            )

        self.raw = data.get("analysis", data)
        logger.info(f"Loaded config from {self.config_path}")
        return self.raw

    def load(self) -> AnalysisConfig:
        """Read, build and validate the configuration."""
        raw = self.read()
        try:
            config = AnalysisConfig.from_dict(raw)
        except TypeError as exc:
            raise ConfigurationError(str(exc)) from exc

        errors = config.validate()
        log_config_validation(logger, str(self.config_path), errors)
        if errors:
            raise ConfigurationError(f"Invalid configuration: {errors}")

        return config


def load_config(config_path: Union[str, Path]) -> AnalysisConfig:
    """
    Convenience function to load and validate config.

    Raises:
        ConfigurationError: If the file is missing or the configuration is invalid
    """
    return ConfigLoader(config_path).load()


def save_config(config: AnalysisConfig, output_path: Union[str, Path]) -> Path:
    """Save configuration to a YAML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        yaml.safe_dump({"analysis": config.to_dict()}, f, default_flow_style=False)

    logger.info(f"Saved config to {output_path}")
    return output_path
