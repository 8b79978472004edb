"""YAML config parser."""
import logging
from pathlib import Path
from typing import Optional

import yaml

from .schema import DeployConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "aks.yaml"


class ConfigParser:
    """Parser for YAML deployment settings."""

    @staticmethod
    def load(file_path: Optional[str] = None) -> DeployConfig:
        """Load and validate a YAML config file.

        With no path, ``aks.yaml`` is read if it exists and the built-in
        defaults are used otherwise. An explicit path must exist.

        Args:
            file_path: Path to the YAML config file.

        Returns:
            DeployConfig: Validated config object.

        Raises:
            FileNotFoundError: If an explicit config file doesn't exist.
            ValidationError: If the config is invalid.
            yaml.YAMLError: If the YAML is malformed.
        """
        if file_path is None:
            if not Path(DEFAULT_CONFIG_PATH).exists():
                logger.debug("No %s found, using defaults", DEFAULT_CONFIG_PATH)
                return DeployConfig()
            file_path = DEFAULT_CONFIG_PATH

        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
        logger.debug("Loaded config from %s", file_path)
        return DeployConfig.model_validate(data or {})
