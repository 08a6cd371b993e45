"""Configuration loading service"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..api.exceptions import ConfigError
from ..constants import ENV_CONFIG_PATH, PROJECT_CONFIG_FILE
from ..models.application import ApplicationConfig
from ..models.config import PackagerConfig

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for loading packager settings and application files"""

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None):
        """Initialize config service

        Args:
            config_path: Settings file, defaults to ./.app-packager.yaml
            environ: Environment mapping (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        if config_path is None:
            env_path = self.environ.get(ENV_CONFIG_PATH)
            config_path = Path(env_path) if env_path else Path.cwd() / PROJECT_CONFIG_FILE
        self.config_path = Path(config_path)
        self._config: Optional[PackagerConfig] = None

    @property
    def config(self) -> PackagerConfig:
        """Get current configuration (lazy load)"""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> PackagerConfig:
        """Load settings from file, then apply environment overrides

        A missing settings file yields the defaults.

        Returns:
            Loaded configuration
        """
        data: Dict[str, Any] = {}
        if self.config_path.exists():
            data = self._read_yaml(self.config_path)
            logger.debug(f"Loaded settings from {self.config_path}")

        try:
            config = PackagerConfig.from_dict(data)
            config.apply_env(self.environ)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}: {e}") from e

        config.log_level = str(config.log_level).upper()
        if not isinstance(logging.getLevelName(config.log_level), int):
            raise ConfigError(f"Invalid log level: {config.log_level}")

        self._config = config
        return config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        # Simple environment variable expansion
        content = os.path.expandvars(content)

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")
        return data


def load_application(path: Path) -> ApplicationConfig:
    """
    Load an application description from a JSON or YAML file

    Args:
        path: Application file

    Returns:
        Application model

    Raises:
        ConfigError: If the file cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Application file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()

    try:
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse application file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Application file root must be a mapping: {path}")

    try:
        return ApplicationConfig.from_dict(data)
    except KeyError as e:
        raise ConfigError(f"Application file {path} is missing field {e}") from e
