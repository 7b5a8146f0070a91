import os
import re
from logging import Logger
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .logging import (
    ClientLogger,
    create_client_logger,
    get_logger,
    get_logging_config,
    setup_logging,
)

DEFAULT_URL = "http://127.0.0.1:8000"
DEFAULT_REQUEST_TIMEOUT = 20.0
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_MEMBER_RECOVERY_SECONDS = 30.0
CONFIG_FILE_NAME = "bamboo.yaml"

logger = get_logger(__name__)


class ClientConfig(BaseModel):
    """Registry client configuration settings."""
    url: str = Field(default=DEFAULT_URL, description="Base URL or comma-separated base URLs of the cluster")
    health_check_path: str = Field(default="", description="Path probed on down members, empty to disable")
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0, description="Per-attempt timeout in seconds")
    connect_timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, gt=0, description="Connection timeout in seconds, kept below request_timeout")
    max_failover_attempts: Optional[int] = Field(default=None, ge=1, description="Attempts per call, defaults to member count")
    member_recovery_seconds: Optional[float] = Field(
        default=DEFAULT_MEMBER_RECOVERY_SECONDS, gt=0, description="Seconds before a down member is retried, None to keep it down"
    )
    log_level: str = Field(default="DEBUG", description="Level of the client debug log")
    log_format: str = Field(default="text", description="'text' or 'json'")
    log_output: Optional[Any] = Field(default=None, exclude=True, description="Sink for the client debug log")
    logger: Optional[Logger] = Field(default=None, exclude=True, description="Injected logger, wins over log_output")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def urls(self) -> List[str]:
        """The configured member base URLs."""
        return [part.strip() for part in self.url.split(",") if part.strip()]

    def build_logger(self) -> ClientLogger:
        """Create the logging collaborator scoped to one client."""
        if self.logger is not None:
            return ClientLogger(self.logger)
        if self.log_output is not None:
            return ClientLogger(
                create_client_logger(self.log_output, self.log_level, self.log_format)
            )
        return ClientLogger()


def new_default_config() -> ClientConfig:
    """Get a configuration pointing at a registry on the loopback address."""
    return ClientConfig()


class ConfigLoader:
    """Configuration loader for YAML files with environment-specific overrides."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the configuration loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to BAMBOO_CONFIG_DIR or the working directory.
        """
        if config_dir is None:
            self.config_dir = Path(os.getenv("BAMBOO_CONFIG_DIR", "."))
        else:
            self.config_dir = Path(config_dir)

    def load_config(self, environment: Optional[str] = None) -> ClientConfig:
        """Load configuration for the specified environment.

        Args:
            environment: Environment name (development, production, etc.).
                        If None, will try to detect from ENVIRONMENT variable.

        Returns:
            Loaded and validated configuration.
        """
        if environment is None:
            environment = os.getenv("ENVIRONMENT", "development")

        config_data = self._load_base_config()

        env_config = self._load_environment_config(environment)
        if env_config:
            config_data = self._merge_configs(config_data, env_config)

        config_data = self._substitute_env_vars(config_data)

        return self._create_client_config(config_data)

    def _load_base_config(self) -> Dict[str, Any]:
        """Load the base client configuration."""
        config_path = self.config_dir / CONFIG_FILE_NAME
        if config_path.exists():
            return self._load_yaml_file(config_path)
        return {}

    def _load_environment_config(self, environment: str) -> Optional[Dict[str, Any]]:
        """Load environment-specific configuration."""
        env_config_path = self.config_dir / f"{environment}.yaml"
        if env_config_path.exists():
            return self._load_yaml_file(env_config_path)
        return None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load and parse a YAML file."""
        try:
            with open(file_path, 'r') as file:
                data = yaml.safe_load(file) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {file_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {file_path}: top level is not a mapping")
            return {}
        return data

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _substitute_env_vars(self, config: Any) -> Any:
        """Substitute environment variables in configuration values."""
        if isinstance(config, dict):
            return {key: self._substitute_env_vars(value) for key, value in config.items()}
        elif isinstance(config, list):
            return [self._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            return self._substitute_string_env_vars(config)
        else:
            return config

    def _substitute_string_env_vars(self, value: str) -> str:
        """Substitute ${VAR_NAME} and ${VAR_NAME:default} references."""
        def replace_env_var(match):
            var_spec = match.group(1)
            if ':' in var_spec:
                var_name, default_value = var_spec.split(':', 1)
                return os.getenv(var_name, default_value)
            else:
                return os.getenv(var_spec, match.group(0))

        return re.sub(r'\$\{([^}]+)\}', replace_env_var, value)

    def _create_client_config(self, config_data: Dict[str, Any]) -> ClientConfig:
        """Create a ClientConfig object from configuration data."""
        client_data = dict(config_data.get("client", {}))

        # Logging settings live in their own section
        logging_data = config_data.get("logging", {})
        if "level" in logging_data:
            client_data["log_level"] = logging_data["level"]
        if "format" in logging_data:
            client_data["log_format"] = logging_data["format"]

        # A list of members is accepted as well as a comma-separated string
        if isinstance(client_data.get("url"), list):
            client_data["url"] = ",".join(client_data["url"])

        env_url = os.getenv("BAMBOO_URL")
        if env_url:
            client_data["url"] = env_url

        return ClientConfig(**client_data)


def load_config(config_dir: Optional[Path] = None, environment: Optional[str] = None) -> ClientConfig:
    """Load the client configuration from YAML files and the environment."""
    return ConfigLoader(config_dir).load_config(environment)


__all__ = [
    "ClientConfig",
    "ClientLogger",
    "ConfigLoader",
    "DEFAULT_CONNECT_TIMEOUT",
    "DEFAULT_MEMBER_RECOVERY_SECONDS",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_URL",
    "create_client_logger",
    "get_logger",
    "get_logging_config",
    "load_config",
    "new_default_config",
    "setup_logging",
]
