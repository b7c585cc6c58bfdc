"""
Runner configuration

Settings come from four layers, later layers winning:

1. built-in defaults
2. an optional YAML file (e.g. e2e.yaml)
3. environment variables (DSC_E2E_*, SAUCE_*)
4. command line options passed to load()

Example e2e.yaml:

    mode: grid
    env: staging
    output_dir: output
    concurrency: 2
    grid:
      username: my-user
      access_key: xxxxxxxx
      hub_url: https://ondemand.us-west-1.saucelabs.com/wd/hub
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigurationError, ErrorCodes

LOG = logging.getLogger(__name__)

MODES = ("grid", "headless", "windowed")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_HUB_URL = "https://ondemand.saucelabs.com/wd/hub"
DEFAULT_API_URL = "https://api.us-west-1.saucelabs.com/rest/v1"


@dataclass
class GridConfig:
    """Credentials and endpoints of the remote browser grid"""
    username: str
    access_key: str
    hub_url: str = DEFAULT_HUB_URL
    api_url: str = DEFAULT_API_URL


@dataclass
class RunnerConfig:
    """Validated runner configuration"""
    mode: str = "windowed"
    env: str = "local"
    output_dir: str = "output"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    concurrency: int = 1
    grid: Optional[GridConfig] = None


@dataclass
class ValidationResult:
    """Result of configuration validation"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


class ConfigManager:
    """Loads a RunnerConfig from YAML and the environment"""

    ENV_PREFIX = "DSC_E2E_"

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """
        Args:
            config_path: YAML file to read; it must exist when given
            environ: Environment mapping, defaults to os.environ
        """
        self.config_path = Path(config_path) if config_path else None
        self.environ = os.environ if environ is None else environ

    def _load_file(self) -> Dict[str, Any]:
        if self.config_path is None:
            return {}

        if not self.config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self.config_path}",
                config_file=str(self.config_path),
                code=ErrorCodes.CONFIG_FILE_NOT_FOUND
            )

        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file {self.config_path}: {e}",
                config_file=str(self.config_path)
            )

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {self.config_path} must contain a mapping",
                config_file=str(self.config_path)
            )
        return data

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration"""
        result = dict(config)

        for key in ("mode", "env", "output_dir", "log_level", "log_file", "concurrency"):
            env_value = self.environ.get(f"{self.ENV_PREFIX}{key.upper()}")
            if env_value is not None:
                result[key] = env_value

        grid_env = {
            "username": "SAUCE_USERNAME",
            "access_key": "SAUCE_ACCESS_KEY",
            "hub_url": "SAUCE_HUB_URL",
            "api_url": "SAUCE_API_URL",
        }
        grid = result.get("grid") or {}
        if isinstance(grid, dict):
            grid = dict(grid)
            for key, env_key in grid_env.items():
                env_value = self.environ.get(env_key)
                if env_value:
                    grid[key] = env_value

        result["grid"] = grid
        return result

    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """Check the merged configuration for values the runner cannot use"""
        errors = []

        mode = config.get("mode", "windowed")
        if mode not in MODES:
            errors.append(f"'mode' must be one of {', '.join(MODES)}, got {mode!r}")

        concurrency = config.get("concurrency", 1)
        try:
            if int(concurrency) < 1:
                errors.append("'concurrency' must be at least 1")
        except (TypeError, ValueError):
            errors.append(f"'concurrency' must be an integer, got {concurrency!r}")

        log_level = config.get("log_level", "INFO")
        if str(log_level).upper() not in LOG_LEVELS:
            errors.append(f"'log_level' must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

        grid = config.get("grid") or {}
        if not isinstance(grid, dict):
            errors.append("'grid' must be a mapping")
        elif mode == "grid" and not (grid.get("username") and grid.get("access_key")):
            errors.append("grid mode requires grid.username and grid.access_key (or SAUCE_USERNAME/SAUCE_ACCESS_KEY)")

        return ValidationResult(is_valid=not errors, errors=errors)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> RunnerConfig:
        """
        Load, merge and validate the configuration.

        Args:
            overrides: Values taking precedence over file and environment
                (command line options); None values are ignored

        Returns:
            RunnerConfig

        Raises:
            ConfigurationError: If the file is missing or invalid, or a value is unusable
        """
        config = self._apply_env_overrides(self._load_file())
        for key, value in (overrides or {}).items():
            if value is not None:
                config[key] = value

        validation = self.validate(config)
        if not validation.is_valid:
            error_msg = "Configuration validation failed:\n"
            error_msg += "\n".join(f"  - {error}" for error in validation.errors)
            raise ConfigurationError(
                error_msg,
                config_file=str(self.config_path) if self.config_path else None
            )

        grid = config["grid"]
        grid_config = None
        if grid.get("username") and grid.get("access_key"):
            grid_config = GridConfig(
                username=grid["username"],
                access_key=grid["access_key"],
                hub_url=grid.get("hub_url") or DEFAULT_HUB_URL,
                api_url=grid.get("api_url") or DEFAULT_API_URL,
            )

        defaults = RunnerConfig()
        runner_config = RunnerConfig(
            mode=config.get("mode", defaults.mode),
            env=str(config.get("env", defaults.env)),
            output_dir=str(config.get("output_dir", defaults.output_dir)),
            log_level=str(config.get("log_level", defaults.log_level)).upper(),
            log_file=config.get("log_file", defaults.log_file),
            concurrency=int(config.get("concurrency", defaults.concurrency)),
            grid=grid_config,
        )
        LOG.debug(f"Loaded runner configuration: mode={runner_config.mode}, env={runner_config.env}")
        return runner_config
