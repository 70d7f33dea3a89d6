"""Configuration management for the trip budget engine."""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from trip_budget.utils.errors import ConfigurationError
from trip_budget.utils.logging import setup_logging
from trip_budget.utils.paths import resolve_config_path

logger = logging.getLogger(__name__)

DEFAULT_RATES_URL = "https://api.exchangerate-api.com/v4/latest"


class Config:
    """Application configuration."""

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML and environment."""
        load_dotenv()

        if not self.config_path.exists():
            raise ConfigurationError(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            try:
                self._config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}")

        if not self._config:
            raise ConfigurationError(f"Empty configuration file: {self.config_path}")

        self._validate()

        log_config = self._config.get('logging', {})
        setup_logging(
            level=os.getenv('LOG_LEVEL', log_config.get('level', 'INFO')),
            log_file=log_config.get('file'),
            format_type=log_config.get('format', 'json'),
            enabled=log_config.get('enabled', True)
        )

        logger.info("Configuration loaded successfully")

    def _validate(self) -> None:
        """Validate required configuration sections."""
        required_sections = ['app', 'rates']

        for section in required_sections:
            if section not in self._config:
                raise ConfigurationError(f"Missing required config section: {section}")

        base = self._config['rates'].get('base_currency', 'USD')
        if not isinstance(base, str) or len(base) != 3 or not base.isalpha():
            raise ConfigurationError(f"Invalid rates.base_currency: {base!r}")

        timeout = self._config['rates'].get('timeout', 10)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigurationError(f"rates.timeout must be a positive number, got {timeout!r}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-separated key.

        Args:
            key: Dot-separated key (e.g., "rates.base_currency")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable."""
        return os.getenv(key, default)

    @property
    def app_name(self) -> str:
        return self.get('app.name', 'Trip Budget Planner')

    @property
    def app_version(self) -> str:
        return self.get('app.version', '0.1.0')

    @property
    def debug(self) -> bool:
        return self.get('app.debug', False)

    @property
    def base_currency(self) -> str:
        return self.get('rates.base_currency', 'USD').upper()

    @property
    def rates_url(self) -> str:
        """Rate endpoint; RATES_API_URL in the environment takes precedence."""
        return self.get_env('RATES_API_URL') or self.get('rates.url', DEFAULT_RATES_URL)

    @property
    def rates_timeout(self) -> float:
        return float(self.get('rates.timeout', 10))

    @property
    def rates_max_attempts(self) -> int:
        return int(self.get('rates.max_attempts', 2))

    @property
    def storage_url(self) -> str:
        """SQLAlchemy URL of the durable store, or "memory" for an in-process store."""
        return self.get('storage.url', 'sqlite:///data/trip_budget.db')

    @property
    def default_target_currency(self) -> str:
        return self.get('budget.default_target_currency', 'SAR').upper()


_config: Optional[Config] = None


def load_config(config_path: str = "config.yaml") -> Config:
    """Load and return the CLI's configuration instance."""
    global _config
    if _config is None:
        _config = Config(str(resolve_config_path(config_path)))
    return _config
