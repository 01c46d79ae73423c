"""
Configuration management for IPGOT
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from ipgot.core.exceptions import ConfigurationError

TRUE_VALUES = ("1", "true", "yes")

class Config:
    """Configuration management for IPGOT"""

    def __init__(self, config_file: Optional[Path] = None, debug: bool = False):
        """
        Initialize configuration with optional config file

        Args:
            config_file: Path to configuration file (YAML)
            debug: Enable debug mode
        """
        self.debug = debug

        # Default settings
        self._initialize_defaults()

        # Load configuration file if provided
        if config_file:
            self._load_config_file(config_file)

        # Load environment variables
        self._load_environment()

        # Create necessary directories
        self._ensure_directories()

        # Validate configuration
        self._validate_configuration()

    def _initialize_defaults(self):
        """Initialize default configuration values"""
        # Output settings
        self.monochrome = False
        self.json_output = False
        self.json_pretty = False

        # Upstream providers
        self.ipinfo_token = None
        self.primary_api_url = "https://ipinfo.io"
        self.fallback_api_url = "http://ip-api.com/json"
        self.fallback_api_fields = "66846719"
        self.request_timeout = 10
        self.user_agent = "IPGOT/1.0.0"

        # Presentation
        self.display_timezone = "Asia/Shanghai"
        self.baidu_map_ak = "YOUR_BAIDU_MAP_AK"

        # Server settings
        self.server_bind_addr = "127.0.0.1"
        self.server_bind_port = 8787

        # Paths and directories
        self.config_dir = Path.home() / ".ipgot"
        self.log_file = self.config_dir / "ipgot_debug.log"

    def _load_config_file(self, config_file: Path):
        """
        Load configuration from YAML file

        Args:
            config_file: Path to configuration file

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error loading configuration file: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration file must contain a YAML dictionary")

        # Update configuration with file values
        self._update_from_dict(config_data)

    def _load_environment(self):
        """Load configuration from environment variables"""
        # API tokens and keys
        self.ipinfo_token = os.environ.get("IPGOT_IPINFO_TOKEN", self.ipinfo_token)
        self.baidu_map_ak = os.environ.get("IPGOT_BAIDU_MAP_AK", self.baidu_map_ak)
        self.display_timezone = os.environ.get("IPGOT_TIMEZONE", self.display_timezone)
        self.server_bind_addr = os.environ.get("IPGOT_BIND", self.server_bind_addr)

        # Numeric settings
        if os.environ.get("IPGOT_PORT"):
            self.server_bind_port = self._parse_int("IPGOT_PORT", os.environ["IPGOT_PORT"])
        if os.environ.get("IPGOT_TIMEOUT"):
            self.request_timeout = self._parse_int("IPGOT_TIMEOUT", os.environ["IPGOT_TIMEOUT"])

        # Boolean settings
        if os.environ.get("IPGOT_DEBUG", "").lower() in TRUE_VALUES:
            self.debug = True
        if os.environ.get("IPGOT_MONOCHROME", "").lower() in TRUE_VALUES:
            self.monochrome = True
        if os.environ.get("IPGOT_JSON", "").lower() in TRUE_VALUES:
            self.json_output = True

    @staticmethod
    def _parse_int(name: str, value: str) -> int:
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer: {value}")

    def _ensure_directories(self):
        """Ensure required directories exist"""
        try:
            Path(self.config_dir).mkdir(exist_ok=True, parents=True)
        except OSError as e:
            logging.warning(f"Could not create directory: {e}")

    def _validate_configuration(self):
        """
        Validate configuration values

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not isinstance(self.request_timeout, (int, float)) or self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be a positive number")

        if not isinstance(self.server_bind_port, int) or not 0 <= self.server_bind_port <= 65535:
            raise ConfigurationError("server_bind_port must be between 0 and 65535")

        if not self.primary_api_url or not self.fallback_api_url:
            raise ConfigurationError("primary_api_url and fallback_api_url are required")

        # The display timezone must be resolvable
        try:
            ZoneInfo(self.display_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown display_timezone {self.display_timezone!r}: {e}")

    def _update_from_dict(self, config_data: Dict[str, Any]):
        """
        Update configuration from dictionary

        Args:
            config_data: Dictionary containing configuration values
        """
        for key, value in config_data.items():
            if hasattr(self, key) and not key.startswith('_'):
                if key in ("config_dir", "log_file"):
                    value = Path(value)
                setattr(self, key, value)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary

        Returns:
            Dictionary representation of configuration
        """
        result = {}
        for key, value in self.__dict__.items():
            if not key.startswith('_'):
                result[key] = str(value) if isinstance(value, Path) else value
        return result

    def save(self, config_file: Optional[Path] = None):
        """
        Save configuration to file

        Args:
            config_file: Path to save configuration to (default: ~/.ipgot/config.yaml)

        Raises:
            ConfigurationError: If the file cannot be written
        """
        if config_file is None:
            config_file = Path(self.config_dir) / "config.yaml"

        try:
            config_file.parent.mkdir(exist_ok=True, parents=True)
            with open(config_file, 'w', encoding='utf-8') as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error saving configuration: {e}")
