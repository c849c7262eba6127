"""Simple YAML configuration loader for Nolo."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "nolo.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "services": {
        "transcribe_url": "http://localhost:8000/transcribe",
        "chat_url": "http://localhost:5000/chat",
        "tts_url": "http://localhost:5002/tts",
        "timeout_seconds": 30.0,
    },
    "audio": {
        "sample_rate": 16000,
        "chunk_size": 1024,
        "channels": 1,
    },
    "playback": {
        "autoplay": True,
        "chunk_size": 1024,
        "speech_rate": 0.9,
        "speech_pitch": 1.1,
        "speech_volume": 0.8,
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/nolo.log",
        "console_output": True,
    },
}


class NoloConfig:
    """Nolo configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, looks for nolo.yaml
                        in current directory and parent directories, and falls
                        back to the built-in defaults when none is found.
        """
        if config_path:
            self.config_file: Optional[Path] = Path(config_path)
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")
        else:
            self.config_file = self._find_config_file()

        if self.config_file:
            logger.info(f"Loading configuration from: {self.config_file}")
        else:
            logger.info("No configuration file found, using defaults")
        self.config = self._load_config()

    @staticmethod
    def _find_config_file() -> Optional[Path]:
        """Search the working directory and its parents for nolo.yaml."""
        current = Path.cwd()
        for directory in [current, *current.parents]:
            candidate = directory / CONFIG_FILENAME
            if candidate.is_file():
                return candidate
        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load YAML configuration file and merge it over the defaults."""
        config = copy.deepcopy(DEFAULT_CONFIG)
        if not self.config_file:
            return config

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        _deep_merge(config, loaded)
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        log_path = config.get('logging', {}).get('file_path')
        if log_path and not os.path.isabs(log_path):
            config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'services.chat_url').

        Args:
            key_path: Dot-separated key path (e.g., 'audio.sample_rate')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'playback.autoplay')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_service_url(self, name: str) -> str:
        """Get an endpoint URL ('transcribe', 'chat' or 'tts') - CRASHES if missing."""
        url = self.get(f'services.{name}_url')
        if not url:
            raise ValueError(f"Service URL 'services.{name}_url' not configured")
        return str(url)

    def get_timeout(self) -> float:
        """Get HTTP timeout in seconds."""
        return float(self.get('services.timeout_seconds', 30.0))


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override into base in place."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def get_config(config_path: Optional[str] = None) -> NoloConfig:
    """Load configuration from an explicit path or by searching for nolo.yaml."""
    return NoloConfig(config_path)
