"""Configuration management for the SDK client."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_API_HOST, DEFAULT_TIMEOUT_SECONDS
from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.pcloud' / 'config.json'


class Config:
    """Manages client configuration stored in a JSON file."""

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.pcloud/config.json)
        """
        self.config_path = Path(config_path)
        self.data = self._load()

    @staticmethod
    def _defaults() -> dict:
        return {
            "api_host": os.environ.get("PCLOUD_API_HOST", DEFAULT_API_HOST),
            "timeout": int(os.environ.get("PCLOUD_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
        }

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        config = self._defaults()

        if not self.config_path.exists():
            try:
                self.config_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except OSError as e:
                logger.warning(f"Could not write default config to {self.config_path}: {e}")
            return config

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
            config.update(data)
            return config
        except (json.JSONDecodeError, OSError) as e:
            backup_path = self.config_path.with_suffix('.json.bak')
            logger.warning(f"Unreadable config {self.config_path} ({e}), backing up to {backup_path}")
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.warning(f"Could not back up config: {copy_error}")
            return self._defaults()

    def get_base_url(self) -> str:
        """
        Get API base URL.

        Returns:
            Base URL string (e.g., "https://api.pcloud.com")
        """
        return f"https://{self.data.get('api_host', DEFAULT_API_HOST)}"

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.
        """
        return self.data.get('timeout', DEFAULT_TIMEOUT_SECONDS)

    def get_auth_token(self) -> Optional[str]:
        """
        Get the auth token, from the config file or the PCLOUD_AUTH env var.

        Returns:
            Token string or None if not set
        """
        return self.data.get('auth_token') or os.environ.get('PCLOUD_AUTH')
