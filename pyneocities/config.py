"""Configuration management for pyneocities.

API keys are stored per username in a JSON file in the user's config
directory. The ``NEOCITIES_API_KEY`` environment variable takes
precedence over anything stored on disk.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from .exceptions import NeocitiesConfigError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://neocities.org/api"
CONFIG_FILE_NAME = "config.json"


def _default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class Config:
    """Reads and writes the pyneocities configuration file."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the config file. Defaults to
                ``$PYNEOCITIES_CONFIG_DIR`` or ``~/.config/pyneocities``.
        """
        if config_dir is None:
            env_dir = os.environ.get("PYNEOCITIES_CONFIG_DIR")
            if env_dir:
                config_dir = Path(env_dir)
            else:
                config_dir = Path.home() / ".config" / "pyneocities"
        self.config_dir = config_dir

    def get_config_path(self) -> Path:
        """Return the path of the config file."""
        return self.config_dir / CONFIG_FILE_NAME

    def _load(self) -> dict[str, Any]:
        path = self.get_config_path()
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise NeocitiesConfigError(f"Invalid config file {path}: {e}") from e
        except OSError as e:
            raise NeocitiesConfigError(f"Cannot read config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise NeocitiesConfigError(f"Invalid config file {path}")
        return data

    def _save(self, data: dict[str, Any]) -> None:
        path = self.get_config_path()
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            # API keys are secrets
            path.chmod(0o600)
        except OSError as e:
            raise NeocitiesConfigError(f"Cannot write config file {path}: {e}") from e
        logger.debug(f"Saved configuration to {path}")

    @property
    def api_url(self) -> str:
        """Base URL of the Neocities API."""
        return os.environ.get("NEOCITIES_API_URL") or DEFAULT_API_URL

    @property
    def api_key(self) -> Optional[str]:
        """API key from the environment or for the default user."""
        env_key = os.environ.get("NEOCITIES_API_KEY")
        if env_key:
            return env_key
        username = self.get_default_username()
        if username is None:
            return None
        return self.get_api_key(username)

    @property
    def workers(self) -> int:
        """Number of threads used to read and hash local files."""
        value = self._load().get("workers")
        if isinstance(value, int) and value > 0:
            return value
        return _default_workers()

    def is_configured(self) -> bool:
        """Check whether an API key is available."""
        return self.api_key is not None

    def get_api_key(self, username: str) -> Optional[str]:
        """Return the stored API key for ``username``."""
        return self._load().get("api_keys", {}).get(username)

    def save_api_key(self, username: str, api_key: str) -> None:
        """Store an API key for ``username``."""
        data = self._load()
        data.setdefault("api_keys", {})[username] = api_key
        self._save(data)

    def remove_api_key(self, username: str) -> bool:
        """Forget the API key of ``username``.

        Returns:
            True if a key was removed, False if none was stored
        """
        data = self._load()
        keys = data.get("api_keys", {})
        if username not in keys:
            return False
        del keys[username]
        self._save(data)
        return True

    def get_default_username(self) -> Optional[str]:
        """Return the username used when none is given."""
        return self._load().get("default_username")

    def set_default_username(self, username: str) -> None:
        data = self._load()
        data["default_username"] = username
        self._save(data)

    def remove_default_username(self) -> None:
        data = self._load()
        if data.pop("default_username", None) is not None:
            self._save(data)


config = Config()
