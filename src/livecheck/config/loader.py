"""Configuration file discovery and loading."""

from pathlib import Path

import structlog
from ruamel.yaml import YAML

from .models import Config

logger = structlog.get_logger()


class ConfigNotFoundError(Exception):
    """Raised when no configuration file is found in any search path."""


class ConfigLoader:
    """Finds and parses the livecheck YAML config.

    Attributes:
        SEARCH_PATHS: Ordered list of config file locations to try.
    """

    SEARCH_PATHS = [
        "./livecheck.yaml",
        "~/.config/livecheck/config.yaml",
        "/etc/livecheck/config.yaml",
    ]

    def __init__(self, explicit_path: str | None = None) -> None:
        """Initialize config loader.

        Args:
            explicit_path: If provided, only load from this path (skip search).
        """
        self._explicit_path = explicit_path

    def find_config_file(self) -> Path | None:
        """Find the config file to load.

        Returns:
            Path of the explicit file or first existing search path, or None.
        """
        search_paths = [self._explicit_path] if self._explicit_path else self.SEARCH_PATHS

        for path_str in search_paths:
            path = Path(path_str).expanduser().resolve()
            if path.exists():
                return path
        return None

    def load(self) -> Config:
        """Parse the config file into a Config.

        Returns:
            Parsed Config object. An empty file yields all defaults.

        Raises:
            ConfigNotFoundError: If no config file is found.
        """
        path = self.find_config_file()

        if path is None:
            if self._explicit_path:
                raise ConfigNotFoundError(f"Config file not found: {self._explicit_path}")
            raise ConfigNotFoundError(
                f"No config file found. Searched: {', '.join(self.SEARCH_PATHS)}"
            )

        yaml = YAML(typ="safe")
        with open(path) as f:
            data = yaml.load(f)

        logger.info("config loaded", path=str(path))
        return Config(**(data or {}))
