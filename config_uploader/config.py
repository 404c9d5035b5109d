"""
Configuration helpers for the config uploader.
Reads environment variables; command line flags override them.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .exceptions import ValidationError


DEFAULT_PREFERENCES_FILE = ".azure-config.json"
DEFAULT_SETTINGS_FILE = ".config-uploader.yaml"
DEFAULT_AZ_TIMEOUT = 120.0


@dataclass(frozen=True)
class Config:
    """
    Runtime configuration for one run.

    Environment variables:
        CONFIG_UPLOADER_HOME: Base directory for logs (default: ~/.config-uploader)
        CONFIG_UPLOADER_PROJECT_DIR: Directory holding the .env files (default: cwd)
        CONFIG_UPLOADER_PREFERENCES: Stored selection file (default: <project>/.azure-config.json)
        CONFIG_UPLOADER_SETTINGS: Optional YAML settings (default: <project>/.config-uploader.yaml)
        AZ_CLI_PATH: Azure CLI executable (default: az)
        CONFIG_UPLOADER_AZ_TIMEOUT: Seconds to wait for each az call (default: 120)
        CONFIG_UPLOADER_DEBUG: Enable debug logging (1/true/yes)
    """
    project_dir: Path
    preferences_path: Path
    settings_path: Path
    home_dir: Path
    az_path: str = "az"
    az_timeout: float = DEFAULT_AZ_TIMEOUT
    debug: bool = False

    @property
    def log_dir(self) -> Path:
        return self.home_dir / 'logs'

    @staticmethod
    def from_env() -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Config instance

        Raises:
            ValidationError: if CONFIG_UPLOADER_AZ_TIMEOUT is not a positive number
        """
        project_dir = Path(os.getenv("CONFIG_UPLOADER_PROJECT_DIR") or os.getcwd()).expanduser()
        home_dir = Path(os.getenv("CONFIG_UPLOADER_HOME") or Path.home() / ".config-uploader").expanduser()

        preferences = os.getenv("CONFIG_UPLOADER_PREFERENCES")
        settings = os.getenv("CONFIG_UPLOADER_SETTINGS")

        raw_timeout = os.getenv("CONFIG_UPLOADER_AZ_TIMEOUT")
        try:
            az_timeout = float(raw_timeout) if raw_timeout else DEFAULT_AZ_TIMEOUT
        except ValueError:
            raise ValidationError(f"CONFIG_UPLOADER_AZ_TIMEOUT must be a number, got {raw_timeout!r}")
        if az_timeout <= 0:
            raise ValidationError("CONFIG_UPLOADER_AZ_TIMEOUT must be positive")

        return Config(
            project_dir=project_dir,
            preferences_path=Path(preferences).expanduser() if preferences else project_dir / DEFAULT_PREFERENCES_FILE,
            settings_path=Path(settings).expanduser() if settings else project_dir / DEFAULT_SETTINGS_FILE,
            home_dir=home_dir,
            az_path=os.getenv("AZ_CLI_PATH", "az"),
            az_timeout=az_timeout,
            debug=os.getenv("CONFIG_UPLOADER_DEBUG", "").lower() in ("1", "true", "yes"),
        )

    def with_overrides(self,
                       project_dir: Optional[str] = None,
                       preferences_path: Optional[str] = None,
                       settings_path: Optional[str] = None,
                       debug: Optional[bool] = None) -> "Config":
        """
        Apply command line overrides.

        A new project directory also moves the default preferences and
        settings files unless those were given explicitly.
        """
        config = self
        if project_dir:
            new_dir = Path(project_dir).expanduser()
            changes = {'project_dir': new_dir}
            if self.preferences_path == self.project_dir / DEFAULT_PREFERENCES_FILE:
                changes['preferences_path'] = new_dir / DEFAULT_PREFERENCES_FILE
            if self.settings_path == self.project_dir / DEFAULT_SETTINGS_FILE:
                changes['settings_path'] = new_dir / DEFAULT_SETTINGS_FILE
            config = replace(config, **changes)
        if preferences_path:
            config = replace(config, preferences_path=Path(preferences_path).expanduser())
        if settings_path:
            config = replace(config, settings_path=Path(settings_path).expanduser())
        if debug:
            config = replace(config, debug=True)
        return config
