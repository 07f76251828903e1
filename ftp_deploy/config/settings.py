"""Persisted deployment defaults for ftp-deploy.

Provides DeploySettings dataclass and SettingsManager for persistence.
Passwords are never stored here; see CredentialManager.
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from ftp_deploy.config.paths import get_settings_path

logger = logging.getLogger("ftp_deploy.settings")


@dataclass
class DeploySettings:
    """Connection defaults remembered between runs."""

    # FTP connection defaults
    last_server: str = ""
    last_port: int = 21
    last_username: str = ""
    last_remote_path: str = ""
    passive_mode: bool = True
    timeout: int = 30
    use_tls: bool = False

    # Transfer defaults
    use_binary: bool = True

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "DeploySettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


class SettingsManager:
    """Manages settings persistence."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[DeploySettings] = None

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    def load(self) -> DeploySettings:
        """
        Load settings from disk.

        Returns:
            DeploySettings instance (defaults if file not found)
        """
        if self._config_path.exists():
            try:
                with open(self._config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                self._settings = DeploySettings.from_dict(data)
            except (json.JSONDecodeError, IOError, TypeError, AttributeError) as e:
                # Invalid or unreadable file, use defaults
                logger.warning(f"Ignoring unreadable settings file {self._config_path}: {e}")
                self._settings = DeploySettings()
        else:
            self._settings = DeploySettings()

        return self._settings

    def save(self, settings: DeploySettings) -> None:
        """
        Persist settings to disk.

        Args:
            settings: Settings to save
        """
        self._settings = settings

        # Ensure parent directory exists
        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)

    def update(self, **kwargs) -> DeploySettings:
        """
        Update specific settings fields.

        Args:
            **kwargs: Field names and new values

        Returns:
            Updated DeploySettings instance
        """
        if self._settings is None:
            self.load()

        for key, value in kwargs.items():
            if hasattr(self._settings, key):
                setattr(self._settings, key, value)

        self.save(self._settings)
        return self._settings
