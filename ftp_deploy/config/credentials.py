"""Secure credential storage for ftp-deploy.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) to store FTP passwords outside the settings file.
"""

from typing import Optional

import keyring
from keyring.errors import KeyringError


class CredentialManager:
    """Secure credential storage using system keyring."""

    SERVICE_NAME = "ftp-deploy"

    def _make_key(self, server: str, username: str) -> str:
        """
        Create a unique key for the credential.

        Args:
            server: FTP server name
            username: FTP username

        Returns:
            Unique key string
        """
        return f"{server}:{username}"

    def save_password(self, server: str, username: str, password: str) -> bool:
        """
        Save FTP password securely.

        Args:
            server: FTP server name
            username: FTP username
            password: Password to save

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(server, username), password)
            return True
        except KeyringError:
            return False

    def get_password(self, server: str, username: str) -> Optional[str]:
        """
        Retrieve saved password.

        Returns:
            Password string or None if not found
        """
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(server, username))
        except KeyringError:
            return None
