"""Configuration module for ftp-deploy.

This module handles persisted defaults and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure password storage via keyring
- Paths: Application data directory discovery
- DeploySettings: Settings dataclass
"""
