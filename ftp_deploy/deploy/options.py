"""Deployment parameters for ftp-deploy.

DeployOptions bundles everything a deployment run needs and checks
the mandatory parameters before any connection is attempted.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ftp_deploy.deploy.exceptions import InvalidParameterError, MissingParameterError
from ftp_deploy.ftp.connection import FTPConnectionConfig
from ftp_deploy.local.filters import PathFilter, normalize_remote_path
from ftp_deploy.utils.validators import (
    validate_host,
    validate_port,
    validate_remote_path,
    validate_source_directory,
    validate_timeout,
)

# Checked in this order, so the first missing one is reported
MANDATORY_PARAMETERS = (
    "source_path",
    "server_name",
    "username",
    "password",
    "remote_path",
)


@dataclass
class DeployOptions:
    """Parameters of a single deployment run."""
    source_path: Path
    server_name: str
    username: str
    password: str
    remote_path: str
    use_binary: bool = True
    exclude_filter: Optional[str] = None
    ignore_unchanged_files: bool = False
    delete_old_files: bool = False
    deployment_files_only: bool = False
    port: int = 21
    passive_mode: bool = True
    timeout: int = 30
    use_tls: bool = False
    dry_run: bool = False

    def __post_init__(self):
        """Validate parameters after initialization."""
        for name in MANDATORY_PARAMETERS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingParameterError(name)

        self.source_path = Path(self.source_path)
        self.server_name = self.server_name.strip()

        checks = (
            ("source_path", validate_source_directory(self.source_path)),
            ("server_name", validate_host(self.server_name)),
            ("remote_path", validate_remote_path(self.remote_path)),
            ("port", validate_port(self.port)),
            ("timeout", validate_timeout(self.timeout)),
        )
        for name, (is_valid, error) in checks:
            if not is_valid:
                raise InvalidParameterError(name, error)

    @property
    def remote_root(self) -> str:
        """Normalized remote target directory."""
        return normalize_remote_path(self.remote_path)

    def connection_config(self) -> FTPConnectionConfig:
        """Build the FTP connection configuration for this run."""
        return FTPConnectionConfig(
            host=self.server_name,
            port=int(self.port),
            username=self.username,
            passive_mode=self.passive_mode,
            timeout=int(self.timeout),
            use_binary=self.use_binary,
            use_tls=self.use_tls,
        )

    def path_filter(self) -> PathFilter:
        """Build the source file filter for this run."""
        return PathFilter(
            exclude_filter=self.exclude_filter,
            deployment_files_only=self.deployment_files_only,
        )

    def __repr__(self) -> str:
        return (
            f"DeployOptions(source_path={str(self.source_path)!r}, "
            f"server_name={self.server_name!r}, username={self.username!r}, "
            f"remote_path={self.remote_path!r}, use_binary={self.use_binary}, "
            f"exclude_filter={self.exclude_filter!r}, "
            f"ignore_unchanged_files={self.ignore_unchanged_files}, "
            f"delete_old_files={self.delete_old_files}, "
            f"deployment_files_only={self.deployment_files_only}, dry_run={self.dry_run})"
        )
