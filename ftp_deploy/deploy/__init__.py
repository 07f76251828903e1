"""Deployment module for ftp-deploy.

This module ties the local and FTP sides together:
- DeployOptions: Validated deployment parameters
- Deployer: Connect, clear, create directories, upload
- Exceptions: Parameter errors
"""

from ftp_deploy.deploy.exceptions import (
    DeployParameterError,
    InvalidParameterError,
    MissingParameterError,
)
from ftp_deploy.deploy.options import DeployOptions
from ftp_deploy.deploy.runner import Deployer, DeploymentSummary

__all__ = [
    "DeployOptions",
    "Deployer",
    "DeploymentSummary",
    "DeployParameterError",
    "InvalidParameterError",
    "MissingParameterError",
]
