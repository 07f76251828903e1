"""Local source tree module.

This module provides:
- PathFilter: Deployment-file and exclude-pattern rules
- SourceScanner: Walks the source directory into a LocalTree
"""

from ftp_deploy.local.filters import PathFilter, is_deployment_file
from ftp_deploy.local.scanner import LocalFile, LocalTree, SourceScanner

__all__ = ["PathFilter", "is_deployment_file", "LocalFile", "LocalTree", "SourceScanner"]
