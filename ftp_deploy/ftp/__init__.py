"""FTP operations module for ftp-deploy.

This module handles all FTP-related functionality:
- FTPConnectionManager: Connection management with state tracking
- RemoteFileSystem: Remote directory creation, deletion and metadata
- FileUploader: Single-file and batch upload operations
- Exceptions: FTP-specific error types
"""
