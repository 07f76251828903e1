"""FTP-specific exceptions for ftp-deploy.

Every failure of a deployment step is raised as an FTPError subclass,
so the command line can report it with one message and exit code. The
FTP reply code of the underlying ftplib error is kept where there is one.
"""

import re
from typing import Optional

_REPLY_CODE = re.compile(r"^\s*([1-5]\d\d)\b")


def reply_code(error: Optional[BaseException]) -> Optional[str]:
    """
    Extract the three digit FTP reply code from an ftplib error.

    Args:
        error: Exception raised by ftplib (e.g. error_perm("550 No such file"))

    Returns:
        Reply code such as "550", or None if the error carries none
    """
    if error is None:
        return None
    match = _REPLY_CODE.match(str(error))
    return match.group(1) if match else None


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.reply_code = reply_code(original_error)

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPConnectionError(FTPError):
    """The deployment server could not be reached."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        super().__init__(f"Cannot reach FTP server {host}:{port}", original_error)


class FTPAuthenticationError(FTPError):
    """The server rejected the deployment account."""

    def __init__(self, username: str, original_error: Exception = None):
        self.username = username
        super().__init__(f"Server rejected login for user '{username}'", original_error)


class FTPNotConnectedError(FTPError):
    """A remote step ran without an open session."""

    def __init__(self, operation: str = "Operation"):
        super().__init__(f"{operation} needs an open FTP session")


class FTPTimeoutError(FTPError):
    """The server did not answer in time."""

    def __init__(self, operation: str = "Operation", timeout: int = 30):
        self.timeout = timeout
        super().__init__(f"{operation} got no answer within {timeout} seconds")


class FTPUploadError(FTPError):
    """A source file could not be stored on the server."""

    def __init__(
        self,
        source_path: str,
        remote_path: str,
        original_error: Exception = None
    ):
        self.source_path = source_path
        self.remote_path = remote_path
        super().__init__(f"Upload of {source_path} to {remote_path} failed", original_error)


class FTPPathError(FTPError):
    """A remote directory could not be read."""

    def __init__(self, path: str, operation: str, original_error: Exception = None):
        self.path = path
        self.operation = operation
        super().__init__(f"Cannot {operation} remote directory {path}", original_error)


class FTPPermissionError(FTPError):
    """The server refused to change the remote tree."""

    def __init__(self, path: str, operation: str, original_error: Exception = None):
        self.path = path
        self.operation = operation
        super().__init__(f"Server refused to {operation} {path}", original_error)


class FTPDeleteError(FTPError):
    """An old remote file or directory could not be removed."""

    def __init__(self, path: str, original_error: Exception = None):
        self.path = path
        super().__init__(f"Cannot delete old remote entry {path}", original_error)
