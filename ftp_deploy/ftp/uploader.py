"""File uploader for ftp-deploy.

Handles uploading source files to the remote server via FTP.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple
import logging
import threading
import time

from ftp_deploy.ftp.connection import FTPConnectionManager
from ftp_deploy.ftp.exceptions import FTPNotConnectedError, FTPUploadError
from ftp_deploy.local.scanner import LocalFile

logger = logging.getLogger("ftp_deploy.uploader")


@dataclass
class UploadProgress:
    """Progress information for an upload operation."""
    remote_path: str
    file_name: str
    bytes_sent: int
    bytes_total: int

    @property
    def percent(self) -> float:
        """Upload progress as percentage (0-100)."""
        if self.bytes_total == 0:
            return 0.0
        return min((self.bytes_sent / self.bytes_total) * 100.0, 100.0)


@dataclass
class UploadResult:
    """Result of uploading a single file."""
    remote_path: str
    success: bool
    error_message: Optional[str] = None
    bytes_transferred: int = 0
    duration_seconds: float = 0.0
    cancelled: bool = False


# Type alias for progress callback
ProgressCallback = Callable[[UploadProgress], None]


class FileUploader:
    """Handles file uploads to the remote server."""

    # Block size for binary FTP transfers (8KB)
    BLOCK_SIZE = 8192

    def __init__(self, connection: FTPConnectionManager):
        """
        Initialize the uploader.

        Args:
            connection: Active FTP connection manager
        """
        self._connection = connection
        self._cancelled = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        """True if current operation was cancelled."""
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Cancel current upload operation."""
        self._cancelled.set()
        logger.info("Upload cancelled")

    def reset_cancel(self) -> None:
        """Reset cancellation flag for new operation."""
        self._cancelled.clear()

    @property
    def use_binary(self) -> bool:
        """True if files are transferred in binary (image) mode."""
        config = self._connection.config
        return config.use_binary if config is not None else True

    def upload_file(
        self,
        local_path: Path,
        remote_path: str,
        on_progress: Optional[ProgressCallback] = None,
        source_name: Optional[str] = None
    ) -> UploadResult:
        """
        Upload a single file via FTP.

        Binary mode uses STOR with fixed size blocks, ASCII mode sends
        the file line by line with CRLF line endings.

        Args:
            local_path: Local file path
            remote_path: Remote FTP path
            on_progress: Optional callback for progress updates
            source_name: Name used in errors (defaults to the file name)

        Returns:
            UploadResult for the file

        Raises:
            FTPNotConnectedError: If not connected
            FTPUploadError: If upload fails
        """
        if not self._connection.is_connected:
            raise FTPNotConnectedError("Upload")

        ftp = self._connection.ftp
        file_size = local_path.stat().st_size
        file_name = local_path.name
        bytes_sent = 0
        start_time = time.time()

        def callback(block: bytes) -> None:
            nonlocal bytes_sent
            bytes_sent += len(block)

            if on_progress and not self._cancelled.is_set():
                on_progress(UploadProgress(
                    remote_path=remote_path,
                    file_name=file_name,
                    bytes_sent=bytes_sent,
                    bytes_total=file_size
                ))

        try:
            with open(local_path, "rb") as f:
                if self.use_binary:
                    ftp.storbinary(
                        f"STOR {remote_path}",
                        f,
                        blocksize=self.BLOCK_SIZE,
                        callback=callback
                    )
                else:
                    ftp.storlines(f"STOR {remote_path}", f, callback=callback)
        except Exception as e:
            raise FTPUploadError(source_name or file_name, remote_path, e)

        duration = time.time() - start_time
        logger.debug(f"Uploaded {remote_path} ({bytes_sent} bytes in {duration:.2f}s)")

        return UploadResult(
            remote_path=remote_path,
            success=True,
            bytes_transferred=bytes_sent,
            duration_seconds=duration
        )

    def upload_batch(
        self,
        files: List[Tuple[LocalFile, str]],
        on_progress: Optional[ProgressCallback] = None,
        on_file_complete: Optional[Callable[[UploadResult], None]] = None,
        stop_on_error: bool = True
    ) -> List[UploadResult]:
        """
        Upload several files.

        The cancellation flag is not cleared here: a cancel() issued before
        the batch starts skips every file. Use reset_cancel() to start over.

        Args:
            files: (local file, remote path) pairs in upload order
            on_progress: Optional callback for progress updates
            on_file_complete: Optional callback when each file completes
            stop_on_error: Re-raise the first failure instead of recording it

        Returns:
            List of UploadResult for each file

        Raises:
            FTPUploadError: On the first failure if stop_on_error is set
        """
        results: List[UploadResult] = []

        for local_file, remote_path in files:
            if self._cancelled.is_set():
                # Add cancelled result for remaining files
                results.append(UploadResult(
                    remote_path=remote_path,
                    success=False,
                    error_message="Upload cancelled",
                    cancelled=True
                ))
                continue

            try:
                result = self.upload_file(
                    local_file.path, remote_path, on_progress, local_file.relative_path
                )
            except FTPUploadError as e:
                if stop_on_error:
                    raise
                logger.warning(str(e))
                result = UploadResult(
                    remote_path=remote_path,
                    success=False,
                    error_message=str(e)
                )

            results.append(result)
            if on_file_complete:
                on_file_complete(result)

        return results
