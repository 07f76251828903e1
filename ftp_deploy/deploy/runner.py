"""Deployment runner for ftp-deploy.

Runs the deployment sequence over a single FTP session:
scan source -> connect -> clear remote tree -> create directories ->
compare and upload files -> disconnect.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ftp_deploy.deploy.options import DeployOptions
from ftp_deploy.ftp.connection import FTPConnectionManager
from ftp_deploy.ftp.remote import RemoteFileInfo, RemoteFileSystem
from ftp_deploy.ftp.uploader import FileUploader, ProgressCallback, UploadResult
from ftp_deploy.local.filters import join_remote_path
from ftp_deploy.local.scanner import LocalFile, LocalTree, SourceScanner

logger = logging.getLogger("ftp_deploy.deployer")


@dataclass
class DeploymentSummary:
    """Outcome of a deployment run."""
    remote_root: str
    dry_run: bool = False
    cancelled: bool = False
    directories_created: List[str] = field(default_factory=list)
    uploaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    remote_files_deleted: int = 0
    remote_directories_deleted: int = 0
    bytes_transferred: int = 0
    duration_seconds: float = 0.0

    @property
    def files_uploaded(self) -> int:
        return len(self.uploaded)

    @property
    def files_skipped(self) -> int:
        return len(self.skipped)

    def describe(self) -> str:
        """One-line human readable summary."""
        prefix = "Dry run: " if self.dry_run else ""
        return (
            f"{prefix}{self.files_uploaded} uploaded, {self.files_skipped} unchanged, "
            f"{len(self.excluded)} excluded, {len(self.directories_created)} directories "
            f"created, {self.remote_files_deleted} remote files deleted, "
            f"{self.bytes_transferred} bytes in {self.duration_seconds:.1f}s"
        )


def _truncate_to_seconds(value: datetime) -> datetime:
    return value.replace(microsecond=0)


def is_unchanged(local_file: LocalFile, remote: RemoteFileInfo) -> bool:
    """
    Decide whether a remote copy can be left alone.

    The remote file counts as unchanged when it has the same size and
    is not older than the local file. Missing metadata means changed.

    Args:
        local_file: File in the source tree
        remote: Metadata reported by the server

    Returns:
        True if the upload can be skipped
    """
    if remote.size is None or remote.modified is None:
        return False
    if remote.size != local_file.size:
        return False
    # MDTM has one second resolution
    return remote.modified >= _truncate_to_seconds(local_file.modified)


class Deployer:
    """Mirrors a local directory to an FTP server."""

    def __init__(
        self,
        options: DeployOptions,
        connection: Optional[FTPConnectionManager] = None
    ):
        """
        Initialize the deployer.

        Args:
            options: Validated deployment parameters
            connection: Connection manager to use (a new one if None)
        """
        self._options = options
        self._connection = connection or FTPConnectionManager()
        self._remote = RemoteFileSystem(self._connection)
        self._uploader = FileUploader(self._connection)

    @property
    def options(self) -> DeployOptions:
        return self._options

    @property
    def connection(self) -> FTPConnectionManager:
        return self._connection

    def cancel(self) -> None:
        """Stop after the file currently being uploaded."""
        self._uploader.cancel()

    def run(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_file_complete: Optional[Callable[[UploadResult], None]] = None
    ) -> DeploymentSummary:
        """
        Run the deployment.

        The FTP session is always closed, also when a step fails. Errors
        are not retried; the first failed upload aborts the run. A cancel()
        from another thread or a signal handler is honoured between steps
        and between files.

        Args:
            on_progress: Optional callback for upload progress
            on_file_complete: Optional callback when each file is uploaded

        Returns:
            DeploymentSummary of what was done

        Raises:
            FileNotFoundError: If the source directory disappeared
            FTPError: Any connection, listing, delete or upload failure
        """
        options = self._options
        start_time = time.time()
        summary = DeploymentSummary(remote_root=options.remote_root, dry_run=options.dry_run)
        self._uploader.reset_cancel()

        tree = SourceScanner(options.source_path, options.path_filter()).scan()
        summary.excluded = list(tree.excluded)
        if self._stop_requested(summary):
            return self._finish(summary, start_time)

        logger.info(
            f"Deploying {options.source_path} to {options.server_name}:"
            f"{options.remote_root or '.'}"
        )
        self._connection.connect(options.connection_config(), password=options.password)
        try:
            cleared = False
            if options.delete_old_files and not self._stop_requested(summary):
                cleared = self._clear_remote(summary)

            if not self._stop_requested(summary):
                self._create_directories(tree, summary)

            pending: List[Tuple[LocalFile, str]] = []
            if not self._stop_requested(summary):
                pending = self._select_files(tree, summary, check_remote=not cleared)

            if not self._stop_requested(summary):
                self._upload(pending, summary, on_progress, on_file_complete)
        finally:
            self._connection.disconnect()

        return self._finish(summary, start_time)

    def _stop_requested(self, summary: DeploymentSummary) -> bool:
        if self._uploader.is_cancelled:
            summary.cancelled = True
        return summary.cancelled

    def _finish(self, summary: DeploymentSummary, start_time: float) -> DeploymentSummary:
        summary.duration_seconds = time.time() - start_time
        if self._stop_requested(summary):
            logger.warning("Deployment cancelled")
        logger.info(summary.describe())
        return summary

    def _clear_remote(self, summary: DeploymentSummary) -> bool:
        """Delete everything below the remote root; returns True if cleared."""
        root = self._options.remote_root
        if not self._remote.is_directory(root):
            logger.info(f"Remote directory {root} does not exist yet, nothing to delete")
            return True

        if self._options.dry_run:
            entries = self._remote.list_directory(root)
            logger.info(f"Would delete {len(entries)} entries below {root or '.'}")
            return True

        logger.info(f"Deleting old files below {root or '.'}")
        files, dirs = self._remote.remove_tree(root, keep_root=True)
        summary.remote_files_deleted = files
        summary.remote_directories_deleted = dirs
        logger.info(f"Deleted {files} files and {dirs} directories")
        return True

    def _create_directories(self, tree: LocalTree, summary: DeploymentSummary) -> None:
        root = self._options.remote_root
        targets = [root] + [join_remote_path(root, d) for d in tree.directories]

        for target in targets:
            if not target:
                continue
            if self._options.dry_run:
                if not self._remote.is_directory(target):
                    logger.info(f"Would create directory {target}")
                    summary.directories_created.append(target)
                continue
            created = self._remote.make_directories(target)
            for path in created:
                logger.info(f"Created directory {path}")
            summary.directories_created.extend(created)

    def _select_files(
        self,
        tree: LocalTree,
        summary: DeploymentSummary,
        check_remote: bool
    ) -> List[Tuple[LocalFile, str]]:
        """Pair files with their remote paths, dropping unchanged ones."""
        root = self._options.remote_root
        compare = self._options.ignore_unchanged_files and check_remote
        pending = []

        for local_file in tree.files:
            remote_path = join_remote_path(root, local_file.relative_path)
            if compare and is_unchanged(local_file, self._remote.get_file_info(remote_path)):
                logger.debug(f"Skipping unchanged file {local_file.relative_path}")
                summary.skipped.append(local_file.relative_path)
                continue
            pending.append((local_file, remote_path))

        return pending

    def _upload(
        self,
        pending: List[Tuple[LocalFile, str]],
        summary: DeploymentSummary,
        on_progress: Optional[ProgressCallback],
        on_file_complete: Optional[Callable[[UploadResult], None]]
    ) -> None:
        if self._options.dry_run:
            for local_file, remote_path in pending:
                logger.info(f"Would upload {local_file.relative_path} -> {remote_path}")
                summary.uploaded.append(local_file.relative_path)
            return

        by_remote_path = {remote_path: local_file for local_file, remote_path in pending}

        def file_complete(result: UploadResult) -> None:
            if result.success:
                logger.info(f"Uploaded {result.remote_path}")
                summary.uploaded.append(by_remote_path[result.remote_path].relative_path)
                summary.bytes_transferred += result.bytes_transferred
            if on_file_complete:
                on_file_complete(result)

        self._uploader.upload_batch(
            pending,
            on_progress=on_progress,
            on_file_complete=file_complete,
            stop_on_error=True,
        )
