"""Local source tree scanner for ftp-deploy.

Walks the deployment source directory and collects the directories and
files that pass the configured PathFilter.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ftp_deploy.local.filters import PathFilter

logger = logging.getLogger("ftp_deploy.local_scanner")


@dataclass
class LocalFile:
    """A file of the source tree that is a candidate for upload."""
    path: Path
    relative_path: str
    size: int
    modified: datetime

    @classmethod
    def from_path(cls, path: Path, root: Path) -> "LocalFile":
        """
        Create a LocalFile from a filesystem path.

        Args:
            path: Absolute file path
            root: Source root the relative path is computed against

        Returns:
            LocalFile with size and UTC modification time
        """
        stat = path.stat()
        return cls(
            path=path,
            relative_path=path.relative_to(root).as_posix(),
            size=stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )


@dataclass
class LocalTree:
    """Result of scanning a source directory."""
    root: Path
    directories: List[str] = field(default_factory=list)
    files: List[LocalFile] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        """Combined size of all selected files."""
        return sum(f.size for f in self.files)


class SourceScanner:
    """Scans a local directory tree for files to deploy."""

    def __init__(self, source_path: Path, path_filter: Optional[PathFilter] = None):
        """
        Initialize the scanner.

        Args:
            source_path: Root directory of the deployment
            path_filter: Filter deciding which entries are kept (keeps all if None)
        """
        self._source_path = Path(source_path)
        self._filter = path_filter or PathFilter()

    def scan(self) -> LocalTree:
        """
        Walk the source directory.

        Directories rejected by the filter are pruned, so nothing below
        them is visited. Entries are returned in a stable, sorted order with
        parents before children.

        Returns:
            LocalTree with the selected directories and files

        Raises:
            FileNotFoundError: If the source directory does not exist
            NotADirectoryError: If the source path is not a directory
        """
        root = self._source_path
        if not root.exists():
            raise FileNotFoundError(f"Source directory does not exist: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {root}")

        tree = LocalTree(root=root)
        logger.debug(f"Scanning source directory: {root}")

        for current, dirs, files in os.walk(root, topdown=True):
            current_path = Path(current)
            dirs.sort()
            files.sort()

            kept_dirs = []
            for name in dirs:
                relative = (current_path / name).relative_to(root).as_posix()
                if self._filter.accepts_directory(relative):
                    kept_dirs.append(name)
                    tree.directories.append(relative)
                else:
                    logger.debug(f"Excluding directory: {relative}")
                    tree.excluded.append(relative + "/")
            # Prune in place so os.walk skips rejected directories
            dirs[:] = kept_dirs

            for name in files:
                file_path = current_path / name
                relative = file_path.relative_to(root).as_posix()
                if not self._filter.accepts_file(relative):
                    logger.debug(f"Excluding file: {relative}")
                    tree.excluded.append(relative)
                    continue
                tree.files.append(LocalFile.from_path(file_path, root))

        logger.info(
            f"Source scan complete: {len(tree.files)} files ({tree.total_bytes} bytes) in "
            f"{len(tree.directories)} directories, {len(tree.excluded)} excluded"
        )
        return tree
