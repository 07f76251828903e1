"""Remote tree operations for ftp-deploy.

Directory creation, recursive deletion, listing and file metadata
lookups on top of an active FTPConnectionManager session.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from ftplib import error_perm, error_reply, error_temp
from typing import List, Optional, Set, Tuple

from ftp_deploy.ftp.connection import FTPConnectionManager
from ftp_deploy.ftp.exceptions import (
    FTPDeleteError,
    FTPNotConnectedError,
    FTPPathError,
    FTPPermissionError,
    reply_code,
)
from ftp_deploy.local.filters import join_remote_path, normalize_remote_path, remote_parents

logger = logging.getLogger("ftp_deploy.remote")

MDTM_FORMAT = "%Y%m%d%H%M%S"

# Replies meaning "command not implemented" rather than a missing directory
MLSD_UNSUPPORTED_REPLIES = ("500", "501", "502", "504")


@dataclass
class RemoteEntry:
    """A single entry of a remote directory listing."""
    name: str
    is_dir: bool


@dataclass
class RemoteFileInfo:
    """Size and modification time of a remote file, if the server reports them."""
    path: str
    size: Optional[int] = None
    modified: Optional[datetime] = None

    @property
    def exists(self) -> bool:
        """True if the server reported anything about the file."""
        return self.size is not None or self.modified is not None


def parse_mdtm(response: str) -> Optional[datetime]:
    """
    Parse an MDTM reply into a UTC datetime.

    Args:
        response: Full reply line, e.g. "213 20240131235959" (fractions allowed)

    Returns:
        Timezone-aware datetime, or None if the reply can't be parsed
    """
    parts = response.split(None, 1)
    if len(parts) != 2 or not parts[0].startswith("213"):
        return None
    value = parts[1].strip()[:14]
    try:
        return datetime.strptime(value, MDTM_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_list_line(line: str) -> Optional[RemoteEntry]:
    """
    Parse one line of LIST output (Unix or Windows/IIS style).

    Args:
        line: Raw listing line

    Returns:
        RemoteEntry, or None for lines that describe no entry
    """
    line = line.rstrip("\r\n")
    if not line or line.lower().startswith("total"):
        return None

    parts = line.split(None, 8)

    # Unix: "drwxr-xr-x 2 user group 4096 Jan  1 12:00 name"
    if len(parts) == 9 and parts[0][:1] in ("d", "-", "l"):
        name = parts[8]
        if parts[0].startswith("l") and " -> " in name:
            name = name.split(" -> ", 1)[0]
        return RemoteEntry(name=name, is_dir=parts[0].startswith("d"))

    # Windows: "01-31-24  11:59PM       <DIR>          name"
    parts = line.split(None, 3)
    if len(parts) == 4:
        return RemoteEntry(name=parts[3], is_dir=parts[2].upper() == "<DIR>")

    return None


class RemoteFileSystem:
    """File system style operations on the remote server."""

    def __init__(self, connection: FTPConnectionManager):
        """
        Initialize remote operations.

        Args:
            connection: Active FTP connection manager
        """
        self._connection = connection
        self._known_directories: Set[str] = set()
        self._mlsd_supported: Optional[bool] = None

    @property
    def _ftp(self):
        if not self._connection.is_connected:
            raise FTPNotConnectedError("Remote operation")
        return self._connection.ftp

    def is_directory(self, path: str) -> bool:
        """
        Check whether a remote path is an existing directory.

        Probes with CWD and returns to the previous working directory.
        """
        path = normalize_remote_path(path)
        if not path or path in self._known_directories:
            return True

        ftp = self._ftp
        current = ftp.pwd()
        try:
            ftp.cwd(path)
        except error_perm:
            return False
        finally:
            ftp.cwd(current)

        self._known_directories.add(path)
        return True

    def list_directory(self, path: str) -> List[RemoteEntry]:
        """
        List a remote directory.

        Uses MLSD and falls back to LIST when the server rejects it.

        Args:
            path: Remote directory

        Returns:
            Entries of the directory, without "." and ".."

        Raises:
            FTPPathError: If the directory can't be listed
        """
        path = normalize_remote_path(path) or "."
        ftp = self._ftp

        if self._mlsd_supported is not False:
            try:
                entries = [
                    RemoteEntry(name=name, is_dir=facts.get("type", "").lower() == "dir")
                    for name, facts in ftp.mlsd(path, facts=["type"])
                    if facts.get("type", "").lower() not in ("cdir", "pdir")
                    and name not in (".", "..")
                ]
                self._mlsd_supported = True
                return entries
            except error_perm as e:
                if reply_code(e) not in MLSD_UNSUPPORTED_REPLIES:
                    raise FTPPathError(path, "list", e)
                logger.debug(f"MLSD not supported, falling back to LIST: {e}")
                self._mlsd_supported = False

        lines: List[str] = []
        try:
            ftp.dir(path, lines.append)
        except error_perm as e:
            raise FTPPathError(path, "list", e)

        entries = []
        for line in lines:
            entry = parse_list_line(line)
            if entry and entry.name not in (".", ".."):
                entries.append(entry)
        return entries

    def make_directory(self, path: str) -> bool:
        """
        Create a single remote directory.

        An already existing directory is not an error.

        Args:
            path: Remote directory path

        Returns:
            True if the directory was created, False if it already existed

        Raises:
            FTPPermissionError: If the server refuses and no directory exists
        """
        path = normalize_remote_path(path)
        if not path or path == "/" or path in self._known_directories:
            return False

        try:
            self._ftp.mkd(path)
        except error_perm as e:
            if self.is_directory(path):
                self._known_directories.add(path)
                return False
            raise FTPPermissionError(path, "create directory", e)

        self._known_directories.add(path)
        logger.debug(f"Created directory: {path}")
        return True

    def make_directories(self, path: str) -> List[str]:
        """
        Create a remote directory and all missing parents.

        Args:
            path: Remote directory path

        Returns:
            Paths of the directories that were actually created
        """
        created = []
        for parent in remote_parents(path):
            if self.make_directory(parent):
                created.append(parent)
        return created

    def remove_tree(self, path: str, keep_root: bool = True) -> Tuple[int, int]:
        """
        Delete a remote directory tree.

        Files are deleted first, then the emptied directories bottom-up.

        Args:
            path: Remote directory to clear
            keep_root: Keep the directory itself and only remove its contents

        Returns:
            Tuple of (files_deleted, directories_deleted)

        Raises:
            FTPDeleteError: If an entry can't be removed
        """
        path = normalize_remote_path(path)
        files_deleted = 0
        dirs_deleted = 0

        for entry in self.list_directory(path):
            child = join_remote_path(path, entry.name)
            if entry.is_dir:
                sub_files, sub_dirs = self.remove_tree(child, keep_root=False)
                files_deleted += sub_files
                dirs_deleted += sub_dirs
            else:
                try:
                    self._ftp.delete(child)
                except (error_perm, error_temp, error_reply) as e:
                    raise FTPDeleteError(child, e)
                logger.debug(f"Deleted file: {child}")
                files_deleted += 1

        if not keep_root and path not in ("", "/"):
            try:
                self._ftp.rmd(path)
            except (error_perm, error_temp, error_reply) as e:
                raise FTPDeleteError(path, e)
            self._known_directories.discard(path)
            logger.debug(f"Deleted directory: {path}")
            dirs_deleted += 1

        return files_deleted, dirs_deleted

    def get_file_info(self, path: str) -> RemoteFileInfo:
        """
        Look up size and modification time of a remote file.

        Missing files and servers without SIZE/MDTM yield empty fields.

        Args:
            path: Remote file path

        Returns:
            RemoteFileInfo for the path
        """
        path = normalize_remote_path(path)
        ftp = self._ftp
        info = RemoteFileInfo(path=path)

        try:
            # SIZE is only reliable in binary mode
            ftp.voidcmd("TYPE I")
            info.size = ftp.size(path)
        except error_perm:
            info.size = None
        finally:
            config = self._connection.config
            if config is not None and not config.use_binary:
                ftp.voidcmd("TYPE A")

        try:
            info.modified = parse_mdtm(ftp.sendcmd(f"MDTM {path}"))
        except error_perm:
            info.modified = None

        return info
