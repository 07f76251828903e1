"""File selection rules and remote path helpers for ftp-deploy.

Decides which files of the source tree take part in a deployment and
maps local relative paths onto remote FTP paths.
"""

import fnmatch
import posixpath
import re
from pathlib import PurePosixPath
from typing import List, Optional


# Extensions of files that are never needed on a web server:
# sources, project/solution files, debug symbols and IDE state
DEPLOYMENT_EXCLUDED_EXTENSIONS = frozenset({
    ".cs", ".vb", ".fs",
    ".csproj", ".vbproj", ".fsproj", ".sqlproj", ".wixproj",
    ".sln", ".suo", ".user", ".userprefs",
    ".pdb", ".mdb", ".ilk", ".obj", ".exp",
    ".vspscc", ".vssscc", ".scc", ".vsscc",
    ".cache", ".resx", ".tt", ".pubxml", ".orig",
})

# Directory names pruned from the tree (build output and version control)
DEPLOYMENT_EXCLUDED_DIRECTORIES = frozenset({
    "obj", ".git", ".svn", "_svn", ".hg", ".vs", "$tf", ".tfs", "testresults",
})

# Individual file names that are metadata, not content
DEPLOYMENT_EXCLUDED_FILES = frozenset({
    ".gitignore", ".gitattributes", ".gitmodules", ".tfignore",
    ".hgignore", "thumbs.db", ".ds_store",
})

_FILTER_SEPARATORS = re.compile(r"[;,\n]")
_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_remote_path(path: str) -> str:
    """
    Normalize a remote path to forward slashes.

    Backslashes become slashes, repeated slashes collapse, "." segments
    are dropped and trailing slashes are removed (except for the root).

    Args:
        path: Remote path as given by the user

    Returns:
        Normalized path ("" stays "", meaning the login directory)
    """
    if not path:
        return ""

    path = _REPEATED_SLASHES.sub("/", path.strip().replace("\\", "/"))
    is_absolute = path.startswith("/")
    parts = [part for part in path.split("/") if part not in ("", ".")]
    normalized = "/".join(parts)

    if is_absolute:
        return "/" + normalized
    return normalized


def join_remote_path(base: str, relative: str) -> str:
    """
    Join a remote base directory and a relative path.

    Args:
        base: Remote base directory ("" for the login directory)
        relative: Relative path using "/" or "\\" separators

    Returns:
        Normalized joined path
    """
    relative = normalize_remote_path(relative).lstrip("/")
    base = normalize_remote_path(base)
    if not relative:
        return base
    if not base:
        return relative
    return normalize_remote_path(posixpath.join(base, relative))


def remote_parents(path: str) -> List[str]:
    """
    List every directory leading to a remote path, outermost first.

    "/a/b/c" -> ["/a", "/a/b", "/a/b/c"]; the root itself is not listed.
    """
    path = normalize_remote_path(path)
    if not path or path == "/":
        return []

    prefix = "/" if path.startswith("/") else ""
    parts = [p for p in path.split("/") if p]
    return [prefix + "/".join(parts[:i + 1]) for i in range(len(parts))]


def parse_exclude_filter(exclude_filter: Optional[str]) -> List[str]:
    """
    Split an exclude filter into individual glob patterns.

    Patterns are separated by ";", "," or newlines; blanks are ignored
    and backslashes are normalized to "/".

    Args:
        exclude_filter: Raw filter string, may be None

    Returns:
        List of lower-cased patterns
    """
    if not exclude_filter:
        return []

    patterns = []
    for raw in _FILTER_SEPARATORS.split(exclude_filter):
        pattern = raw.strip().replace("\\", "/").strip("/")
        if pattern:
            patterns.append(pattern.lower())
    return patterns


def is_deployment_directory(name: str) -> bool:
    """True if a directory with this name belongs in a deployment."""
    return name.lower() not in DEPLOYMENT_EXCLUDED_DIRECTORIES


def is_deployment_file(relative_path: str) -> bool:
    """
    Check whether a file is deployment-relevant.

    A file is excluded when its extension or name is on the fixed
    exclusion lists, or when one of its parent directories is.

    Args:
        relative_path: Path relative to the source root ("/" separators)

    Returns:
        True if the file should be deployed
    """
    path = PurePosixPath(relative_path.replace("\\", "/"))
    name = path.name.lower()

    if name in DEPLOYMENT_EXCLUDED_FILES:
        return False
    if path.suffix.lower() in DEPLOYMENT_EXCLUDED_EXTENSIONS:
        return False
    return all(is_deployment_directory(part) for part in path.parts[:-1])


class PathFilter:
    """Combines the deployment-file rule and a user exclude filter."""

    def __init__(
        self,
        exclude_filter: Optional[str] = None,
        deployment_files_only: bool = False
    ):
        """
        Initialize the filter.

        Args:
            exclude_filter: ";"/"," separated glob patterns
            deployment_files_only: Apply the fixed deployment exclusion lists
        """
        self._patterns = parse_exclude_filter(exclude_filter)
        self._deployment_files_only = deployment_files_only

    @property
    def patterns(self) -> List[str]:
        """Parsed exclude patterns."""
        return list(self._patterns)

    @property
    def deployment_files_only(self) -> bool:
        return self._deployment_files_only

    def _matches_pattern(self, relative_path: str) -> bool:
        relative_path = relative_path.lower()
        name = relative_path.rsplit("/", 1)[-1]
        for pattern in self._patterns:
            if fnmatch.fnmatchcase(relative_path, pattern):
                return True
            if fnmatch.fnmatchcase(name, pattern):
                return True
        return False

    def accepts_directory(self, relative_path: str) -> bool:
        """
        Check whether a directory should be descended into.

        Args:
            relative_path: Directory path relative to the source root
        """
        name = relative_path.rsplit("/", 1)[-1]
        if self._deployment_files_only and not is_deployment_directory(name):
            return False
        return not self._matches_pattern(relative_path)

    def accepts_file(self, relative_path: str) -> bool:
        """
        Check whether a file should be uploaded.

        Args:
            relative_path: File path relative to the source root
        """
        if self._deployment_files_only and not is_deployment_file(relative_path):
            return False
        return not self._matches_pattern(relative_path)
