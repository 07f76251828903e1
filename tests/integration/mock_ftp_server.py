"""Mock FTP server for integration testing.

Uses pyftpdlib to run a local FTP server backed by a temporary
directory that stands in for the deployment target.
"""

import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Optional

from pyftpdlib.authorizers import DummyAuthorizer
from pyftpdlib.handlers import FTPHandler
from pyftpdlib.servers import FTPServer


class MockDeployFTPServer:
    """
    Local FTP server for deployment tests.

    Usage:
        with MockDeployFTPServer() as server:
            # Connect to server.host:server.port
            # server.root_dir contains the remote filesystem
            pass
    """

    DEFAULT_USER = "testuser"
    DEFAULT_PASS = "testpass"

    def __init__(
        self,
        username: str = DEFAULT_USER,
        password: str = DEFAULT_PASS,
        mlsd: bool = True,
    ):
        """
        Initialize the mock FTP server.

        Args:
            username: FTP username
            password: FTP password
            mlsd: Whether the server understands MLSD/MLST
        """
        self.username = username
        self.password = password
        self.mlsd = mlsd
        self.port: Optional[int] = None

        self._server: Optional[FTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._temp_dir: Optional[tempfile.TemporaryDirectory] = None
        self._root_dir: Optional[Path] = None

    @property
    def root_dir(self) -> Path:
        """Root directory of the mock filesystem."""
        if self._root_dir is None:
            raise RuntimeError("Server not started")
        return self._root_dir

    @property
    def host(self) -> str:
        """Server host address."""
        return "127.0.0.1"

    def add_file(self, path: str, content: str = "", mtime: Optional[float] = None) -> Path:
        """
        Put a file on the mock server.

        Args:
            path: FTP path (e.g., "/site/wwwroot/old.html")
            content: Text content
            mtime: Optional modification time (seconds since epoch)

        Returns:
            Local path of the created file
        """
        local_path = self.root_dir / path.lstrip("/")
        local_path.parent.mkdir(parents=True, exist_ok=True)
        local_path.write_text(content)
        if mtime is not None:
            os.utime(local_path, (mtime, mtime))
        return local_path

    def path(self, ftp_path: str) -> Path:
        """Local path behind an FTP path."""
        return self.root_dir / ftp_path.lstrip("/")

    def start(self) -> None:
        """Start the FTP server in a background thread."""
        self._temp_dir = tempfile.TemporaryDirectory(prefix="mock_deploy_ftp_")
        self._root_dir = Path(self._temp_dir.name)

        authorizer = DummyAuthorizer()
        authorizer.add_user(
            self.username,
            self.password,
            str(self._root_dir),
            perm="elradfmwMT"  # Full permissions
        )

        # Per-server handler class so settings don't leak between servers
        class Handler(FTPHandler):
            pass

        Handler.authorizer = authorizer
        Handler.passive_ports = range(60000, 60200)
        if not self.mlsd:
            Handler.proto_cmds = {
                cmd: info for cmd, info in FTPHandler.proto_cmds.items()
                if cmd not in ("MLSD", "MLST")
            }

        # Port 0 lets the OS pick a free port
        self._server = FTPServer((self.host, 0), Handler)
        self.port = self._server.socket.getsockname()[1]

        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

        # Give server time to start
        time.sleep(0.2)

    def stop(self) -> None:
        """Stop the FTP server and clean up."""
        if self._server:
            self._server.close_all()

        if self._thread:
            self._thread.join(timeout=5)

        if self._temp_dir:
            self._temp_dir.cleanup()

        self._server = None
        self._thread = None
        self._temp_dir = None
        self._root_dir = None

    def __enter__(self) -> "MockDeployFTPServer":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()
