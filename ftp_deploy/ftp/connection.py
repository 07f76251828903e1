"""FTP connection management for ftp-deploy.

Provides ConnectionState enum, FTPConnectionConfig dataclass,
and FTPConnectionManager class for managing the deployment session.
"""

from dataclasses import dataclass
from enum import Enum
from ftplib import FTP, FTP_TLS, error_perm
from typing import Optional
import logging
import socket

from ftp_deploy.ftp.exceptions import (
    FTPConnectionError,
    FTPAuthenticationError,
    FTPNotConnectedError,
    FTPTimeoutError,
)

logger = logging.getLogger("ftp_deploy.connection")


class ConnectionState(Enum):
    """FTP connection state."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class FTPConnectionConfig:
    """FTP connection configuration."""
    host: str
    port: int = 21
    username: str = "anonymous"
    passive_mode: bool = True
    timeout: int = 30
    use_binary: bool = True
    use_tls: bool = False
    encoding: str = "utf-8"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.host:
            raise ValueError("Host is required")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {self.port}")
        if not 5 <= self.timeout <= 300:
            raise ValueError(f"Timeout must be between 5 and 300, got {self.timeout}")

    @property
    def transfer_type(self) -> str:
        """FTP TYPE argument matching the transfer mode."""
        return "I" if self.use_binary else "A"


class FTPConnectionManager:
    """Manages FTP connection lifecycle."""

    def __init__(self):
        """Initialize the connection manager."""
        self._ftp: Optional[FTP] = None
        self._config: Optional[FTPConnectionConfig] = None
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True if currently connected."""
        return self._state == ConnectionState.CONNECTED

    @property
    def config(self) -> Optional[FTPConnectionConfig]:
        """Current connection configuration."""
        return self._config

    @property
    def ftp(self) -> FTP:
        """
        Get the underlying FTP object.

        Raises:
            FTPNotConnectedError: If not connected
        """
        if not self.is_connected or self._ftp is None:
            raise FTPNotConnectedError("FTP access")
        return self._ftp

    def connect(self, config: FTPConnectionConfig, password: str = "") -> None:
        """
        Establish FTP connection.

        Args:
            config: Connection configuration
            password: FTP password

        Raises:
            FTPConnectionError: If connection fails
            FTPAuthenticationError: If login fails
            FTPTimeoutError: If connection times out
        """
        self._config = config
        self._state = ConnectionState.CONNECTING

        try:
            self._ftp = FTP_TLS() if config.use_tls else FTP()
            self._ftp.set_debuglevel(0)
            self._ftp.encoding = config.encoding

            try:
                self._ftp.connect(
                    host=config.host,
                    port=config.port,
                    timeout=config.timeout
                )
            except socket.timeout:
                raise FTPTimeoutError("Connection", config.timeout)
            except (socket.error, OSError) as e:
                raise FTPConnectionError(config.host, config.port, e)

            try:
                self._ftp.login(user=config.username, passwd=password)
            except error_perm as e:
                raise FTPAuthenticationError(config.username, e)

            if config.use_tls:
                # Encrypt the data channel too, not only the control channel
                self._ftp.prot_p()

            self._ftp.set_pasv(config.passive_mode)
            self._ftp.voidcmd(f"TYPE {config.transfer_type}")

            self._state = ConnectionState.CONNECTED
            logger.info(
                f"Connected to {config.host}:{config.port} as {config.username} "
                f"({'binary' if config.use_binary else 'ASCII'} mode)"
            )

        except (FTPConnectionError, FTPAuthenticationError, FTPTimeoutError) as e:
            self._state = ConnectionState.ERROR
            self._close_quietly()
            raise
        except Exception as e:
            self._state = ConnectionState.ERROR
            self._close_quietly()
            raise FTPConnectionError(config.host, config.port, e)

    def _close_quietly(self) -> None:
        """Drop the socket of a half-open session."""
        if self._ftp is not None:
            try:
                self._ftp.close()
            except Exception:
                pass
        self._ftp = None

    def disconnect(self) -> None:
        """Close FTP connection gracefully."""
        if self._ftp:
            try:
                self._ftp.quit()
            except Exception:
                # Best effort close
                try:
                    self._ftp.close()
                except Exception:
                    pass
            logger.debug("Disconnected")

        self._ftp = None
        self._state = ConnectionState.DISCONNECTED
