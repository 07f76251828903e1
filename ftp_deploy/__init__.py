"""ftp-deploy: mirror a local directory tree to an FTP server."""

__version__ = "1.0.0"
