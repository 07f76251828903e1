"""Command-line entry point for ftp-deploy.

Parses arguments, merges them with the saved defaults and keyring
credentials, runs the deployment and maps failures to exit codes.
"""

import argparse
import logging
import os
import signal
import sys
from pathlib import Path
from typing import List, Optional

from ftp_deploy import __version__
from ftp_deploy.config.credentials import CredentialManager
from ftp_deploy.config.paths import get_log_file_path
from ftp_deploy.config.settings import DeploySettings, SettingsManager
from ftp_deploy.deploy.exceptions import DeployParameterError
from ftp_deploy.deploy.options import DeployOptions
from ftp_deploy.deploy.runner import Deployer
from ftp_deploy.ftp.exceptions import FTPError
from ftp_deploy.utils.logging import setup_logging

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_PARAMETERS = 2
EXIT_INTERRUPTED = 130

PASSWORD_ENV_VAR = "FTP_DEPLOY_PASSWORD"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ftp-deploy",
        description="Mirror a local directory tree to an FTP server.",
    )
    parser.add_argument("source_path", metavar="SOURCE", help="local directory to deploy")
    parser.add_argument("-s", "--server", dest="server_name",
                        help="FTP server name or address (default: last used)")
    parser.add_argument("-u", "--username", help="FTP user name (default: last used)")
    parser.add_argument("-p", "--password",
                        help=f"FTP password (default: ${PASSWORD_ENV_VAR} or the keyring)")
    parser.add_argument("-r", "--remote-path",
                        help="target directory on the server (default: last used)")
    parser.add_argument("--port", type=int, help="FTP port (default: 21)")

    transfer = parser.add_argument_group("transfer")
    mode = transfer.add_mutually_exclusive_group()
    mode.add_argument("--binary", dest="use_binary", action="store_true", default=None,
                      help="transfer files in binary mode (default)")
    mode.add_argument("--ascii", dest="use_binary", action="store_false",
                      help="transfer files in ASCII mode")
    transfer.add_argument("--active", dest="passive_mode", action="store_false", default=None,
                          help="use active instead of passive mode")
    transfer.add_argument("--timeout", type=int, help="socket timeout in seconds (5-300)")
    transfer.add_argument("--tls", dest="use_tls", action="store_true", default=None,
                          help="use explicit FTPS (AUTH TLS)")

    selection = parser.add_argument_group("file selection")
    selection.add_argument("-x", "--exclude", dest="exclude_filter", metavar="PATTERNS",
                           help="';' separated glob patterns of files/directories to skip")
    selection.add_argument("--deployment-files-only", action="store_true",
                           help="skip sources, project files, build artifacts and VCS data")
    selection.add_argument("--ignore-unchanged", dest="ignore_unchanged_files",
                           action="store_true",
                           help="skip files whose remote copy has the same size and is not older")
    selection.add_argument("--delete-old-files", action="store_true",
                           help="delete everything below the remote path before uploading")

    parser.add_argument("-n", "--dry-run", action="store_true",
                        help="show what would be done without changing the server")
    parser.add_argument("--save-password", action="store_true",
                        help="store the password in the system keyring")
    parser.add_argument("--log-file", type=Path, help="log file (default: app data directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _pick(value, default):
    return default if value is None else value


def resolve_options(
    args: argparse.Namespace,
    settings: DeploySettings,
    credentials: CredentialManager
) -> DeployOptions:
    """
    Merge command-line arguments with saved settings and credentials.

    Arguments win over saved settings; the password comes from the
    command line, the environment or the keyring, in that order.

    Raises:
        DeployParameterError: If a mandatory parameter is still missing
    """
    server_name = _pick(args.server_name, settings.last_server)
    username = _pick(args.username, settings.last_username)

    password = args.password or os.environ.get(PASSWORD_ENV_VAR)
    if not password and server_name and username:
        password = credentials.get_password(server_name, username)

    return DeployOptions(
        source_path=args.source_path,
        server_name=server_name,
        username=username,
        password=password,
        remote_path=_pick(args.remote_path, settings.last_remote_path),
        use_binary=_pick(args.use_binary, settings.use_binary),
        exclude_filter=args.exclude_filter,
        ignore_unchanged_files=args.ignore_unchanged_files,
        delete_old_files=args.delete_old_files,
        deployment_files_only=args.deployment_files_only,
        port=_pick(args.port, settings.last_port),
        passive_mode=_pick(args.passive_mode, settings.passive_mode),
        timeout=_pick(args.timeout, settings.timeout),
        use_tls=_pick(args.use_tls, settings.use_tls),
        dry_run=args.dry_run,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run ftp-deploy; returns the process exit code."""
    args = build_parser().parse_args(argv)

    logger = setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file or get_log_file_path(),
    )

    settings_manager = SettingsManager()
    credentials = CredentialManager()

    try:
        options = resolve_options(args, settings_manager.load(), credentials)
    except DeployParameterError as e:
        logger.error(str(e))
        return EXIT_BAD_PARAMETERS

    deployer = Deployer(options)

    def handle_interrupt(signum, frame):
        logger.warning("Interrupted, stopping after the current file")
        deployer.cancel()
        # A second Ctrl+C aborts immediately
        signal.signal(signal.SIGINT, signal.default_int_handler)

    previous_handler = signal.signal(signal.SIGINT, handle_interrupt)

    try:
        summary = deployer.run()
    except (FTPError, OSError) as e:
        logger.error(f"Deployment failed: {e}")
        return EXIT_FAILED
    except KeyboardInterrupt:
        logger.error("Deployment aborted")
        return EXIT_INTERRUPTED
    finally:
        signal.signal(signal.SIGINT, previous_handler or signal.default_int_handler)

    settings_manager.update(
        last_server=options.server_name,
        last_port=options.port,
        last_username=options.username,
        last_remote_path=options.remote_path,
        passive_mode=options.passive_mode,
        timeout=options.timeout,
        use_tls=options.use_tls,
        use_binary=options.use_binary,
    )
    if args.save_password and args.password:
        if not credentials.save_password(options.server_name, options.username, args.password):
            logger.warning("Could not store the password in the keyring")

    print(summary.describe())
    return EXIT_INTERRUPTED if summary.cancelled else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
