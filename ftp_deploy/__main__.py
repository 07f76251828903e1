"""Allow running ftp-deploy with ``python -m ftp_deploy``."""

import sys

from ftp_deploy.main import main

sys.exit(main())
