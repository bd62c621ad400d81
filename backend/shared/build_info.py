"""Build metadata exposed by the health endpoint.

APP_VERSION and GIT_COMMIT can be set via environment variables at deploy
time. Otherwise the version comes from the installed distribution and the
commit from git, falling back to "dev".
"""

import os
import subprocess
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "spades-scorekeeper"


def _git_short_sha() -> str:
    """Read short SHA from git for local development."""
    try:
        return subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
    except (FileNotFoundError, subprocess.CalledProcessError):
        return "dev"


def _installed_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "dev"


APP_VERSION: str = os.environ.get("APP_VERSION") or _installed_version()
GIT_COMMIT: str = os.environ.get("GIT_COMMIT") or _git_short_sha()
