from importlib.metadata import PackageNotFoundError, version
import logging
import os
import platform
from typing import Optional


LOG = logging.getLogger(__name__)

DISTRIBUTION_NAME = "ga-measurement-protocol"
CLIENT_NAME = "ga-measurement-protocol-python"
PROJECT_URL = "https://github.com/ga-measurement-protocol/ga-measurement-protocol-python"

ROOT = os.path.dirname(os.path.abspath(__file__))


def get_version() -> Optional[str]:
    """
    Get the version of the package.

    The installed distribution metadata wins; a source checkout falls back to
    the bundled VERSION file.

    Returns:
      Optional[str]: The version if found, otherwise None.
    """
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        LOG.debug("Distribution metadata not found, reading VERSION file.")

    try:
        with open(os.path.join(ROOT, "VERSION")) as version_file:
            return version_file.read().strip()
    except OSError:
        LOG.exception("Unable to get the client version.")
        return None


def get_user_agent() -> str:
    """
    Get the user agent string sent with every hit.

    Returns:
      str: The user agent string in the format:
        ga-measurement-protocol-python/{version} ({os} {arch}; Python/{python_version}) (+{url})
    """
    client_version = get_version() or "unknown"
    os_name = platform.system()

    machine = platform.machine()
    # Normalize architecture names
    if machine in ("x86_64", "AMD64"):
        arch = "x86_64"
    elif machine in ("arm64", "aarch64"):
        arch = "arm_64"
    elif machine == "i386":
        arch = "x86"
    else:
        arch = machine or "unknown"

    python_version = platform.python_version()

    return (
        f"{CLIENT_NAME}/{client_version} ({os_name} {arch}; "
        f"Python/{python_version}) (+{PROJECT_URL})"
    )

