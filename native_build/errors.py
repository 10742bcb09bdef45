"""Holds exceptions raised by the installer"""

from typing import List, Optional


class InstallError(Exception):
    """Base class for every failure that aborts an install"""


class ConfigurationError(InstallError):
    """Raised when options or the package environment are invalid"""


class UnsupportedPlatformError(InstallError):
    """Raised when the host cannot build the library"""


class StagingError(InstallError):
    """Raised when a file could not be staged into the build tree"""


class ArtifactNotFoundError(InstallError):
    """Raised when the build finished but the library is missing"""


class CommandFailedError(InstallError):
    """Raised when a strict command exits with a non-zero code"""

    def __init__(self, exit_code: int, command: Optional[List[str]] = None):
        super().__init__(f"Command failed with exit code: {exit_code}")
        self.exit_code = exit_code
        self.command = command or []
