"""
Platform detection and configuration
"""

import re
import sys
import struct
import platform
import subprocess
from pathlib import Path
from typing import Dict, Any, List, Optional, Sequence, Tuple

from ..errors import ConfigurationError, UnsupportedPlatformError

# major, then minor with the patch level kept ("4.3.1" -> "4", "3.1")
VERSION_PATTERN = re.compile(r"(\d+)\.(\d+(?:\.\d+)?)")

# Sub-architecture suffixes that name a 32-bit build
THIRTY_TWO_BIT_ARCHES = {"i386", "i486", "i586", "i686", "x86", "32", "win32"}


def runtime_version_number(major: str, minor: str) -> float:
    """
    Collapse a runtime version into the number toolchain defaults are keyed on

    The minor part keeps its patch level, so 4.3.1 gives 4 + 3.1 / 10.
    """
    return float(major) + float(minor) / 10.0


class PlatformDetector:
    """Detects and provides information about the current platform"""

    def detect(self) -> Dict[str, Any]:
        """
        Detect current platform and pointer size

        Returns:
            Dictionary with platform information
        """
        platform_name = self._get_platform_name()
        return {
            "os": platform.system(),
            "platform": platform_name,
            "windows": platform_name == "windows",
            "machine": platform.machine(),
            "pointer_bits": struct.calcsize("P") * 8,
            "python_version": sys.version,
        }

    def _get_platform_name(self) -> str:
        """Get normalized platform name"""
        system = platform.system().lower()

        if system == "linux":
            return "linux"
        elif system == "windows":
            return "windows"
        elif system == "darwin":
            return "macos"
        else:
            return system

    @staticmethod
    def check_pointer_size(bits: int) -> None:
        """Only 64-bit builds are supported"""
        if bits != 64:
            raise UnsupportedPlatformError(
                "LightGBM only supports 64-bit builds, "
                f"but the target runtime uses {bits}-bit pointers. "
                "Please check the versions of your runtime and toolchain."
            )

    @staticmethod
    def check_arch_suffix(arch_suffix: str) -> None:
        """Reject installs into a 32-bit sub-architecture"""
        arch = (arch_suffix or "").strip("/\\").lower()
        if arch in THIRTY_TWO_BIT_ARCHES:
            raise UnsupportedPlatformError(
                f"LightGBM only supports 64-bit builds, but the target sub-architecture is '{arch}'."
            )

    @staticmethod
    def default_shlib_ext(platform_name: str) -> str:
        """Shared library extension used when the package manager does not say"""
        return ".dll" if platform_name == "windows" else ".so"

    @staticmethod
    def parse_version(text: str) -> Optional[Tuple[str, str]]:
        """
        Pull a version out of a string

        Args:
            text: Anything containing a version, e.g. "4.3.1" or
                "R version 4.3.1 (2023-06-16)"

        Returns:
            (major, minor) strings, minor including the patch level
            ("4", "3.1"), or None if no version was found
        """
        match = VERSION_PATTERN.search(text or "")
        if not match:
            return None
        return match.group(1), match.group(2)

    @staticmethod
    def runtime_commands(command: Sequence[str], home: Optional[str] = None) -> List[List[str]]:
        """
        Commands to try for querying the runtime, best first

        The runtime under the home directory is the one doing the install, so
        it wins over whatever happens to be first on PATH.

        Args:
            command: Command line with a bare executable name
            home: Runtime home directory (R_HOME)

        Returns:
            List of command lines
        """
        candidates = []
        if home:
            exe = Path(home) / "bin" / command[0]
            if exe.exists() or exe.with_name(exe.name + ".exe").exists():
                candidates.append([str(exe)] + list(command[1:]))
        candidates.append(list(command))
        return candidates

    def _query_runtime(self, command: Sequence[str], home: Optional[str]) -> Optional[str]:
        """Run the first runtime command that works and return its output"""
        for cmd in self.runtime_commands(command, home):
            try:
                result = subprocess.run(cmd, capture_output=True, text=True, check=True)
            except (subprocess.CalledProcessError, FileNotFoundError):
                continue
            return result.stdout
        return None

    def detect_runtime_version(self,
                               env_value: Optional[str],
                               command: Optional[Sequence[str]] = None,
                               home: Optional[str] = None) -> Tuple[str, str]:
        """
        Detect the version of the runtime the package is installed into

        Args:
            env_value: Version supplied through the environment, if any
            command: Command that prints the runtime version, tried when
                env_value is missing
            home: Runtime home directory; its bin/ is searched before PATH

        Returns:
            (major, minor) tuple of strings, minor keeping the patch level
        """
        if env_value:
            version = self.parse_version(env_value)
            if version is None:
                raise ConfigurationError(f"Could not parse runtime version: {env_value!r}")
            return version

        if command:
            output = self._query_runtime(command, home)
            if output is None:
                raise ConfigurationError(
                    f"Could not determine runtime version with '{' '.join(command)}'"
                )
            version = self.parse_version(output)
            if version is not None:
                return version

        raise ConfigurationError("Could not determine runtime version")

    def detect_runtime_pointer_bits(self,
                                    command: Optional[Sequence[str]],
                                    home: Optional[str] = None) -> Optional[int]:
        """
        Ask the target runtime for its pointer size

        Args:
            command: Command printing the pointer size in bytes
            home: Runtime home directory; its bin/ is searched before PATH

        Returns:
            Pointer size in bits, or None if the runtime could not be queried
        """
        if not command:
            return None
        output = self._query_runtime(command, home)
        match = re.search(r"\d+", output or "")
        if not match:
            return None
        return int(match.group(0)) * 8


__all__ = ["PlatformDetector", "runtime_version_number"]
