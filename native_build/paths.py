"""Resolves the directories an install works with"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from .errors import ConfigurationError


class InstallPaths(BaseModel):
    """Directories and file names taken from the package manager's environment"""

    package_source: Path
    """Root of the unpacked package sources"""
    package_dir: Path
    """Directory the package is being installed into"""
    shlib_ext: str
    """Shared library extension, including the leading dot"""
    arch_suffix: str = ""
    """Sub-architecture suffix appended to the libs directory"""
    build_dir_name: str = "build"

    @property
    def source_dir(self) -> Path:
        return self.package_source / "src"

    @property
    def build_dir(self) -> Path:
        return self.source_dir / self.build_dir_name

    @property
    def inst_dir(self) -> Path:
        return self.package_source / "inst"

    @property
    def dest_dir(self) -> Path:
        return self.package_dir / f"libs{self.arch_suffix}"

    @classmethod
    def from_environment(cls,
                         env_config: Dict[str, Any],
                         default_shlib_ext: str,
                         env: Optional[Mapping[str, str]] = None,
                         build_dir_name: str = "build",
                         **overrides: Optional[str]) -> "InstallPaths":
        """
        Build paths from environment variables

        Args:
            env_config: Names of the variables to read (see install.yaml)
            default_shlib_ext: Extension used when none is set
            env: Environment to read from (defaults to os.environ)
            build_dir_name: Name of the temporary build directory
            **overrides: Values that win over the environment, keyed like
                env_config (package_source, package_dir, shlib_ext, arch_suffix)

        Returns:
            InstallPaths instance
        """
        env = os.environ if env is None else env

        def lookup(key: str) -> Optional[str]:
            value = overrides.get(key)
            if value is not None:
                return str(value)
            var_name = env_config.get(key)
            return env.get(var_name) if var_name else None

        package_source = lookup("package_source")
        if not package_source:
            raise ConfigurationError(
                f"Package source directory not set (expected ${env_config.get('package_source')})"
            )
        package_dir = lookup("package_dir")
        if not package_dir:
            raise ConfigurationError(
                f"Package install directory not set (expected ${env_config.get('package_dir')})"
            )

        shlib_ext = lookup("shlib_ext") or default_shlib_ext
        if not shlib_ext.startswith("."):
            shlib_ext = "." + shlib_ext

        return cls(
            package_source=Path(package_source),
            package_dir=Path(package_dir),
            shlib_ext=shlib_ext,
            arch_suffix=lookup("arch_suffix") or "",
            build_dir_name=build_dir_name,
        )


__all__ = ["InstallPaths"]
