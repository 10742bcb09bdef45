"""
Configuration management for the installer
"""

import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ConfigurationError

DEFAULT_CONFIG_DIR = Path(__file__).parent


class InstallOptions(BaseModel):
    """User-editable toggles controlling how the library is built"""
    model_config = ConfigDict(extra="forbid")

    use_gpu: bool = False
    """Build with GPU support"""
    use_mingw: bool = False
    """Build with the MinGW toolchain instead of Visual Studio (Windows only)"""
    use_msys2: bool = False
    """Build with the MSYS2 toolchain instead of Visual Studio (Windows only)"""
    make_args: List[str] = Field(default_factory=list)
    """Extra arguments passed to the build tool"""
    cmake_args: List[str] = Field(default_factory=list)
    """Extra arguments passed to CMake, usually injected by a wrapper script"""

    @property
    def uses_visual_studio(self) -> bool:
        """Visual Studio is used unless a makefile toolchain was requested"""
        return not (self.use_mingw or self.use_msys2)

    def merge(self, **overrides: Any) -> "InstallOptions":
        """Return a copy with every override that is not None applied"""
        update = {key: value for key, value in overrides.items() if value is not None}
        unknown = set(update) - set(type(self).model_fields)
        if unknown:
            raise ConfigurationError(f"Unknown install options: {', '.join(sorted(unknown))}")
        return self.model_copy(update=update)

    def check_toggles(self) -> None:
        """Reject toggle combinations that cannot be built"""
        if self.use_mingw and self.use_msys2:
            raise ConfigurationError("Cannot use both MinGW and MSYS2. Please choose only one.")


class ConfigLoader:
    """Loads and manages installer configuration"""

    CONFIG_FILE = "install.yaml"

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration loader

        Args:
            config_dir: Directory containing install.yaml (defaults to the
                copy shipped with the package)
        """
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

        config_file = self.config_dir / self.CONFIG_FILE
        if not config_file.exists():
            raise FileNotFoundError(f"Install config not found: {config_file}")

        with open(config_file, 'r') as f:
            try:
                self.install_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Could not parse {config_file}: {e}") from e

        if not isinstance(self.install_config, dict):
            raise ConfigurationError(f"{config_file} must contain a mapping")

    def get_options(self) -> InstallOptions:
        """Get the default install options"""
        try:
            return InstallOptions(**(self.install_config.get("options") or {}))
        except ValueError as e:
            raise ConfigurationError(f"Invalid options in {self.CONFIG_FILE}: {e}") from e

    def get_library_config(self) -> Dict[str, Any]:
        """Get the description of the library being built"""
        library = {
            "name": "lightgbm",
            "target": "_lightgbm",
            "symbols_file": "symbols.rds",
            "cmake_lists": "bin/CMakeLists.txt",
            "msvc_def_script": "make-r-def.R",
            "cmake_defines": [],
        }
        library.update(self.install_config.get("library") or {})
        return library

    def get_environment_config(self) -> Dict[str, Any]:
        """Get the names of the variables the package manager sets"""
        environment = {
            "package_source": "R_PACKAGE_SOURCE",
            "package_dir": "R_PACKAGE_DIR",
            "shlib_ext": "SHLIB_EXT",
            "arch_suffix": "R_ARCH",
            "runtime_version": "R_VERSION",
            "runtime_home": "R_HOME",
            "runtime_command": ["R", "--version"],
            "pointer_size_command": ["Rscript", "-e", "cat(.Machine$sizeof.pointer)"],
        }
        environment.update(self.install_config.get("environment") or {})
        return environment

    def get_visual_studio_generators(self) -> List[str]:
        """Get Visual Studio generators in the order they should be tried"""
        return list(self.install_config.get("visual_studio_generators") or [])

    def get_windows_toolchains(self) -> List[str]:
        """Get names of the makefile toolchains available on Windows"""
        return list((self.install_config.get("windows_toolchains") or {}).keys())

    def get_windows_toolchain(self, name: str) -> Dict[str, str]:
        """
        Get configuration for a Windows makefile toolchain

        Args:
            name: Toolchain name (MinGW, MSYS2)

        Returns:
            Dictionary with build_tool and makefile_generator
        """
        toolchains = self.install_config.get("windows_toolchains") or {}
        if name not in toolchains:
            raise ConfigurationError(f"Unknown Windows toolchain: {name}")
        toolchain = toolchains[name] or {}
        missing = [key for key in ("build_tool", "makefile_generator") if key not in toolchain]
        if missing:
            raise ConfigurationError(f"Windows toolchain {name} is missing: {', '.join(missing)}")
        return toolchain

    def get_option(self, key: str, default: Any = None) -> Any:
        """
        Get a build option

        Args:
            key: Option key
            default: Default value if not found

        Returns:
            Option value
        """
        options = self.install_config.get("build_options") or {}
        return options.get(key, default)


__all__ = ["ConfigLoader", "InstallOptions", "DEFAULT_CONFIG_DIR"]
