"""
Install orchestrator that runs the build from staging to cleanup
"""

import shutil
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel

from ..config import ConfigLoader, InstallOptions
from ..errors import ArtifactNotFoundError, StagingError
from ..paths import InstallPaths
from ..platform import PlatformDetector
from ..utils import copy_file
from .cmake_builder import BuildPlan, CMakeBuilder
from .command import CommandRunner


class InstallResult(BaseModel):
    """What an install put where"""

    library: Path
    symbols: Optional[Path] = None
    dest_dir: Path
    generator: Optional[str] = None


class InstallOrchestrator:
    """Orchestrates a single install of the shared library"""

    def __init__(self,
                 options: InstallOptions,
                 paths: InstallPaths,
                 config: ConfigLoader,
                 platform_info: Dict[str, Any],
                 runtime_version: Tuple[str, str],
                 runner: CommandRunner,
                 logger: Any,
                 cleanup: bool = True):
        """
        Initialize install orchestrator

        Args:
            options: Install options
            paths: Resolved install paths
            config: Configuration loader
            platform_info: Output of PlatformDetector.detect()
            runtime_version: (major, minor) of the runtime being installed into
            runner: Command runner
            logger: Logger instance
            cleanup: Remove the build directory after a successful install
        """
        self.options = options
        self.paths = paths
        self.config = config
        self.platform_info = platform_info
        self.windows = bool(platform_info.get("windows"))
        self.runner = runner
        self.logger = logger
        self.cleanup_enabled = cleanup
        self.library = config.get_library_config()

        self.builder = CMakeBuilder(
            options=options,
            paths=paths,
            config=config,
            runtime_version=runtime_version,
            windows=self.windows,
            runner=runner,
            logger=logger,
        )

    @property
    def library_filename(self) -> str:
        return f"{self.library['name']}{self.paths.shlib_ext}"

    def check(self) -> None:
        """Fail early on options or hosts that cannot be built"""
        self.options.check_toggles()
        # The runtime's own pointer size wins over the interpreter running us
        bits = (self.platform_info.get("runtime_pointer_bits")
                or self.platform_info.get("pointer_bits", 64))
        PlatformDetector.check_pointer_size(bits)
        PlatformDetector.check_arch_suffix(self.paths.arch_suffix)

    def _copy(self, src: Path, dest: Path, name: str) -> None:
        try:
            copy_file(src, dest)
        except OSError as e:
            raise StagingError(f"Copying {name} failed: {e}") from e

    def _mkdir(self, path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(f"Could not create {path}: {e}") from e

    def stage_cmake_lists(self) -> Path:
        """Move CMakeLists.txt into the source directory"""
        src = self.paths.inst_dir / self.library["cmake_lists"]
        dest = self.paths.source_dir / "CMakeLists.txt"
        self.logger.debug(f"Staging {src} -> {dest}")
        self._copy(src, dest, "CMakeLists.txt")
        return dest

    def prepare_build_dir(self) -> Path:
        """Create the build directory"""
        self._mkdir(self.paths.build_dir)
        return self.paths.build_dir

    def stage_msvc_def_script(self) -> Path:
        """Copy in the script that creates the runtime's .def file for MSVC"""
        script = self.library["msvc_def_script"]
        dest = self.paths.build_dir / script
        self._copy(self.paths.inst_dir / script, dest, script)
        return dest

    def install_artifacts(self, plan: BuildPlan) -> InstallResult:
        """
        Copy the built library into the package's libs directory

        Args:
            plan: The plan the library was built with

        Returns:
            InstallResult describing the copied files
        """
        src = plan.lib_folder / self.library_filename
        dest = self.paths.dest_dir

        if self.runner.dry_run:
            self.logger.info(f"[DRY RUN] Would copy {src} to {dest}")
            return InstallResult(
                library=dest / self.library_filename,
                dest_dir=dest,
                generator=plan.generator,
            )

        self._mkdir(dest)

        if not src.exists():
            raise ArtifactNotFoundError(f"Cannot find {self.library_filename}")

        self.logger.info(f"Found library file: {src} to move to {dest}")
        self._copy(src, dest, self.library_filename)

        symbols = None
        symbols_file = self.library.get("symbols_file")
        if symbols_file:
            symbols_src = self.paths.source_dir / symbols_file
            if symbols_src.exists():
                self._copy(symbols_src, dest, symbols_file)
                symbols = dest / symbols_file

        return InstallResult(
            library=dest / self.library_filename,
            symbols=symbols,
            dest_dir=dest,
            generator=plan.generator,
        )

    def cleanup(self) -> None:
        """Remove the build directory"""
        if self.paths.build_dir.is_dir():
            self.logger.info(f"Removing '{self.paths.build_dir_name}/' directory")
            shutil.rmtree(self.paths.build_dir, ignore_errors=True)

    def run(self) -> InstallResult:
        """
        Run the whole install

        Any failure raises and leaves the build directory in place.

        Returns:
            InstallResult
        """
        self.check()

        self.stage_cmake_lists()
        self.prepare_build_dir()

        if self.windows and self.options.uses_visual_studio:
            self.stage_msvc_def_script()

        plan = self.builder.generate()
        self.builder.build(plan)

        result = self.install_artifacts(plan)

        if self.cleanup_enabled:
            self.cleanup()

        self.logger.success(f"Installed {self.library_filename} into {result.dest_dir}")
        return result


__all__ = ["InstallOrchestrator", "InstallResult"]
