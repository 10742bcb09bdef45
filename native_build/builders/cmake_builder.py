"""
CMake builder implementation
"""

from pathlib import Path
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..config import ConfigLoader, InstallOptions
from ..paths import InstallPaths
from ..platform import runtime_version_number
from .command import CommandRunner


# Always passed first; the staged CMakeLists.txt keys its runtime build on it
BUILD_FOR_R_DEFINE = "-D__BUILD_FOR_R=ON"


class BuildPlan(BaseModel):
    """How to compile the library once build files exist"""

    build_cmd: str
    build_args: List[str] = Field(default_factory=list)
    lib_folder: Path
    """Directory the build tool writes the library into"""
    generator: Optional[str] = None
    """CMake generator the build files were created with (None for the default)"""


class CMakeBuilder:
    """Generates build files with CMake and drives the build tool"""

    def __init__(self,
                 options: InstallOptions,
                 paths: InstallPaths,
                 config: ConfigLoader,
                 runtime_version: Tuple[str, str],
                 windows: bool,
                 runner: CommandRunner,
                 logger: Any,
                 cmake: str = "cmake"):
        """
        Initialize CMake builder

        Args:
            options: Install options
            paths: Resolved install paths
            config: Configuration loader
            runtime_version: (major, minor) of the runtime being installed into,
                minor keeping the patch level ("4", "3.1")
            windows: True when building on Windows
            runner: Command runner
            logger: Logger instance
            cmake: CMake executable
        """
        self.options = options
        self.paths = paths
        self.config = config
        self.runtime_version = runtime_version
        self.windows = windows
        self.runner = runner
        self.logger = logger
        self.cmake = cmake
        self.library = config.get_library_config()

    @property
    def target(self) -> str:
        return self.library["target"]

    def base_cmake_args(self) -> List[str]:
        """Arguments every CMake invocation starts with"""
        major, minor = self.runtime_version
        args = [BUILD_FOR_R_DEFINE]
        args.extend(d for d in self.library.get("cmake_defines") or [] if d != BUILD_FOR_R_DEFINE)
        # Lets FindLibR locate the runtime's library
        args.append(f"-DCMAKE_R_VERSION={major}.{minor}")
        # Keep the suffix in line with how the runtime was configured
        args.append(f"-DCMAKE_SHARED_LIBRARY_SUFFIX_CXX={self.paths.shlib_ext}")
        args.extend(self.options.cmake_args)
        if self.options.use_gpu:
            args.append("-DUSE_GPU=ON")
        return args

    def select_windows_toolchain(self) -> str:
        """
        Pick the makefile toolchain used on Windows

        Explicit toggles win. Otherwise runtimes from 4.0 on ship MSYS2 and
        older ones MinGW; this is also what a failed Visual Studio attempt
        falls back to.
        """
        if self.options.use_mingw:
            return "MinGW"
        if self.options.use_msys2:
            return "MSYS2"
        min_version = float(self.config.get_option("msys2_min_runtime_version", 4.0))
        if runtime_version_number(*self.runtime_version) >= min_version:
            return "MSYS2"
        return "MinGW"

    def makefile_plan(self, build_tool: str) -> BuildPlan:
        return BuildPlan(
            build_cmd=build_tool,
            build_args=[self.target] + list(self.options.make_args),
            lib_folder=self.paths.source_dir,
        )

    def generate_visual_studio(self, cmake_args: List[str]) -> Optional[str]:
        """
        Try Visual Studio generators newest first

        Args:
            cmake_args: Base CMake arguments

        Returns:
            Name of the first generator that worked, or None
        """
        cmake_cache = self.paths.build_dir / "CMakeCache.txt"
        for generator in self.config.get_visual_studio_generators():
            self.logger.info(f"Trying '{generator}'")
            # A cache left by a failed attempt pins the old generator
            if cmake_cache.exists():
                cmake_cache.unlink()
            vs_args = cmake_args + ["-G", generator, "-A", "x64", ".."]
            exit_code = self.runner.run(self.cmake, vs_args, cwd=self.paths.build_dir, strict=False)
            if exit_code == 0:
                self.logger.success(f"Successfully created build files for '{generator}'")
                return generator
        return None

    def _generate_makefiles(self, cmake_args: List[str], toolchain: str) -> BuildPlan:
        tools = self.config.get_windows_toolchain(toolchain)
        generator = tools["makefile_generator"]
        args = cmake_args + ["-G", generator, ".."]
        # The first run may fail on sh.exe being in PATH; the second succeeds
        self.runner.run(self.cmake, args, cwd=self.paths.build_dir, strict=False)
        self.runner.run(self.cmake, args, cwd=self.paths.build_dir)
        plan = self.makefile_plan(tools["build_tool"])
        plan.generator = generator
        return plan

    def generate(self) -> BuildPlan:
        """
        Generate build files for the host toolchain

        Returns:
            BuildPlan for the build step
        """
        cmake_args = self.base_cmake_args()

        if not self.windows:
            self.runner.run(self.cmake, cmake_args + [".."], cwd=self.paths.build_dir)
            return self.makefile_plan("make")

        toolchain = self.select_windows_toolchain()
        if not self.options.uses_visual_studio:
            self.logger.info(f"Trying to build with {toolchain}")
            return self._generate_makefiles(cmake_args, toolchain)

        generator = self.generate_visual_studio(cmake_args)
        if generator:
            return BuildPlan(
                build_cmd=self.cmake,
                build_args=["--build", ".", "--target", self.target, "--config", "Release"],
                lib_folder=self.paths.source_dir / "Release",
                generator=generator,
            )

        self.logger.warning(f"Building with Visual Studio failed. Attempting with {toolchain}")
        return self._generate_makefiles(cmake_args, toolchain)

    def build(self, plan: BuildPlan) -> None:
        """Run the build tool"""
        self.logger.info(f"Building {self.library['name']}{self.paths.shlib_ext}")
        self.runner.run(plan.build_cmd, plan.build_args, cwd=self.paths.build_dir)


__all__ = ["CMakeBuilder", "BuildPlan", "BUILD_FOR_R_DEFINE"]
