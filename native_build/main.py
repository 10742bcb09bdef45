#!/usr/bin/env python3
"""
Main entry point for the installer
Builds the LightGBM shared library and places it where the package manager expects it
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, List, Dict, Any, Mapping

from .builders import CommandRunner, CMakeBuilder, InstallOrchestrator, InstallResult
from .config import ConfigLoader, InstallOptions
from .errors import InstallError
from .paths import InstallPaths
from .platform import PlatformDetector
from .utils import Logger


class Installer:
    """Main installer class"""

    SUPPORTED_PLATFORMS = ["linux", "macos", "windows"]

    def __init__(self,
                 config_dir: Optional[Path] = None,
                 platform: str = "auto",
                 verbose: bool = False,
                 dry_run: bool = False,
                 log_file: Optional[str] = None,
                 keep_build_dir: bool = False,
                 env: Optional[Mapping[str, str]] = None,
                 path_overrides: Optional[Dict[str, Optional[str]]] = None,
                 **option_overrides: Any):
        """
        Initialize the installer

        Args:
            config_dir: Directory holding install.yaml
            platform: Target platform (auto, linux, macos, windows)
            verbose: Enable verbose output
            dry_run: Log commands without running them
            log_file: Optional log file path
            keep_build_dir: Leave the build directory in place afterwards
            env: Environment to read package variables from (defaults to os.environ)
            path_overrides: Values that win over the environment
                (package_source, package_dir, shlib_ext, arch_suffix)
            **option_overrides: Overrides for InstallOptions fields
        """
        self.verbose = verbose
        self.dry_run = dry_run
        self.env = os.environ if env is None else env
        self.path_overrides = path_overrides or {}

        self.logger = Logger(verbose=verbose, log_file=log_file)

        self.detector = PlatformDetector()
        self.platform_info = self.detector.detect()
        if platform != "auto":
            if platform not in self.SUPPORTED_PLATFORMS:
                raise ValueError(f"Unsupported platform: {platform}. "
                                 f"Supported: {', '.join(self.SUPPORTED_PLATFORMS)}")
            self.platform_info["platform"] = platform
            self.platform_info["windows"] = platform == "windows"
        self.platform = self.platform_info["platform"]

        self.logger.debug(f"Platform info: {self.platform_info}")

        self.config = ConfigLoader(config_dir)
        self.options: InstallOptions = self.config.get_options().merge(**option_overrides)
        self.cleanup = (self.config.get_option("cleanup_build_dir", True)
                        and not keep_build_dir)

        self.runner = CommandRunner(logger=self.logger, dry_run=dry_run)

    def resolve_paths(self) -> InstallPaths:
        """Read install directories from the environment"""
        return InstallPaths.from_environment(
            self.config.get_environment_config(),
            default_shlib_ext=self.detector.default_shlib_ext(self.platform),
            env=self.env,
            build_dir_name=self.config.get_option("build_dir", "build"),
            **self.path_overrides,
        )

    def _runtime_home(self, env_config: Dict[str, Any]) -> Optional[str]:
        var_name = env_config.get("runtime_home")
        return self.env.get(var_name) if var_name else None

    def detect_runtime_version(self):
        env_config = self.config.get_environment_config()
        var_name = env_config.get("runtime_version")
        return self.detector.detect_runtime_version(
            self.env.get(var_name) if var_name else None,
            command=env_config.get("runtime_command"),
            home=self._runtime_home(env_config),
        )

    def detect_runtime_pointer_bits(self) -> Optional[int]:
        env_config = self.config.get_environment_config()
        return self.detector.detect_runtime_pointer_bits(
            env_config.get("pointer_size_command"),
            home=self._runtime_home(env_config),
        )

    def create_orchestrator(self) -> InstallOrchestrator:
        runtime_bits = self.detect_runtime_pointer_bits()
        if runtime_bits:
            self.platform_info["runtime_pointer_bits"] = runtime_bits
        else:
            self.logger.debug("Could not query the runtime's pointer size, using the host's")
        return InstallOrchestrator(
            options=self.options,
            paths=self.resolve_paths(),
            config=self.config,
            platform_info=self.platform_info,
            runtime_version=self.detect_runtime_version(),
            runner=self.runner,
            logger=self.logger,
            cleanup=self.cleanup,
        )

    def install(self) -> InstallResult:
        """
        Build and install the library

        Returns:
            InstallResult
        """
        self.logger.info(f"Platform: {self.platform} ({self.platform_info.get('machine', '')})")
        return self.create_orchestrator().run()

    def describe_plan(self) -> Dict[str, Any]:
        """Work out what an install would run, without running anything"""
        self.options.check_toggles()
        paths = self.resolve_paths()
        builder = CMakeBuilder(
            options=self.options,
            paths=paths,
            config=self.config,
            runtime_version=self.detect_runtime_version(),
            windows=bool(self.platform_info.get("windows")),
            runner=self.runner,
            logger=self.logger,
        )
        plan: Dict[str, Any] = {
            "platform": self.platform,
            "cmake_args": builder.base_cmake_args(),
            "build_dir": str(paths.build_dir),
            "dest_dir": str(paths.dest_dir),
        }
        if builder.windows:
            toolchain = builder.select_windows_toolchain()
            plan["visual_studio"] = self.options.uses_visual_studio
            plan["windows_toolchain"] = toolchain
            if self.options.uses_visual_studio:
                plan["generators"] = self.config.get_visual_studio_generators()
            plan["fallback_build"] = builder.makefile_plan(
                self.config.get_windows_toolchain(toolchain)["build_tool"]
            ).model_dump(mode="json")
        else:
            plan["build"] = builder.makefile_plan("make").model_dump(mode="json")
        return plan

    def show_plan(self) -> None:
        """Print the install plan"""
        plan = self.describe_plan()
        print(f"\nInstall plan for {plan['platform']}")
        print(f"{'='*50}")
        print(f"CMake arguments: {' '.join(plan['cmake_args'])}")
        print(f"Build directory: {plan['build_dir']}")
        print(f"Destination:     {plan['dest_dir']}")
        if "windows_toolchain" in plan:
            if plan["visual_studio"]:
                print("Visual Studio generators:")
                for generator in plan["generators"]:
                    print(f"  - {generator}")
                print(f"Fallback toolchain: {plan['windows_toolchain']}")
            else:
                print(f"Toolchain: {plan['windows_toolchain']}")
            build = plan["fallback_build"]
        else:
            build = plan["build"]
        print(f"Build command: {build['build_cmd']} {' '.join(build['build_args'])}")

    def show_info(self) -> None:
        """Show installer information"""
        from . import __version__

        print(f"\nnative-build v{__version__}")
        print(f"{'='*50}")
        print(f"Platform: {self.platform} ({self.platform_info.get('machine', '')})")
        print(f"Pointer size: {self.platform_info.get('pointer_bits')}-bit")
        print(f"Config directory: {self.config.config_dir}")

        try:
            paths = self.resolve_paths()
        except InstallError as e:
            print(f"Paths: not resolved ({e})")
        else:
            print(f"Source directory: {paths.source_dir}")
            print(f"Build directory: {paths.build_dir}")
            print(f"Destination: {paths.dest_dir}")
            print(f"Library extension: {paths.shlib_ext}")

        try:
            major, minor = self.detect_runtime_version()
            print(f"Runtime version: {major}.{minor}")
        except InstallError:
            print("Runtime version: unknown")

        print("\nOptions:")
        for key, value in self.options.model_dump().items():
            print(f"  - {key:12} {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="native-build",
        description="Build the LightGBM shared library and install it into a package",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s install                   # Build and install using the environment
  %(prog)s install --use-gpu         # Build with GPU support
  %(prog)s install --use-msys2       # Use MSYS2 instead of Visual Studio (Windows)
  %(prog)s plan                      # Show what would be run
  %(prog)s info                      # Show system information
        """
    )

    parser.add_argument(
        "command",
        nargs="?",
        default="install",
        choices=["install", "plan", "info"],
        help="Command to execute (default: install)"
    )

    toggles = parser.add_argument_group("build options")
    toggles.add_argument("--use-gpu", action="store_const", const=True,
                         help="Build with GPU support")
    toggles.add_argument("--use-mingw", action="store_const", const=True,
                         help="Build with MinGW instead of Visual Studio (Windows)")
    toggles.add_argument("--use-msys2", action="store_const", const=True,
                         help="Build with MSYS2 instead of Visual Studio (Windows)")
    toggles.add_argument("--make-arg", dest="make_args", action="append",
                         help="Extra argument for the build tool (can be used multiple times)")
    toggles.add_argument("--cmake-arg", dest="cmake_args", action="append",
                         help="Extra argument for CMake (can be used multiple times)")

    paths = parser.add_argument_group("paths")
    paths.add_argument("--package-source", help="Package source directory")
    paths.add_argument("--package-dir", help="Package install directory")
    paths.add_argument("--shlib-ext", help="Shared library extension")
    paths.add_argument("--arch-suffix", help="Sub-architecture suffix for the libs directory")
    paths.add_argument("--config-dir", type=Path, help="Directory holding install.yaml")

    parser.add_argument(
        "--platform",
        choices=["auto", "linux", "macos", "windows"],
        default="auto",
        help="Target platform (default: auto-detect)"
    )

    parser.add_argument(
        "--keep-build-dir",
        action="store_true",
        help="Do not remove the build directory after installing"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log commands without running them"
    )

    parser.add_argument(
        "--log-file",
        help="Also write a full debug log to this file"
    )

    return parser


def main(argv: Optional[List[str]] = None):
    """Command-line interface"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        installer = Installer(
            config_dir=args.config_dir,
            platform=args.platform,
            verbose=args.verbose,
            dry_run=args.dry_run,
            log_file=args.log_file,
            keep_build_dir=args.keep_build_dir,
            path_overrides={
                "package_source": args.package_source,
                "package_dir": args.package_dir,
                "shlib_ext": args.shlib_ext,
                "arch_suffix": args.arch_suffix,
            },
            use_gpu=args.use_gpu,
            use_mingw=args.use_mingw,
            use_msys2=args.use_msys2,
            make_args=args.make_args,
            cmake_args=args.cmake_args,
        )
    except (InstallError, ValueError, OSError) as e:
        print(f"Error initializing installer: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "install":
            installer.install()
        elif args.command == "plan":
            installer.show_plan()
        elif args.command == "info":
            installer.show_info()
    except KeyboardInterrupt:
        print("\nInstall interrupted by user", file=sys.stderr)
        sys.exit(130)
    except InstallError as e:
        installer.logger.error(str(e))
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
