import sys
from pathlib import Path
from typing import Callable, List, Optional

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from native_build.builders.command import CommandRunner
from native_build.config import ConfigLoader
from native_build.paths import InstallPaths
from native_build.utils import Logger


class RecordingRunner(CommandRunner):
    """CommandRunner that records calls instead of spawning processes.

    ``responder`` gets the full command list and working directory and returns
    the exit code to report; it may also create files to imitate a build.
    """

    def __init__(self, logger, responder: Optional[Callable] = None, dry_run: bool = False):
        super().__init__(logger=logger, dry_run=dry_run)
        self.responder = responder
        self.calls: List[dict] = []

    def run(self, cmd, args, cwd=None, strict=True):
        self.calls.append({"cmd": cmd, "args": list(args), "cwd": cwd, "strict": strict})
        return super().run(cmd, args, cwd=cwd, strict=strict)

    def _execute(self, full_cmd, cwd):
        if self.responder is None:
            return 0
        return self.responder(full_cmd, cwd)

    @property
    def commands(self) -> List[List[str]]:
        return [[c["cmd"]] + c["args"] for c in self.calls]


@pytest.fixture
def logger():
    return Logger(verbose=True)


@pytest.fixture
def config():
    return ConfigLoader()


@pytest.fixture
def package_tree(tmp_path):
    """A package source tree laid out the way the package manager unpacks it"""
    source = tmp_path / "pkg"
    (source / "src").mkdir(parents=True)
    (source / "inst" / "bin").mkdir(parents=True)
    (source / "inst" / "bin" / "CMakeLists.txt").write_text("project(lightgbm)\n")
    (source / "inst" / "make-r-def.R").write_text("# def script\n")
    return source


@pytest.fixture
def install_paths(package_tree, tmp_path):
    return InstallPaths(
        package_source=package_tree,
        package_dir=tmp_path / "site-library" / "lightgbm",
        shlib_ext=".so",
    )


@pytest.fixture
def recording_runner(logger):
    def factory(responder=None, dry_run=False):
        return RecordingRunner(logger, responder=responder, dry_run=dry_run)
    return factory
