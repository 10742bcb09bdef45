"""
Builder components for generating, building and installing the library
"""

from .command import CommandRunner
from .cmake_builder import CMakeBuilder, BuildPlan
from .orchestrator import InstallOrchestrator, InstallResult

__all__ = [
    "CommandRunner",
    "CMakeBuilder",
    "BuildPlan",
    "InstallOrchestrator",
    "InstallResult"
]
