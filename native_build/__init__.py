"""
native-build
Installation-time build orchestrator for the LightGBM shared library
Supports Linux, macOS and Windows (Visual Studio, MinGW, MSYS2)
"""

__version__ = "1.0.0"
__supported_platforms__ = ["linux", "macos", "windows"]

from .main import Installer

__all__ = ["Installer", "__version__", "__supported_platforms__"]
