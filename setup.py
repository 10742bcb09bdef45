"""
Setup for native-build, the installer that compiles the LightGBM shared library

Build Requirements (at install time of the target package, not of this tool):
- C++ compiler (gcc/clang on Linux and macOS; Visual Studio, MinGW or MSYS2 on Windows)
- CMake

Usage from a package build:
- Set R_PACKAGE_SOURCE, R_PACKAGE_DIR, SHLIB_EXT and R_ARCH (the package manager does this)
- Run: native-build install
- Toggle GPU support or the Windows toolchain with --use-gpu / --use-mingw / --use-msys2,
  or by editing native_build/config/install.yaml
"""

from pathlib import Path
from setuptools import setup, find_packages

# Read README for long description
readme_path = Path("README.md")
long_description = ""
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="native-build",
    version="1.0.0",
    description="Installation-time build orchestrator for the LightGBM shared library",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["native_build", "native_build.*"]),
    package_data={
        "native_build": [
            "config/install.yaml",
        ]
    },
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "native-build=native_build.main:main",
        ],
    },
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
        "pydantic>=2.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
        "Topic :: Software Development :: Build Tools",
    ],
)
