"""Shared type definitions for prebuild_utils.

This module contains enums and dataclasses shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass
from enum import Enum


class OSType(str, Enum):
    """Target operating system."""

    MACOS = "macos"
    IOS = "ios"
    WINDOWS = "windows"
    LINUX = "linux"


class ArchType(str, Enum):
    """Target CPU architecture."""

    ARM64 = "arm64"
    X86_64 = "x86_64"


class BuildType(str, Enum):
    """CMake build type."""

    RELEASE = "Release"
    DEBUG = "Debug"


class LinkType(str, Enum):
    """Library link type."""

    STATIC = "Static"
    SHARED = "Shared"


class OptimizationLevel(str, Enum):
    """Compiler optimization flag."""

    O0 = "-O0"
    O1 = "-O1"
    O2 = "-O2"
    O3 = "-O3"
    OS = "-Os"
    OZ = "-Oz"


class Stdlib(str, Enum):
    """C++ standard library implementation."""

    LIBCXX = "libc++"
    LIBSTDCXX = "libstdc++"


# Operating systems whose runtime settings carry a deployment target
APPLE_OS_TYPES = frozenset({OSType.MACOS.value, OSType.IOS.value})

# Directories owned by the pipeline under the repository root
WORKSPACE_DIRS = ("build", "projects", "bundles")


@dataclass
class DeployResult:
    """Result of a bundle upload."""

    bucket: str
    key: str
    source: str
    cache_control: str

    @property
    def url(self) -> str:
        """Return the s3:// URL of the uploaded object."""
        return f"s3://{self.bucket}/{self.key}"


__all__ = [
    "APPLE_OS_TYPES",
    "WORKSPACE_DIRS",
    "ArchType",
    "BuildType",
    "DeployResult",
    "LinkType",
    "OSType",
    "OptimizationLevel",
    "Stdlib",
]
