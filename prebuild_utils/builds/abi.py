"""ABI descriptor parsing, fingerprinting and hashing.

This module handles:
- Parsing the ABI descriptor CMake writes to projects/{preset}/abi.json
- The canonical fingerprint string of an ABI
- The ABI hash that names bundles and remote objects

The fingerprint is an explicit "|"-joined string rather than a hash of
the model so that it can be reproduced by other tools and read in logs.
The triple is informational and does not take part in the fingerprint.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from prebuild_utils.manifest.io import get_preset

if TYPE_CHECKING:
    from prebuild_utils.manifest.schema import BuildConfig

logger = logging.getLogger(__name__)

ABI_DESCRIPTOR_FILE = "abi.json"
FINGERPRINT_SEPARATOR = "|"
DEFAULT_SHORT_HASH_LENGTH = 8


class AbiParseError(Exception):
    """Raised when an ABI descriptor cannot be parsed."""

    def __init__(self, message: str, path: Path, code: str = "abi_invalid") -> None:
        super().__init__(message)
        self.path = path
        self.code = code


class AbiDescriptorMissingError(AbiParseError):
    """Raised when the ABI descriptor file does not exist.

    This usually means the build stage has not been run for the preset.
    """

    def __init__(self, path: Path, code: str = "abi_missing") -> None:
        super().__init__(
            f"ABI descriptor not found: {path} (run the build first)",
            path=path,
            code=code,
        )


class AbiDescriptor(BaseModel):
    """Binary compatibility surface of a build.

    Attributes:
        triple: Display triple (e.g. macos-arm64-clang17).
        os: Operating system.
        arch: CPU architecture.
        compiler_family: Compiler family (e.g. clang, gcc, msvc).
        compiler_frontend_major: Major version of the compiler frontend.
        build_type: Build type (Debug, Release).
        stdlib: C++ standard library (e.g. libc++).
        cpp_std: C++ standard revision (e.g. 20).
    """

    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True)

    triple: str
    os: str
    arch: str
    compiler_family: str = Field(alias="compilerFamily")
    compiler_frontend_major: int = Field(alias="compilerFrontendMajor")
    build_type: str = Field(alias="buildType")
    stdlib: str
    cpp_std: int = Field(alias="cppStd")


def abi_descriptor_path(config: BuildConfig) -> Path:
    """Return the ABI descriptor location for a build configuration.

    Args:
        config: Build configuration.

    Returns:
        Path to projects/{preset}/abi.json under the repository root.
    """
    return Path(config.root_dir) / "projects" / get_preset(config) / ABI_DESCRIPTOR_FILE


def parse_abi_descriptor(path: Path) -> AbiDescriptor:
    """Parse an ABI descriptor file.

    Args:
        path: Path to the ABI JSON file.

    Returns:
        Parsed AbiDescriptor.

    Raises:
        AbiDescriptorMissingError: If the file does not exist.
        AbiParseError: If the file is not valid JSON or fields are missing
            or malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise AbiDescriptorMissingError(path)

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise AbiParseError(f"Invalid JSON in {path}: {e}", path=path) from e

    if not isinstance(data, dict):
        raise AbiParseError(
            f"Expected a JSON object in {path}, got {type(data).__name__}",
            path=path,
        )

    try:
        return AbiDescriptor.model_validate(data)
    except ValidationError as e:
        raise AbiParseError(f"Invalid ABI descriptor {path}: {e}", path=path) from e


def abi_fingerprint(descriptor: AbiDescriptor) -> str:
    """Compute the canonical fingerprint of an ABI.

    Field order is fixed; values are used verbatim.

    Args:
        descriptor: ABI descriptor.

    Returns:
        "os|arch|compilerFamily|compilerFrontendMajor|buildType|stdlib|cppStd".
    """
    return FINGERPRINT_SEPARATOR.join(
        str(part)
        for part in (
            descriptor.os,
            descriptor.arch,
            descriptor.compiler_family,
            descriptor.compiler_frontend_major,
            descriptor.build_type,
            descriptor.stdlib,
            descriptor.cpp_std,
        )
    )


def abi_hash(descriptor: AbiDescriptor) -> str:
    """Compute the ABI hash.

    Args:
        descriptor: ABI descriptor.

    Returns:
        SHA-1 hex digest (lowercase) of the fingerprint.
    """
    fingerprint = abi_fingerprint(descriptor)
    return hashlib.sha1(fingerprint.encode("utf-8")).hexdigest()


def abi_short_hash(
    descriptor: AbiDescriptor,
    length: int = DEFAULT_SHORT_HASH_LENGTH,
) -> str:
    """Return the first `length` characters of the ABI hash."""
    return abi_hash(descriptor)[:length]


def log_abi_info(descriptor: AbiDescriptor) -> None:
    """Log the triple, fingerprint and hash of an ABI."""
    logger.info("ABI")
    logger.info("> Triple: %s", descriptor.triple)
    logger.info("> Fingerprint: %s", abi_fingerprint(descriptor))
    logger.info("> Hash: %s", abi_hash(descriptor))


__all__ = [
    "ABI_DESCRIPTOR_FILE",
    "DEFAULT_SHORT_HASH_LENGTH",
    "FINGERPRINT_SEPARATOR",
    "AbiDescriptor",
    "AbiDescriptorMissingError",
    "AbiParseError",
    "abi_descriptor_path",
    "abi_fingerprint",
    "abi_hash",
    "abi_short_hash",
    "log_abi_info",
    "parse_abi_descriptor",
]
