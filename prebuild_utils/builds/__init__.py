"""Build module.

This module handles:
- ABI descriptor parsing, fingerprinting and hashing
- Running CMake configure and build for a preset
"""

from prebuild_utils.builds.abi import (
    AbiDescriptor,
    AbiDescriptorMissingError,
    AbiParseError,
    abi_fingerprint,
    abi_hash,
    abi_short_hash,
    parse_abi_descriptor,
)

__all__ = [
    "AbiDescriptor",
    "AbiDescriptorMissingError",
    "AbiParseError",
    "abi_fingerprint",
    "abi_hash",
    "abi_short_hash",
    "parse_abi_descriptor",
]

# Access the runner and stage via prebuild_utils.builds.runner / .service
