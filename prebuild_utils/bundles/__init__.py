"""Bundle module.

This module handles:
- Bundle addressing by preset and ABI hash
- Bundle manifest and CMake package config generation
- Staging and archiving bundle contents
"""

from prebuild_utils.bundles.addressing import (
    get_bundle_dir,
    get_bundle_filename,
    get_bundle_path,
)
from prebuild_utils.bundles.manifest import BundleManifest, generate_manifest

__all__ = [
    "BundleManifest",
    "generate_manifest",
    "get_bundle_dir",
    "get_bundle_filename",
    "get_bundle_path",
]
