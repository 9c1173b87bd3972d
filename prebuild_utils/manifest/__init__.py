"""Package manifest module.

This module handles:
- Manifest and build configuration schema
- Loading a preset's configuration from the repository manifest
- Preset identifier derivation
"""

from prebuild_utils.manifest.io import (
    ManifestNotFoundError,
    ManifestParseError,
    get_preset,
    load_build_config,
)
from prebuild_utils.manifest.schema import BuildConfig

__all__ = [
    "BuildConfig",
    "ManifestNotFoundError",
    "ManifestParseError",
    "get_preset",
    "load_build_config",
]
