"""Local bundle addressing.

Bundles live under bundles/{preset}/ and are named by package, version
and ABI hash, so rebuilding an unchanged ABI reproduces the same name.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from prebuild_utils.manifest.io import get_preset

if TYPE_CHECKING:
    from prebuild_utils.manifest.schema import BuildConfig

BUNDLES_DIR = "bundles"
CONTENTS_DIR = "contents"
BUNDLE_EXTENSION = ".zip"


def get_bundle_dir(config: BuildConfig) -> Path:
    """Return the bundle directory for a config: {root}/bundles/{preset}."""
    return Path(config.root_dir) / BUNDLES_DIR / get_preset(config)


def get_bundle_contents_dir(config: BuildConfig) -> Path:
    """Return the staging directory that is archived into the bundle."""
    return get_bundle_dir(config) / CONTENTS_DIR


def get_bundle_filename(config: BuildConfig, bundle_hash: str) -> str:
    """Return the bundle filename "{name}-{version}-{hash}.zip"."""
    return f"{config.name}-{config.version}-{bundle_hash}{BUNDLE_EXTENSION}"


def get_bundle_path(config: BuildConfig, bundle_hash: str) -> Path:
    """Return the full path of the bundle archive for a config and hash."""
    return get_bundle_dir(config) / get_bundle_filename(config, bundle_hash)


__all__ = [
    "BUNDLES_DIR",
    "BUNDLE_EXTENSION",
    "CONTENTS_DIR",
    "get_bundle_contents_dir",
    "get_bundle_dir",
    "get_bundle_filename",
    "get_bundle_path",
]
