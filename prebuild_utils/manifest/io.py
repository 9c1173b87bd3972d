"""Manifest loading and build configuration resolution.

This module handles:
- Reading the repository manifest file
- Merging shared manifest fields with a preset block
- Deriving the preset identifier from a BuildConfig

Merge precedence (preset block vs. manifest top level):

    ==============================  ==================================
    Field                           Source
    ==============================  ==================================
    root_dir                        loader argument, always
    paths (license_files,           manifest top level, always
    header_dir)
    name, version, namespace        preset block if set, else top level
    everything else                 preset block
    ==============================  ==================================
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from prebuild_utils.manifest.schema import BuildConfig, ManifestSchema

logger = logging.getLogger(__name__)

BUILD_MANIFEST_FILE = "manifest.json"

# Fields a preset block may override at the top level
OVERRIDABLE_TOP_LEVEL_FIELDS = ("name", "version", "namespace")


class ManifestNotFoundError(Exception):
    """Raised when the repository manifest file does not exist."""

    def __init__(self, path: Path, code: str = "manifest_not_found") -> None:
        super().__init__(f"Manifest file not found: {path}")
        self.path = path
        self.code = code


class ManifestParseError(Exception):
    """Raised when the manifest or a preset block is invalid."""

    def __init__(self, message: str, code: str = "manifest_invalid") -> None:
        super().__init__(message)
        self.code = code


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed JSON content as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def get_manifest_path(root_dir: Path) -> Path:
    """Return the manifest path for a repository root."""
    return Path(root_dir) / BUILD_MANIFEST_FILE


def load_manifest(root_dir: Path) -> ManifestSchema:
    """Load and validate the repository manifest.

    Args:
        root_dir: Repository root directory.

    Returns:
        Validated ManifestSchema instance.

    Raises:
        ManifestNotFoundError: If the manifest file is absent.
        ManifestParseError: If the file is not valid JSON or fails validation.
    """
    path = get_manifest_path(root_dir)
    if not path.is_file():
        raise ManifestNotFoundError(path)

    try:
        data = load_json(path)
        return ManifestSchema.model_validate(data)
    except ValidationError as e:
        raise ManifestParseError(f"Invalid manifest {path}: {e}") from e
    except (json.JSONDecodeError, ValueError) as e:
        raise ManifestParseError(f"Failed to parse manifest {path}: {e}") from e


def merge_build_config(
    root_dir: Path,
    manifest: ManifestSchema,
    preset_block: dict[str, Any],
) -> dict[str, Any]:
    """Merge manifest top-level fields with one preset block.

    The merge is shallow; see the module docstring for precedence.

    Args:
        root_dir: Repository root directory.
        manifest: Validated manifest.
        preset_block: Raw preset configuration mapping.

    Returns:
        Mapping suitable for BuildConfig validation.
    """
    merged: dict[str, Any] = {
        key: value
        for key, value in preset_block.items()
        if key not in ("paths", "root_dir")
    }

    for key in OVERRIDABLE_TOP_LEVEL_FIELDS:
        if key not in merged:
            merged[key] = getattr(manifest, key)

    merged["root_dir"] = Path(root_dir)
    merged["paths"] = {
        "license_files": list(manifest.license_files),
        "header_dir": manifest.header_dir,
    }
    return merged


def get_preset(config: BuildConfig) -> str:
    """Get the preset identifier for a build configuration.

    The preset selects the CMake configure preset and names the
    per-preset output directories.

    Args:
        config: Build configuration.

    Returns:
        Preset identifier "{os}-{arch}-{build_type}".
    """
    return f"{config.platform.os}-{config.platform.arch}-{config.code_gen.build_type}"


def load_build_config(root_dir: Path, preset_name: str) -> BuildConfig | None:
    """Load the build configuration for a preset.

    Args:
        root_dir: Repository root directory.
        preset_name: Key of the preset block in the manifest's configs map.

    Returns:
        Resolved BuildConfig, or None if the manifest has no such preset.

    Raises:
        ManifestNotFoundError: If the manifest file is absent.
        ManifestParseError: If the manifest or the preset block is invalid.
    """
    manifest = load_manifest(root_dir)

    preset_block = manifest.configs.get(preset_name)
    if preset_block is None:
        logger.debug("Preset %s not found in manifest", preset_name)
        return None

    merged = merge_build_config(root_dir, manifest, preset_block)
    try:
        config = BuildConfig.model_validate(merged)
    except ValidationError as e:
        raise ManifestParseError(f"Invalid config '{preset_name}': {e}") from e

    derived = get_preset(config)
    if derived != preset_name:
        logger.warning(
            "Config key %s does not match derived preset %s; using %s",
            preset_name,
            derived,
            derived,
        )
    return config


def describe_build_config(config: BuildConfig) -> dict[str, str]:
    """Summarize a build configuration for display.

    Args:
        config: Build configuration.

    Returns:
        Ordered mapping of label to value.
    """
    summary = {
        "Package": f"{config.name}({config.version})",
        "Preset": get_preset(config),
        "C Compiler": config.compiler.c,
        "C++ Compiler": config.compiler.cpp,
        "Stdlib": config.runtime.stdlib,
        "C++ Std": config.language.cpp_std,
        "Optimization": config.code_gen.optimization,
        "Link Type": config.code_gen.link_type,
    }
    if config.platform.os == "macos":
        summary["macOS Deployment Target"] = str(config.deployment_target)
    elif config.platform.os == "ios":
        summary["iOS Deployment Target"] = str(config.deployment_target)
    return summary


__all__ = [
    "BUILD_MANIFEST_FILE",
    "ManifestNotFoundError",
    "ManifestParseError",
    "describe_build_config",
    "get_manifest_path",
    "get_preset",
    "load_build_config",
    "load_json",
    "load_manifest",
    "merge_build_config",
]
