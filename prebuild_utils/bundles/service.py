"""Bundle stage.

This module provides the bundle API:
- bundle_dependency(): stage contents and archive them into a bundle

The staging directory is removed and recreated on every run. Archives
from earlier runs with a different ABI hash are left in place.

Bundle layout (archive root):
    licenses/         license files
    include/          public headers
    libs/             built libraries for the configured build type
    cmake/            {name}Config.cmake
    manifest.json     BundleManifest
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from prebuild_utils.builds.abi import (
    abi_descriptor_path,
    abi_hash,
    log_abi_info,
    parse_abi_descriptor,
)
from prebuild_utils.bundles.addressing import get_bundle_contents_dir, get_bundle_path
from prebuild_utils.bundles.archive import zip_dir
from prebuild_utils.bundles.cmake import write_cmake_config
from prebuild_utils.bundles.manifest import (
    BUNDLE_MANIFEST_FILE,
    generate_manifest,
    write_manifest,
)

if TYPE_CHECKING:
    from prebuild_utils.manifest.schema import BuildConfig

logger = logging.getLogger(__name__)

LICENSES_DIR = "licenses"
INCLUDE_DIR = "include"
LIBS_DIR = "libs"
CMAKE_DIR = "cmake"

# Archive writer: (source directory, destination path) -> destination path
ArchiveWriter = Callable[[Path, Path], Path]


@dataclass
class BundleResult:
    """Result of a bundle operation.

    Attributes:
        bundle_path: Path to the written archive.
        contents_dir: Staging directory that was archived.
        abi_hash: ABI hash naming the bundle.
    """

    bundle_path: Path
    contents_dir: Path
    abi_hash: str


def get_build_lib_dir(config: BuildConfig) -> Path:
    """Return the directory CMake writes libraries to for the build type."""
    return Path(config.root_dir) / "build" / "lib" / config.code_gen.build_type


def reset_contents_dir(contents_dir: Path) -> Path:
    """Remove any previous staging contents and recreate the directory."""
    shutil.rmtree(contents_dir, ignore_errors=True)
    contents_dir.mkdir(parents=True)
    return contents_dir


def copy_license_files(config: BuildConfig, contents_dir: Path) -> list[Path]:
    """Copy declared license files into licenses/.

    Raises:
        FileNotFoundError: If a declared license file is missing.
    """
    licenses_dir = contents_dir / LICENSES_DIR
    licenses_dir.mkdir(parents=True, exist_ok=True)

    copied: list[Path] = []
    for license_file in config.paths.license_files:
        src = Path(config.root_dir) / license_file
        dest = licenses_dir / Path(license_file).name
        shutil.copyfile(src, dest)
        copied.append(dest)
    return copied


def copy_headers(config: BuildConfig, contents_dir: Path) -> Path:
    """Copy the header tree into include/.

    Raises:
        FileNotFoundError: If the configured header directory is missing.
    """
    dest = contents_dir / INCLUDE_DIR
    if not config.paths.header_dir:
        logger.warning("No header_dir configured; bundle include/ will be empty")
        dest.mkdir(parents=True, exist_ok=True)
        return dest

    src = Path(config.root_dir) / config.paths.header_dir
    if not src.is_dir():
        raise FileNotFoundError(f"Header directory not found: {src}")
    shutil.copytree(src, dest, dirs_exist_ok=True)
    return dest


def copy_libraries(config: BuildConfig, contents_dir: Path) -> Path:
    """Copy built libraries for the configured build type into libs/.

    Raises:
        FileNotFoundError: If the build output directory is missing.
    """
    src = get_build_lib_dir(config)
    if not src.is_dir():
        raise FileNotFoundError(f"Build output directory not found: {src}")
    dest = contents_dir / LIBS_DIR
    shutil.copytree(src, dest, dirs_exist_ok=True)
    return dest


def bundle_dependency(
    config: BuildConfig,
    archive_writer: ArchiveWriter | None = None,
) -> BundleResult:
    """Bundle the dependency for its preset.

    Args:
        config: Build configuration.
        archive_writer: Archive writer; writes a zip if not provided.

    Returns:
        BundleResult describing the written archive.

    Raises:
        AbiDescriptorMissingError: If the build stage has not produced
            the ABI descriptor.
        AbiParseError: If the ABI descriptor is invalid.
        FileNotFoundError: If license files, headers or libraries are missing.
    """
    if archive_writer is None:
        archive_writer = zip_dir

    try:
        abi = parse_abi_descriptor(abi_descriptor_path(config))
        log_abi_info(abi)
        bundle_hash = abi_hash(abi)

        contents_dir = reset_contents_dir(get_bundle_contents_dir(config))

        copy_license_files(config, contents_dir)
        copy_headers(config, contents_dir)
        copy_libraries(config, contents_dir)
        write_cmake_config(
            config, contents_dir / CMAKE_DIR / f"{config.name}Config.cmake"
        )

        write_manifest(
            generate_manifest(config, bundle_hash),
            contents_dir / BUNDLE_MANIFEST_FILE,
        )

        bundle_path = get_bundle_path(config, bundle_hash)
        logger.info("Bundling %s(%s)...", config.name, config.version)
        logger.info("> Destination: %s", bundle_path)
        archive_writer(contents_dir, bundle_path)

        logger.info("Bundled %s(%s) successfully", config.name, config.version)
        return BundleResult(
            bundle_path=bundle_path,
            contents_dir=contents_dir,
            abi_hash=bundle_hash,
        )
    except Exception:
        logger.error("Failed to bundle %s(%s)", config.name, config.version)
        raise


__all__ = [
    "ArchiveWriter",
    "BundleResult",
    "bundle_dependency",
    "copy_headers",
    "copy_libraries",
    "copy_license_files",
    "get_build_lib_dir",
    "reset_contents_dir",
]
