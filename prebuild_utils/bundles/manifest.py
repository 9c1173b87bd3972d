"""Bundle manifest generation.

Every bundle carries a manifest.json describing the package, its ABI
hash and the settings it was built with.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from prebuild_utils.manifest.schema import (
    BuildConfig,
    CodeGenConfig,
    CompilerConfig,
    IOSRuntimeConfig,
    LanguageConfig,
    MacOSRuntimeConfig,
    PlatformConfig,
    RuntimeConfig,
)

logger = logging.getLogger(__name__)

BUNDLE_MANIFEST_FILE = "manifest.json"


class BundleManifest(BaseModel):
    """Descriptor embedded in each bundle.

    Attributes:
        name: Package name.
        version: Package version.
        hash: ABI hash of the build.
        platform: Target platform.
        compiler: Compiler executables.
        language: Language settings.
        code_gen: Code generation settings.
        runtime: Runtime settings.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    hash: str
    platform: PlatformConfig
    compiler: CompilerConfig
    language: LanguageConfig
    code_gen: CodeGenConfig
    runtime: MacOSRuntimeConfig | IOSRuntimeConfig | RuntimeConfig


def generate_manifest(config: BuildConfig, bundle_hash: str) -> BundleManifest:
    """Project a build configuration and ABI hash into a bundle manifest.

    Args:
        config: Build configuration.
        bundle_hash: ABI hash of the build.

    Returns:
        BundleManifest instance. Nothing is written to disk.
    """
    return BundleManifest(
        name=config.name,
        version=config.version,
        hash=bundle_hash,
        platform=config.platform,
        compiler=config.compiler,
        language=config.language,
        code_gen=config.code_gen,
        runtime=config.runtime,
    )


def write_manifest(manifest: BundleManifest, output_path: Path) -> Path:
    """Write a bundle manifest as JSON.

    Args:
        manifest: Bundle manifest.
        output_path: Output file path.

    Returns:
        Path to written manifest file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(manifest.model_dump_json(indent=2), encoding="utf-8")
    logger.debug("Wrote bundle manifest to %s", output_path)
    return output_path


__all__ = [
    "BUNDLE_MANIFEST_FILE",
    "BundleManifest",
    "generate_manifest",
    "write_manifest",
]
