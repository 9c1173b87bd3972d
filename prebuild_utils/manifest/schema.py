"""Pydantic models for the package manifest and resolved build configuration.

The repository manifest (``manifest.json`` at the repository root) holds
shared package metadata plus a ``configs`` map keyed by preset identifier.
A ``BuildConfig`` is the merge of the shared fields with one preset block.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from prebuild_utils.types import (
    APPLE_OS_TYPES,
    ArchType,
    BuildType,
    LinkType,
    OptimizationLevel,
    OSType,
    Stdlib,
)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, use_enum_values=True)


class PathsConfig(_ConfigModel):
    """Shared source paths, always taken from the manifest top level.

    Attributes:
        license_files: License files relative to the repository root.
        header_dir: Public header directory relative to the repository root.
    """

    license_files: list[str] = Field(default_factory=list)
    header_dir: str = Field(default="")


class PlatformConfig(_ConfigModel):
    """Target platform."""

    os: OSType
    arch: ArchType


class CompilerConfig(_ConfigModel):
    """C and C++ compiler executables."""

    c: str
    cpp: str


class LanguageConfig(_ConfigModel):
    """Language standards and feature switches."""

    c_std: str
    cpp_std: str
    rtti: bool
    exceptions: bool


class CodeGenConfig(_ConfigModel):
    """Code generation settings."""

    build_type: BuildType
    link_type: LinkType
    optimization: OptimizationLevel


class RuntimeConfig(_ConfigModel):
    """Runtime settings for platforms without a deployment target.

    A deployment_target is accepted for manifests that set it on every
    platform, but it is neither used nor serialized.
    """

    stdlib: Stdlib
    deployment_target: str | None = Field(default=None, exclude=True)


class MacOSRuntimeConfig(RuntimeConfig):
    """Runtime settings for macOS builds."""

    deployment_target: str = Field(min_length=1)


class IOSRuntimeConfig(RuntimeConfig):
    """Runtime settings for iOS builds."""

    deployment_target: str = Field(min_length=1)


# Runtime variant selected by platform.os
RUNTIME_MODELS: dict[str, type[RuntimeConfig]] = {
    OSType.MACOS.value: MacOSRuntimeConfig,
    OSType.IOS.value: IOSRuntimeConfig,
    OSType.WINDOWS.value: RuntimeConfig,
    OSType.LINUX.value: RuntimeConfig,
}


class LibOutput(_ConfigModel):
    """A library produced by the build.

    Attributes:
        name: CMake target name, without namespace.
        path: Library file path relative to the bundle's libs/ directory.
    """

    name: str = Field(min_length=1)
    path: str = Field(min_length=1)


class BuildConfig(_ConfigModel):
    """Resolved configuration for one build invocation.

    Attributes:
        root_dir: Repository root directory.
        namespace: Optional CMake namespace for exported targets.
        name: Package name.
        version: Package version.
        paths: Shared source paths.
        platform: Target platform.
        compiler: Compiler executables.
        language: Language settings.
        code_gen: Code generation settings.
        runtime: Runtime settings; the variant depends on platform.os.
        output: Declared output libraries.
    """

    root_dir: Path
    namespace: str | None = None
    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    platform: PlatformConfig
    compiler: CompilerConfig
    language: LanguageConfig
    code_gen: CodeGenConfig
    runtime: MacOSRuntimeConfig | IOSRuntimeConfig | RuntimeConfig
    output: list[LibOutput] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def select_runtime_variant(cls, data: Any) -> Any:
        """Validate the runtime block against the model for platform.os."""
        if not isinstance(data, dict):
            return data
        platform = data.get("platform")
        runtime = data.get("runtime")
        if isinstance(platform, PlatformConfig):
            os_name = platform.os
        elif isinstance(platform, dict):
            os_name = platform.get("os")
        else:
            return data
        model = RUNTIME_MODELS.get(str(os_name))
        if model is None or not isinstance(runtime, dict):
            return data
        return {**data, "runtime": model.model_validate(runtime)}

    @model_validator(mode="after")
    def check_deployment_target(self) -> BuildConfig:
        """Apple platforms must carry a deployment target."""
        if self.platform.os in APPLE_OS_TYPES and not isinstance(
            self.runtime, (MacOSRuntimeConfig, IOSRuntimeConfig)
        ):
            raise ValueError(
                f"runtime.deployment_target is required when os is '{self.platform.os}'"
            )
        return self

    @property
    def deployment_target(self) -> str | None:
        """Deployment target for Apple platforms, else None."""
        if self.platform.os not in APPLE_OS_TYPES:
            return None
        return self.runtime.deployment_target


class ManifestSchema(BaseModel):
    """Schema of the repository manifest file.

    Preset blocks are kept as raw mappings; they are validated only
    after being merged into a BuildConfig.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    namespace: str | None = None
    license_files: list[str] = Field(default_factory=list)
    header_dir: str = Field(default="")
    configs: dict[str, dict[str, Any]] = Field(default_factory=dict)


__all__ = [
    "RUNTIME_MODELS",
    "BuildConfig",
    "CodeGenConfig",
    "CompilerConfig",
    "IOSRuntimeConfig",
    "LanguageConfig",
    "LibOutput",
    "MacOSRuntimeConfig",
    "ManifestSchema",
    "PathsConfig",
    "PlatformConfig",
    "RuntimeConfig",
]
