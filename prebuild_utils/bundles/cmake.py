"""CMake package config generation.

This module handles:
- Building a normalized view model of the exported library targets
- Rendering {name}Config.cmake from that view model

The view model is independent of the renderer so a different
package-integration format can reuse it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, PackageLoader, StrictUndefined

if TYPE_CHECKING:
    from prebuild_utils.manifest.schema import BuildConfig

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "0.0.0"
CMAKE_CONFIG_TEMPLATE = "Config.cmake.j2"


@dataclass
class LibLocation:
    """Location of a library binary inside the bundle.

    Attributes:
        binary: Path relative to the bundle's libs/ directory.
        implib: Optional Windows import library for a DLL.
    """

    binary: str
    implib: str | None = None


@dataclass
class LibView:
    """One exported library target."""

    target_name: str
    type: str
    locations: dict[str, LibLocation] = field(default_factory=dict)
    include_dirs: list[str] = field(default_factory=list)
    link_libraries: list[str] = field(default_factory=list)
    compile_definitions: list[str] = field(default_factory=list)
    compile_options: list[str] = field(default_factory=list)


@dataclass
class CMakeConfigView:
    """Normalized view model of a CMake package config."""

    package_name: str
    package_var: str
    version: str
    namespace: str
    libs: list[LibView] = field(default_factory=list)
    extra_include_dirs: list[str] = field(default_factory=list)


# Renders a view model into file text
ConfigRenderer = Callable[[CMakeConfigView], str]


def to_package_var(name: str) -> str:
    """Convert a package name into a valid CMake variable prefix."""
    return re.sub(r"[^A-Za-z0-9_]", "_", name)


def lib_locations(link_type: str, build_type: str, path: str) -> dict[str, LibLocation]:
    """Map configuration names to library locations.

    Static libraries are registered for the build type they were built
    with; shared libraries use a single configuration-less location.
    """
    if link_type == "Static" and build_type in ("Debug", "Release"):
        return {build_type.upper(): LibLocation(binary=path)}
    return {"SINGLE": LibLocation(binary=path)}


def create_cmake_config_view(config: BuildConfig) -> CMakeConfigView:
    """Create the CMake config view model for a build configuration.

    Args:
        config: Build configuration.

    Returns:
        CMakeConfigView with one library per declared output.
    """
    lib_type = "STATIC" if config.code_gen.link_type == "Static" else "SHARED"
    libs = [
        LibView(
            target_name=lib.name,
            type=lib_type,
            locations=lib_locations(
                config.code_gen.link_type, config.code_gen.build_type, lib.path
            ),
        )
        for lib in config.output
    ]
    return CMakeConfigView(
        package_name=config.name,
        package_var=to_package_var(config.name),
        version=config.version or DEFAULT_VERSION,
        namespace=config.namespace or config.name,
        libs=libs,
    )


@lru_cache(maxsize=1)
def get_template_environment() -> Environment:
    """Return the Jinja2 environment for the bundled templates."""
    return Environment(
        loader=PackageLoader("prebuild_utils", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_cmake_config(view: CMakeConfigView) -> str:
    """Render a CMake package config file from the Config.cmake template.

    Imported targets are named {namespace}::{target} and resolve their
    headers and binaries relative to the bundle root.

    Args:
        view: CMake config view model.

    Returns:
        Rendered file text.
    """
    template = get_template_environment().get_template(CMAKE_CONFIG_TEMPLATE)
    return template.render(view=view)


def write_cmake_config(
    config: BuildConfig,
    output_path: Path,
    renderer: ConfigRenderer = render_cmake_config,
) -> Path:
    """Render and write the CMake package config for a build configuration.

    Args:
        config: Build configuration.
        output_path: Destination file path.
        renderer: Renderer for the view model.

    Returns:
        Path to the written file.
    """
    view = create_cmake_config_view(config)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(renderer(view), encoding="utf-8")
    logger.debug("Wrote CMake config to %s", output_path)
    return output_path


__all__ = [
    "CMAKE_CONFIG_TEMPLATE",
    "CMakeConfigView",
    "ConfigRenderer",
    "LibLocation",
    "LibView",
    "create_cmake_config_view",
    "get_template_environment",
    "lib_locations",
    "render_cmake_config",
    "to_package_var",
    "write_cmake_config",
]
