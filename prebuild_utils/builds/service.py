"""Build stage.

Resolves the preset, builds the CMake environment and runs
configure-then-build. Failures are logged with the package identity
and re-raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from prebuild_utils.builds.runner import BuildEnvironment, run_cmake
from prebuild_utils.config import Settings, get_settings
from prebuild_utils.manifest.io import get_preset

if TYPE_CHECKING:
    from prebuild_utils.manifest.schema import BuildConfig

logger = logging.getLogger(__name__)

# Signature of the build tool invoker: (config, environment, cmake, timeout)
BuildInvoker = Callable[["BuildConfig", BuildEnvironment, str, "int | None"], None]


def _invoke_cmake(
    config: BuildConfig,
    environment: BuildEnvironment,
    cmake: str,
    timeout: int | None,
) -> None:
    run_cmake(config, environment, cmake=cmake, timeout=timeout)


def build_dependency(
    config: BuildConfig,
    settings: Settings | None = None,
    invoker: BuildInvoker | None = None,
) -> BuildEnvironment:
    """Build the dependency for its preset.

    Args:
        config: Build configuration.
        settings: Optional settings; uses defaults if not provided.
        invoker: Build tool invoker; runs CMake if not provided.

    Returns:
        The BuildEnvironment the tool was invoked with.

    Raises:
        BuildExecutionError: If CMake is missing or exits nonzero.
    """
    if settings is None:
        settings = get_settings()
    if invoker is None:
        invoker = _invoke_cmake

    try:
        environment = BuildEnvironment.from_config(config)
        preset = get_preset(config)

        logger.info("Building %s(%s)...", config.name, config.version)
        logger.info("> Preset: %s", preset)
        logger.info(
            "> Compiler: %s %s %s %s %s",
            config.compiler.c,
            config.compiler.cpp,
            config.runtime.stdlib,
            config.language.cpp_std,
            config.code_gen.optimization,
        )
        if config.platform.os == "macos":
            logger.info("> macOS Deployment Target: %s", environment.deployment_target)
        elif config.platform.os == "ios":
            logger.info("> iOS Deployment Target: %s", environment.deployment_target)

        invoker(config, environment, settings.cmake_executable, settings.build_timeout)

        logger.info("Built %s(%s) successfully", config.name, config.version)
        return environment
    except Exception:
        logger.error("Failed to build %s(%s)", config.name, config.version)
        raise


__all__ = ["BuildInvoker", "build_dependency"]
