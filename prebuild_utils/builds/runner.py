"""CMake runner for configure and build steps.

This module handles:
- The explicit build environment passed to CMake presets
- Composing `cmake --preset` and `cmake --build` commands
- Executing commands with subprocess

The environment is modeled as a value object; it is only turned into
environment variables at the subprocess boundary.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from prebuild_utils.manifest.io import get_preset

if TYPE_CHECKING:
    from prebuild_utils.manifest.schema import BuildConfig

logger = logging.getLogger(__name__)

DEFAULT_CMAKE = "cmake"

# Environment variable carrying the deployment target, per OS
DEPLOYMENT_TARGET_ENV = {
    "macos": "BUILD_OSX_DEPLOYMENT_TARGET",
    "ios": "BUILD_IOS_DEPLOYMENT_TARGET",
}


class BuildExecutionError(Exception):
    """Raised when build execution fails."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str = "build_failed",
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.code = code


@dataclass(frozen=True)
class BuildEnvironment:
    """Variables the CMake presets read to select the target.

    Attributes:
        os: Target operating system.
        arch: Target architecture.
        build_type: CMake build type.
        deployment_target: Apple deployment target, if any.
    """

    os: str
    arch: str
    build_type: str
    deployment_target: str | None = None

    @classmethod
    def from_config(cls, config: BuildConfig) -> BuildEnvironment:
        """Create the build environment for a build configuration."""
        return cls(
            os=config.platform.os,
            arch=config.platform.arch,
            build_type=config.code_gen.build_type,
            deployment_target=config.deployment_target,
        )

    def to_env(self) -> dict[str, str]:
        """Serialize to environment variables for the external tool."""
        env = {
            "BUILD_OS": self.os,
            "BUILD_ARCH": self.arch,
            "BUILD_TYPE": self.build_type,
        }
        target_var = DEPLOYMENT_TARGET_ENV.get(self.os)
        if target_var and self.deployment_target:
            env[target_var] = self.deployment_target
        return env


def compose_configure_command(preset: str, cmake: str = DEFAULT_CMAKE) -> list[str]:
    """Compose the CMake configure command for a preset."""
    return [cmake, "--preset", preset]


def compose_build_command(
    preset: str,
    build_type: str,
    cmake: str = DEFAULT_CMAKE,
) -> list[str]:
    """Compose the CMake build command for a preset.

    Args:
        preset: Preset identifier; also the binary directory under projects/.
        build_type: Configuration to build for multi-config generators.
        cmake: CMake executable.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    return [
        cmake,
        "--build",
        f"projects/{preset}",
        "--config",
        build_type,
        "--parallel",
    ]


def compose_cmake_commands(
    config: BuildConfig,
    cmake: str = DEFAULT_CMAKE,
) -> list[list[str]]:
    """Compose the configure-then-build command sequence for a config."""
    preset = get_preset(config)
    return [
        compose_configure_command(preset, cmake=cmake),
        compose_build_command(preset, config.code_gen.build_type, cmake=cmake),
    ]


def ensure_tool(name: str) -> str:
    """Check that an executable is available.

    Args:
        name: Executable name or path.

    Returns:
        Resolved executable path.

    Raises:
        BuildExecutionError: If the executable cannot be found.
    """
    resolved = shutil.which(name)
    if resolved is None:
        raise BuildExecutionError(
            f"Required tool not found on PATH: {name}",
            code="tool_not_found",
        )
    return resolved


def run_command(
    cmd: list[str],
    cwd: Path,
    env_override: dict[str, str] | None = None,
    timeout: int | None = None,
) -> None:
    """Run an external command, streaming its output.

    Args:
        cmd: Command to execute.
        cwd: Working directory.
        env_override: Variables layered over the current environment.
        timeout: Timeout in seconds (None = no timeout).

    Raises:
        BuildExecutionError: If the command cannot start, times out,
            or exits nonzero.
    """
    cmd_str = shlex.join(cmd)
    logger.info("Executing: %s", cmd_str)
    logger.debug("Working directory: %s", cwd)

    env: dict[str, str] | None = None
    if env_override:
        env = dict(os.environ)
        env.update(env_override)

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            env=env,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise BuildExecutionError(
            f"Command timed out after {timeout} seconds: {cmd_str}",
            exit_code=-1,
            code="build_timeout",
        ) from e
    except OSError as e:
        raise BuildExecutionError(
            f"Failed to execute {cmd_str}: {e}",
            code="execution_error",
        ) from e

    if result.returncode != 0:
        raise BuildExecutionError(
            f"Command failed with exit code {result.returncode}: {cmd_str}",
            exit_code=result.returncode,
        )


def run_cmake(
    config: BuildConfig,
    environment: BuildEnvironment,
    cmake: str = DEFAULT_CMAKE,
    timeout: int | None = None,
) -> None:
    """Configure and build a preset with CMake.

    Args:
        config: Build configuration.
        environment: Build environment passed to the presets.
        cmake: CMake executable.
        timeout: Per-command timeout in seconds.

    Raises:
        BuildExecutionError: If CMake is missing or a step fails.
    """
    ensure_tool(cmake)
    env = environment.to_env()
    for cmd in compose_cmake_commands(config, cmake=cmake):
        run_command(cmd, cwd=Path(config.root_dir), env_override=env, timeout=timeout)


__all__ = [
    "DEFAULT_CMAKE",
    "DEPLOYMENT_TARGET_ENV",
    "BuildEnvironment",
    "BuildExecutionError",
    "compose_build_command",
    "compose_cmake_commands",
    "compose_configure_command",
    "ensure_tool",
    "run_cmake",
    "run_command",
]
