"""Shared fixtures for prebuild_utils tests.

Builds a throwaway repository tree with a manifest, sources and
(optionally) build outputs, without running CMake.
"""

import json
from pathlib import Path

import pytest

from helpers import MACOS_PRESET, make_manifest, write_abi, write_build_outputs


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """Create a repository with CMakeLists.txt, manifest, headers and license."""
    root = tmp_path / "repo"
    root.mkdir()
    (root / "CMakeLists.txt").write_text("cmake_minimum_required(VERSION 3.20)\n")
    (root / "manifest.json").write_text(json.dumps(make_manifest(), indent=2))
    (root / "LICENSE.md").write_text("zlib license\n")
    header_dir = root / "include" / "GLFW"
    header_dir.mkdir(parents=True)
    (header_dir / "glfw3.h").write_text("#pragma once\n")
    return root


@pytest.fixture
def built_repo(repo_root: Path) -> Path:
    """Repository with build outputs and an ABI descriptor for the macOS preset."""
    write_build_outputs(repo_root, "Release")
    write_abi(repo_root, MACOS_PRESET)
    return repo_root


@pytest.fixture
def macos_config(repo_root: Path):
    """Resolved BuildConfig for the macOS preset."""
    from prebuild_utils.manifest.io import load_build_config

    config = load_build_config(repo_root, MACOS_PRESET)
    assert config is not None
    return config
