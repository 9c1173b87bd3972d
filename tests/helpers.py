"""Builders for manifests, ABI descriptors and fake build outputs."""

import json
from pathlib import Path
from typing import Any

MACOS_PRESET = "macos-arm64-Release"
LINUX_PRESET = "linux-x86_64-Debug"


def make_preset_block(
    os_name: str = "macos",
    arch: str = "arm64",
    build_type: str = "Release",
    link_type: str = "Static",
    **overrides: Any,
) -> dict[str, Any]:
    """Create a preset block as it appears under manifest configs."""
    runtime: dict[str, Any] = {
        "stdlib": "libc++" if os_name in ("macos", "ios") else "libstdc++"
    }
    if os_name == "macos":
        runtime["deployment_target"] = "11.0"
    elif os_name == "ios":
        runtime["deployment_target"] = "15.0"

    block: dict[str, Any] = {
        "namespace": "glfw",
        "platform": {"os": os_name, "arch": arch},
        "compiler": {"c": "clang", "cpp": "clang++"},
        "language": {
            "c_std": "11",
            "cpp_std": "20",
            "rtti": True,
            "exceptions": True,
        },
        "code_gen": {
            "build_type": build_type,
            "link_type": link_type,
            "optimization": "-O2" if build_type == "Release" else "-O0",
        },
        "runtime": runtime,
        "output": [{"name": "glfw", "path": "libglfw3.a"}],
    }
    block.update(overrides)
    return block


def make_manifest(configs: dict[str, dict[str, Any]] | None = None) -> dict[str, Any]:
    """Create a repository manifest."""
    if configs is None:
        configs = {
            MACOS_PRESET: make_preset_block(),
            LINUX_PRESET: make_preset_block(
                os_name="linux", arch="x86_64", build_type="Debug"
            ),
        }
    return {
        "name": "glfw",
        "version": "3.4",
        "license_files": ["LICENSE.md"],
        "header_dir": "include",
        "configs": configs,
    }


def make_abi(**overrides: Any) -> dict[str, Any]:
    """Create an ABI descriptor as CMake writes it."""
    data: dict[str, Any] = {
        "triple": "macos-arm64-clang17",
        "os": "macos",
        "arch": "arm64",
        "compilerFamily": "clang",
        "compilerFrontendMajor": 17,
        "buildType": "Release",
        "stdlib": "libc++",
        "cppStd": 20,
    }
    data.update(overrides)
    return data


def write_abi(root: Path, preset: str, data: dict[str, Any] | None = None) -> Path:
    """Write projects/{preset}/abi.json under root."""
    path = root / "projects" / preset / "abi.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data if data is not None else make_abi()))
    return path


def write_build_outputs(root: Path, build_type: str = "Release") -> Path:
    """Write a fake library into build/lib/{build_type}."""
    lib_dir = root / "build" / "lib" / build_type
    lib_dir.mkdir(parents=True, exist_ok=True)
    (lib_dir / "libglfw3.a").write_bytes(b"!<arch>\nfake")
    return lib_dir

