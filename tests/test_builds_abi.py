"""Tests for builds/abi.py module.

Tests ABI descriptor parsing, fingerprinting and hashing.
"""

import hashlib
import json
import logging
from pathlib import Path

import pytest

from helpers import MACOS_PRESET, make_abi, write_abi
from prebuild_utils.builds.abi import (
    AbiDescriptor,
    AbiDescriptorMissingError,
    AbiParseError,
    abi_descriptor_path,
    abi_fingerprint,
    abi_hash,
    abi_short_hash,
    log_abi_info,
    parse_abi_descriptor,
)

MACOS_FINGERPRINT = "macos|arm64|clang|17|Release|libc++|20"
MACOS_HASH = "18227c2b44250f3b8ca45a907be657115eb6530b"


@pytest.fixture
def descriptor() -> AbiDescriptor:
    return AbiDescriptor.model_validate(make_abi())


class TestParseAbiDescriptor:
    """Tests for parse_abi_descriptor."""

    def test_parses(self, tmp_path: Path) -> None:
        """Camel-case keys map onto descriptor fields."""
        path = write_abi(tmp_path, MACOS_PRESET)
        descriptor = parse_abi_descriptor(path)
        assert descriptor.triple == "macos-arm64-clang17"
        assert descriptor.compiler_family == "clang"
        assert descriptor.compiler_frontend_major == 17
        assert descriptor.build_type == "Release"
        assert descriptor.cpp_std == 20

    def test_ignores_extra_keys(self, tmp_path: Path) -> None:
        path = write_abi(tmp_path, MACOS_PRESET, make_abi(generator="Ninja"))
        assert parse_abi_descriptor(path).os == "macos"

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing descriptor is distinguishable from a malformed one."""
        path = tmp_path / "projects" / MACOS_PRESET / "abi.json"
        with pytest.raises(AbiDescriptorMissingError) as exc_info:
            parse_abi_descriptor(path)
        assert exc_info.value.code == "abi_missing"
        assert exc_info.value.path == path
        assert isinstance(exc_info.value, AbiParseError)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "abi.json"
        path.write_text("{")
        with pytest.raises(AbiParseError) as exc_info:
            parse_abi_descriptor(path)
        assert exc_info.value.code == "abi_invalid"
        assert not isinstance(exc_info.value, AbiDescriptorMissingError)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "abi.json"
        path.write_text(json.dumps(["macos"]))
        with pytest.raises(AbiParseError, match="Expected a JSON object"):
            parse_abi_descriptor(path)

    def test_missing_field(self, tmp_path: Path) -> None:
        data = make_abi()
        del data["stdlib"]
        path = write_abi(tmp_path, MACOS_PRESET, data)
        with pytest.raises(AbiParseError):
            parse_abi_descriptor(path)

    def test_string_version_rejected(self, tmp_path: Path) -> None:
        """Numeric fields must be JSON numbers."""
        path = write_abi(tmp_path, MACOS_PRESET, make_abi(compilerFrontendMajor="17"))
        with pytest.raises(AbiParseError):
            parse_abi_descriptor(path)


class TestAbiDescriptorPath:
    """Tests for abi_descriptor_path."""

    def test_path(self, macos_config, repo_root: Path) -> None:
        expected = repo_root / "projects" / MACOS_PRESET / "abi.json"
        assert abi_descriptor_path(macos_config) == expected


class TestAbiFingerprint:
    """Tests for abi_fingerprint."""

    def test_field_order(self, descriptor: AbiDescriptor) -> None:
        assert abi_fingerprint(descriptor) == MACOS_FINGERPRINT

    def test_triple_not_included(self) -> None:
        """The display triple does not take part in identity."""
        a = AbiDescriptor.model_validate(make_abi(triple="one"))
        b = AbiDescriptor.model_validate(make_abi(triple="two"))
        assert abi_fingerprint(a) == abi_fingerprint(b)
        assert abi_hash(a) == abi_hash(b)

    def test_values_verbatim(self) -> None:
        """Values are not normalized."""
        descriptor = AbiDescriptor.model_validate(make_abi(compilerFamily="Clang"))
        assert "|Clang|" in abi_fingerprint(descriptor)


class TestAbiHash:
    """Tests for abi_hash."""

    def test_reference_digest(self, descriptor: AbiDescriptor) -> None:
        """Hash is the SHA-1 of the fingerprint."""
        assert abi_hash(descriptor) == MACOS_HASH

    def test_matches_sha1_of_fingerprint(self) -> None:
        descriptor = AbiDescriptor.model_validate(
            make_abi(
                os="linux",
                arch="x86_64",
                compilerFamily="gcc",
                compilerFrontendMajor=13,
                buildType="Debug",
                stdlib="libstdc++",
                cppStd=17,
            )
        )
        fingerprint = "linux|x86_64|gcc|13|Debug|libstdc++|17"
        assert abi_fingerprint(descriptor) == fingerprint
        assert abi_hash(descriptor) == hashlib.sha1(fingerprint.encode()).hexdigest()
        assert abi_hash(descriptor) == "c31bf4fa8fac36cb7d8669c0349371de0f20b2e6"

    def test_each_field_changes_hash(self, descriptor: AbiDescriptor) -> None:
        """Changing any fingerprint field changes the hash."""
        changes = {
            "os": "ios",
            "arch": "x86_64",
            "compilerFamily": "gcc",
            "compilerFrontendMajor": 18,
            "buildType": "Debug",
            "stdlib": "libstdc++",
            "cppStd": 17,
        }
        for key, value in changes.items():
            other = AbiDescriptor.model_validate(make_abi(**{key: value}))
            assert abi_hash(other) != abi_hash(descriptor), key

    def test_lowercase_hex(self, descriptor: AbiDescriptor) -> None:
        digest = abi_hash(descriptor)
        assert len(digest) == 40
        assert digest == digest.lower()

    def test_short_hash(self, descriptor: AbiDescriptor) -> None:
        assert abi_short_hash(descriptor) == MACOS_HASH[:8]
        assert abi_short_hash(descriptor, length=12) == MACOS_HASH[:12]


class TestLogAbiInfo:
    """Tests for log_abi_info."""

    def test_logs_hash(
        self, descriptor: AbiDescriptor, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO):
            log_abi_info(descriptor)
        assert MACOS_FINGERPRINT in caplog.text
        assert MACOS_HASH in caplog.text
