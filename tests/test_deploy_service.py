"""Tests for deploy/service.py and deploy/storage.py modules.

Storage is mocked; no network access is required.
"""

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from helpers import MACOS_PRESET
from prebuild_utils.builds.abi import AbiDescriptorMissingError
from prebuild_utils.bundles.service import bundle_dependency
from prebuild_utils.config import IMMUTABLE_CACHE_CONTROL, DeploySettings
from prebuild_utils.deploy.service import (
    REQUIRED_DEPLOY_SETTINGS,
    BundleNotFoundError,
    DeploySettingsError,
    create_storage,
    deploy_dependency,
    remote_object_path,
    validate_deploy_settings,
)
from prebuild_utils.deploy.storage import S3Storage

MACOS_HASH = "18227c2b44250f3b8ca45a907be657115eb6530b"


@pytest.fixture(autouse=True)
def clean_aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ambient AWS variables out of DeploySettings."""
    optional = ("AWS_ENDPOINT_URL", "AWS_CACHE_CONTROL")
    for var in (*REQUIRED_DEPLOY_SETTINGS.values(), *optional):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def deploy_settings() -> DeploySettings:
    return DeploySettings(
        _env_file=None,
        access_key_id="AKIA",
        secret_access_key="secret",
        region="us-east-1",
        s3_bucket="prebuilds",
        s3_upload_root="deps",
    )


class TestRemoteObjectPath:
    """Tests for remote_object_path."""

    def test_layout(self) -> None:
        key = remote_object_path(
            "glfw", "macos-arm64-clang17", "Release", "glfw-3.4-abc.zip", "deps"
        )
        assert key == "deps/glfw/macos-arm64-clang17/Release/glfw-3.4-abc.zip"

    def test_nested_root(self) -> None:
        key = remote_object_path("glfw", "t", "Debug", "f.zip", "a/b")
        assert key == "a/b/glfw/t/Debug/f.zip"


class TestValidateDeploySettings:
    """Tests for validate_deploy_settings."""

    def test_complete(self, deploy_settings: DeploySettings) -> None:
        validate_deploy_settings(deploy_settings)

    def test_lists_missing_variables(self) -> None:
        """Every missing variable is named."""
        settings = DeploySettings(_env_file=None, region="us-east-1")
        with pytest.raises(DeploySettingsError) as exc_info:
            validate_deploy_settings(settings)
        assert exc_info.value.missing == [
            "AWS_ACCESS_KEY_ID",
            "AWS_SECRET_ACCESS_KEY",
            "AWS_S3_BUCKET",
            "AWS_S3_UPLOAD_ROOT",
        ]
        assert exc_info.value.code == "deploy_settings_missing"
        assert "AWS_S3_BUCKET" in str(exc_info.value)


class TestDeployDependency:
    """Tests for deploy_dependency."""

    def test_uploads_bundle(
        self, built_repo: Path, macos_config, deploy_settings: DeploySettings
    ) -> None:
        bundle = bundle_dependency(macos_config)
        storage = MagicMock()

        result = deploy_dependency(
            macos_config, settings=deploy_settings, storage=storage
        )

        expected_key = (
            f"deps/glfw/macos-arm64-clang17/Release/glfw-3.4-{MACOS_HASH}.zip"
        )
        storage.put_file.assert_called_once_with(
            expected_key,
            bundle.bundle_path,
            cache_control=IMMUTABLE_CACHE_CONTROL,
        )
        assert result.bucket == "prebuilds"
        assert result.key == expected_key
        assert result.url == f"s3://prebuilds/{expected_key}"
        assert result.cache_control == IMMUTABLE_CACHE_CONTROL

    def test_logs_abi(
        self,
        built_repo: Path,
        macos_config,
        deploy_settings: DeploySettings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        bundle_dependency(macos_config)
        caplog.clear()
        with caplog.at_level(logging.INFO):
            deploy_dependency(
                macos_config, settings=deploy_settings, storage=MagicMock()
            )
        assert f"> Hash: {MACOS_HASH}" in caplog.text

    def test_missing_settings_before_any_work(self, repo_root: Path, macos_config):
        """Missing credentials fail even when nothing was built."""
        storage = MagicMock()
        with pytest.raises(DeploySettingsError):
            deploy_dependency(
                macos_config, settings=DeploySettings(_env_file=None), storage=storage
            )
        storage.put_file.assert_not_called()

    def test_missing_abi(
        self, repo_root: Path, macos_config, deploy_settings: DeploySettings
    ) -> None:
        with pytest.raises(AbiDescriptorMissingError):
            deploy_dependency(macos_config, settings=deploy_settings, storage=MagicMock())

    def test_missing_bundle(
        self, built_repo: Path, macos_config, deploy_settings: DeploySettings
    ) -> None:
        """Deploying before bundling fails without uploading."""
        storage = MagicMock()
        with pytest.raises(BundleNotFoundError) as exc_info:
            deploy_dependency(macos_config, settings=deploy_settings, storage=storage)
        assert exc_info.value.path.name == f"glfw-3.4-{MACOS_HASH}.zip"
        assert MACOS_PRESET in str(exc_info.value.path)
        storage.put_file.assert_not_called()

    def test_storage_error_propagates(
        self,
        built_repo: Path,
        macos_config,
        deploy_settings: DeploySettings,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        bundle_dependency(macos_config)
        storage = MagicMock()
        storage.put_file.side_effect = RuntimeError("access denied")
        with pytest.raises(RuntimeError, match="access denied"):
            deploy_dependency(macos_config, settings=deploy_settings, storage=storage)
        assert "Failed to deploy glfw(3.4)" in caplog.text

    def test_creates_storage_when_not_given(
        self, built_repo: Path, macos_config, deploy_settings: DeploySettings
    ) -> None:
        bundle_dependency(macos_config)
        with patch("prebuild_utils.deploy.service.create_storage") as mock_create:
            deploy_dependency(macos_config, settings=deploy_settings)
        mock_create.assert_called_once_with(deploy_settings)
        mock_create.return_value.put_file.assert_called_once()


class TestS3Storage:
    """Tests for the boto3-backed storage client."""

    def test_create_storage(self, deploy_settings: DeploySettings) -> None:
        with patch("prebuild_utils.deploy.storage.boto3") as mock_boto3:
            storage = create_storage(deploy_settings)

        assert isinstance(storage, S3Storage)
        assert storage.bucket == "prebuilds"
        client_kwargs = mock_boto3.session.Session.return_value.client.call_args.kwargs
        assert client_kwargs["aws_access_key_id"] == "AKIA"
        assert client_kwargs["aws_secret_access_key"] == "secret"
        assert client_kwargs["endpoint_url"] is None

    def test_put_file(self, tmp_path: Path) -> None:
        """Uploads set cache control and content type."""
        path = tmp_path / "bundle.zip"
        path.write_bytes(b"zip")
        with patch("prebuild_utils.deploy.storage.boto3"):
            storage = S3Storage(
                bucket="prebuilds",
                region="us-east-1",
                access_key="AKIA",
                secret_key="secret",
            )

        storage.put_file("deps/x.zip", path, cache_control=IMMUTABLE_CACHE_CONTROL)

        kwargs = storage.client.upload_file.call_args.kwargs
        assert kwargs["Filename"] == str(path)
        assert kwargs["Bucket"] == "prebuilds"
        assert kwargs["Key"] == "deps/x.zip"
        assert kwargs["ExtraArgs"] == {
            "CacheControl": IMMUTABLE_CACHE_CONTROL,
            "ContentType": "application/zip",
        }
