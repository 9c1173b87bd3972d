"""Deploy stage.

This module provides the deploy API:
- remote_object_path(): the content-addressed object key of a bundle
- deploy_dependency(): upload a bundle to object storage

The object key partitions by package, triple and build type for
browsing; identity lives in the filename's hash segment.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING

from prebuild_utils.builds.abi import (
    abi_descriptor_path,
    abi_hash,
    log_abi_info,
    parse_abi_descriptor,
)
from prebuild_utils.bundles.addressing import get_bundle_filename, get_bundle_path
from prebuild_utils.config import DeploySettings, get_deploy_settings
from prebuild_utils.types import DeployResult

if TYPE_CHECKING:
    from prebuild_utils.deploy.storage import S3Storage
    from prebuild_utils.manifest.schema import BuildConfig

logger = logging.getLogger(__name__)

# Setting attribute -> environment variable, in validation order
REQUIRED_DEPLOY_SETTINGS = {
    "access_key_id": "AWS_ACCESS_KEY_ID",
    "secret_access_key": "AWS_SECRET_ACCESS_KEY",
    "region": "AWS_REGION",
    "s3_bucket": "AWS_S3_BUCKET",
    "s3_upload_root": "AWS_S3_UPLOAD_ROOT",
}


class DeploySettingsError(Exception):
    """Raised when required deploy settings are missing."""

    def __init__(
        self,
        missing: list[str],
        code: str = "deploy_settings_missing",
    ) -> None:
        super().__init__(f"Deploy settings not set: {', '.join(missing)}")
        self.missing = missing
        self.code = code


class BundleNotFoundError(Exception):
    """Raised when the bundle to deploy has not been created."""

    def __init__(self, path: Path, code: str = "bundle_not_found") -> None:
        super().__init__(f"Bundle not found: {path} (run the bundle stage first)")
        self.path = path
        self.code = code


def remote_object_path(
    name: str,
    triple: str,
    build_type: str,
    filename: str,
    upload_root: str,
) -> str:
    """Return the object key "{upload_root}/{name}/{triple}/{build_type}/{filename}"."""
    return posixpath.join(upload_root, name, triple, build_type, filename)


def validate_deploy_settings(settings: DeploySettings) -> None:
    """Check that every required deploy setting is present.

    Raises:
        DeploySettingsError: Naming each missing environment variable.
    """
    missing = [
        env_name
        for attr, env_name in REQUIRED_DEPLOY_SETTINGS.items()
        if not getattr(settings, attr)
    ]
    if missing:
        raise DeploySettingsError(missing)


def create_storage(settings: DeploySettings) -> S3Storage:
    """Create the S3 client for validated deploy settings."""
    from prebuild_utils.deploy.storage import S3Storage

    return S3Storage(
        bucket=str(settings.s3_bucket),
        region=str(settings.region),
        access_key=settings.access_key_id,
        secret_key=settings.secret_access_key,
        endpoint_url=settings.endpoint_url,
    )


def deploy_dependency(
    config: BuildConfig,
    settings: DeploySettings | None = None,
    storage: S3Storage | None = None,
) -> DeployResult:
    """Upload the bundle for a preset.

    Args:
        config: Build configuration.
        settings: Deploy settings; loaded from the environment if not provided.
        storage: Object storage client; an S3 client is created if not provided.

    Returns:
        DeployResult with bucket, key and source path.

    Raises:
        DeploySettingsError: If required settings are missing.
        AbiDescriptorMissingError: If the ABI descriptor is absent.
        BundleNotFoundError: If the bundle archive is absent.
    """
    if settings is None:
        settings = get_deploy_settings()

    try:
        validate_deploy_settings(settings)

        abi = parse_abi_descriptor(abi_descriptor_path(config))
        log_abi_info(abi)
        bundle_hash = abi_hash(abi)
        local_bundle_path = get_bundle_path(config, bundle_hash)
        if not local_bundle_path.is_file():
            raise BundleNotFoundError(local_bundle_path)

        key = remote_object_path(
            config.name,
            abi.triple,
            config.code_gen.build_type,
            get_bundle_filename(config, bundle_hash),
            str(settings.s3_upload_root),
        )

        if storage is None:
            storage = create_storage(settings)

        logger.info("Deploying to S3...")
        logger.info("> Region: %s", settings.region)
        logger.info("> Source: %s", local_bundle_path)
        logger.info("> Destination: s3://%s/%s", settings.s3_bucket, key)

        storage.put_file(key, local_bundle_path, cache_control=settings.cache_control)

        logger.info("Deployed %s(%s) successfully", config.name, config.version)
        return DeployResult(
            bucket=str(settings.s3_bucket),
            key=key,
            source=str(local_bundle_path),
            cache_control=settings.cache_control,
        )
    except Exception:
        logger.error("Failed to deploy %s(%s)", config.name, config.version)
        raise


__all__ = [
    "REQUIRED_DEPLOY_SETTINGS",
    "BundleNotFoundError",
    "DeploySettingsError",
    "create_storage",
    "deploy_dependency",
    "remote_object_path",
    "validate_deploy_settings",
]
