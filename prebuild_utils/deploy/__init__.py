"""Deploy module.

This module handles:
- Remote object addressing
- Deploy settings validation
- Uploading bundles to S3
"""

from prebuild_utils.deploy.service import (
    BundleNotFoundError,
    DeploySettingsError,
    deploy_dependency,
    remote_object_path,
)

__all__ = [
    "BundleNotFoundError",
    "DeploySettingsError",
    "deploy_dependency",
    "remote_object_path",
]
