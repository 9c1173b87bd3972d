"""S3 object storage client used to publish bundles."""

from __future__ import annotations

import logging
from pathlib import Path

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.config import Config

logger = logging.getLogger(__name__)

BUNDLE_CONTENT_TYPE = "application/zip"


class S3Storage:
    """Thin wrapper around a boto3 S3 client bound to one bucket."""

    def __init__(
        self,
        bucket: str,
        region: str,
        access_key: str | None,
        secret_key: str | None,
        endpoint_url: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.region = region

        # Single attempt; failed uploads are rerun by hand
        cfg = Config(region_name=region, retries={"total_max_attempts": 1})
        session = boto3.session.Session()
        self.client = session.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=cfg,
        )

    def put_file(
        self,
        key: str,
        path: Path,
        cache_control: str,
        content_type: str = BUNDLE_CONTENT_TYPE,
    ) -> None:
        """Upload a local file to `key`.

        Errors from the client propagate unchanged; nothing is retried here.
        """
        logger.debug("Uploading %s to s3://%s/%s", path, self.bucket, key)
        self.client.upload_file(
            Filename=str(path),
            Bucket=self.bucket,
            Key=key,
            ExtraArgs={
                "CacheControl": cache_control,
                "ContentType": content_type,
            },
            Config=TransferConfig(use_threads=False),
        )


__all__ = ["BUNDLE_CONTENT_TYPE", "S3Storage"]
