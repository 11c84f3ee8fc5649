# resumesync/services/storage.py
from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import Settings
from ..errors import UpstreamFailure

logger = logging.getLogger(__name__)


class S3Storage:
    """
    Pre-signed upload URLs and direct PDF uploads against one bucket.
    Takes a ready boto3 S3 client so tests can hand in a fake.
    """

    def __init__(self, client: Any, bucket: str, region: str,
                 public_base_url: Optional[str] = None, expires_in: int = 3600):
        self.client = client
        self.bucket = bucket
        self.region = region
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.expires_in = expires_in

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def presign_put(self, key: str, content_type: str) -> str:
        """Time-limited PUT URL; the uploader must send the same Content-Type."""
        try:
            return self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=self.expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning("presign failed for %s: %s", key, e)
            raise UpstreamFailure(f"Failed to sign upload URL: {e}") from e

    def upload_pdf(self, key: str, data: bytes) -> str:
        """Upload PDF bytes and return their public URL."""
        try:
            self.client.put_object(
                Bucket=self.bucket, Key=key, Body=data, ContentType="application/pdf"
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning("upload failed for %s: %s", key, e)
            raise UpstreamFailure(f"Failed to upload PDF: {e}") from e
        return self.public_url(key)


def build_storage(cfg: Settings) -> S3Storage:
    client = boto3.client(
        "s3",
        region_name=cfg.aws_region,
        aws_access_key_id=cfg.aws_access_key_id,
        aws_secret_access_key=cfg.aws_secret_access_key,
        endpoint_url=cfg.s3_endpoint_url,
    )
    return S3Storage(
        client,
        bucket=cfg.aws_s3_bucket_name,
        region=cfg.aws_region,
        public_base_url=cfg.s3_public_base_url,
        expires_in=cfg.upload_url_expires_in,
    )
