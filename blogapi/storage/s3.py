# =============================================================================
# S3 Blob Storage
# =============================================================================
#
# Setup:
#   1. Create a bucket with public-read objects (or a CloudFront distribution)
#   2. Set env vars:
#      - BLOB_BACKEND=s3
#      - AWS_S3_BUCKET=...
#      - AWS_ACCESS_KEY_ID=...
#      - AWS_SECRET_ACCESS_KEY=...
#      - AWS_REGION=us-east-1
#
# =============================================================================

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from blogapi.config import Settings
from blogapi.core.errors import UpstreamUnavailable
from blogapi.core.models import ImageRef
from blogapi.core.utils import generate_id
from blogapi.storage.base import BlobStorage

logger = logging.getLogger(__name__)

# delete_objects accepts at most this many keys per request
_S3_DELETE_BATCH = 1000


class S3BlobStorage(BlobStorage):
    """Store images in an S3 bucket."""

    def __init__(self, settings: Settings, prefix: str = "images/"):
        self.settings = settings
        self.bucket = settings.aws_s3_bucket
        self.prefix = prefix
        self._client = None

    @property
    def client(self):
        """Lazy-load S3 client."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
            )
        return self._client

    def _url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.settings.aws_region}.amazonaws.com/{key}"

    async def upload(self, local_path: str | Path) -> ImageRef:
        source = Path(local_path)
        key = f"{self.prefix}{generate_id('img')}{source.suffix.lower()}"
        content_type = mimetypes.guess_type(source.name)[0] or "application/octet-stream"

        try:
            self.client.upload_file(
                str(source),
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload failed for {source.name}: {e}")
            raise UpstreamUnavailable("Image upload failed") from e

        return ImageRef(url=self._url(key), public_id=key)

    async def remove(self, public_id: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=public_id)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 delete failed for {public_id}: {e}")
            raise UpstreamUnavailable("Image removal failed") from e

    async def remove_many(self, public_ids: list[str]) -> None:
        for start in range(0, len(public_ids), _S3_DELETE_BATCH):
            batch = public_ids[start:start + _S3_DELETE_BATCH]
            try:
                self.client.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except (ClientError, BotoCoreError) as e:
                logger.error(f"S3 batch delete failed ({len(batch)} keys): {e}")
                raise UpstreamUnavailable("Image removal failed") from e
