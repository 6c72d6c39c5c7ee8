import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from errors import UploadError

logger = logging.getLogger(__name__)

# SigV4 presigned URLs cannot outlive seven days
MAX_PRESIGNED_SECONDS = 7 * 24 * 60 * 60


class S3Service:
    def __init__(self, bucket_name: str, client: boto3.client, public_base_url: Optional[str] = None):
        """
        Initialize the S3 service with bucket name and client

        If public_base_url is set, object URLs are built from it instead of presigning
        """
        self.bucket_name = bucket_name
        self.s3 = client
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """
        Upload raw bytes to S3

        Args:
            path: The object key to store the bytes under
            data: The file content
            content_type: MIME type stored with the object

        Returns:
            The S3 key of the stored object

        Raises:
            UploadError: If S3 rejects the upload or cannot be reached
        """
        try:
            await run_in_threadpool(
                self.s3.put_object,
                Bucket=self.bucket_name,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
            return path
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 upload error for %s: %s", path, e)
            raise UploadError(f"Failed to upload {path} to S3") from e

    async def get_url(self, key: str, expiration_seconds: int = MAX_PRESIGNED_SECONDS) -> str:
        """
        Get a URL a browser can load the object from

        Args:
            key: The S3 key of the file
            expiration_seconds: URL expiration time in seconds when presigning

        Raises:
            UploadError: If URL generation fails
        """
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"

        try:
            return await run_in_threadpool(
                self.s3.generate_presigned_url,
                'get_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key
                },
                ExpiresIn=min(expiration_seconds, MAX_PRESIGNED_SECONDS)
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 error generating URL for %s: %s", key, e)
            raise UploadError(f"Failed to get a URL for {key}") from e
