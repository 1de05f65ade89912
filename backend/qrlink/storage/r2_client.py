"""
Cloudflare R2 / S3-compatible storage client.

Uses boto3 with S3-compatible API to interact with Cloudflare R2.
This is storage-provider agnostic - works with any S3-compatible storage.

Browsers upload and download directly against R2 using presigned URLs,
so file bytes never pass through this service. The one exception is
stream_object(), which backs the legacy "stream" download strategy.
"""
import logging
from dataclasses import dataclass
from typing import Iterator, Optional
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from qrlink.config import settings
from qrlink.errors import ConfigError, NotFoundError, UpstreamError, ValidationError
from qrlink.utils.logging import log_upstream_failure
from qrlink.utils.metrics import upstream_failures_total
from qrlink.utils.urls import get_r2_public_url

logger = logging.getLogger(__name__)

STREAM_CHUNK_SIZE = 64 * 1024

MISSING_OBJECT_CODES = ('404', 'NoSuchKey', 'NotFound')


@dataclass
class StoredObject:
    """An object fetched from the bucket, body not yet consumed."""
    content_type: str
    content_length: Optional[int]
    body: Iterator[bytes]


class R2Client:
    """
    S3-compatible client for Cloudflare R2.

    Provides presigned URL generation for direct uploads and downloads.
    """

    def __init__(self):
        """
        Initialize R2 client with boto3.

        Uses environment variables for configuration. An unconfigured
        client is still constructed; its operations raise ConfigError.
        """
        self._client = None

        endpoint = settings.resolved_r2_endpoint
        if not all([endpoint, settings.r2_access_key, settings.r2_secret_key]):
            logger.warning(
                "R2 storage not configured. "
                "Set R2_ACCOUNT_ID (or R2_ENDPOINT), R2_ACCESS_KEY, and R2_SECRET_KEY."
            )
            return

        # Use signature_version='s3v4' for R2 compatibility
        self._client = boto3.client(
            's3',
            endpoint_url=endpoint,
            aws_access_key_id=settings.r2_access_key,
            aws_secret_access_key=settings.r2_secret_key,
            region_name=settings.r2_region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}  # R2 uses path-style
            )
        )
        logger.info(f"R2 client initialized for bucket: {settings.r2_bucket}")

    @property
    def is_configured(self) -> bool:
        """Check if R2 client is properly configured."""
        return self._client is not None

    @property
    def bucket(self) -> str:
        """Get configured bucket name."""
        return settings.r2_bucket

    def _require_client(self):
        if not self.is_configured:
            logger.error("R2 storage not configured, cannot complete request")
            raise ConfigError("Storage service not configured")
        return self._client

    def _upstream_error(self, operation: str, error: Exception) -> UpstreamError:
        upstream_failures_total.labels(service="r2").inc()
        log_upstream_failure(
            logger, service="r2", operation=operation, error=str(error), include_traceback=True
        )
        return UpstreamError(f"R2 {operation} failed: {error}")

    def generate_presigned_upload_url(
        self,
        object_key: str,
        content_type: str,
        size_bytes: int,
        expiration: Optional[int] = None
    ) -> str:
        """
        Generate a presigned PUT URL for direct upload.

        Args:
            object_key: The S3 object key (path in bucket)
            content_type: MIME type the browser will send
            size_bytes: Declared file size, checked against the upload ceiling
            expiration: URL expiration in seconds (default from settings)

        Returns:
            Presigned URL string

        Raises:
            ValidationError: size_bytes exceeds max_upload_size
            ConfigError: credentials are not configured
            UpstreamError: boto3 failed to sign the request
        """
        if size_bytes > settings.max_upload_size:
            raise ValidationError(
                f"File size exceeds limit of {settings.max_upload_size / 1024 / 1024:g}MB"
            )

        client = self._require_client()

        if expiration is None:
            expiration = settings.upload_url_expiration

        try:
            url = client.generate_presigned_url(
                ClientMethod='put_object',
                Params={
                    'Bucket': self.bucket,
                    'Key': object_key,
                    'ContentType': content_type,
                },
                ExpiresIn=expiration
            )
        except (ClientError, BotoCoreError) as e:
            raise self._upstream_error("presign_put", e) from e

        logger.debug(f"Generated presigned URL for {object_key}")
        return url

    def get_download_url(self, object_key: str, expiration: Optional[int] = None) -> str:
        """
        Get a URL the browser can download the object from.

        With a public domain configured the URL is a plain static link
        (no signature, never expires). Otherwise it is a presigned GET URL
        valid for download_url_expiration seconds.
        """
        if settings.r2_public_domain:
            return get_r2_public_url(object_key)

        client = self._require_client()

        if expiration is None:
            expiration = settings.download_url_expiration

        try:
            url = client.generate_presigned_url(
                ClientMethod='get_object',
                Params={
                    'Bucket': self.bucket,
                    'Key': object_key,
                },
                ExpiresIn=expiration
            )
        except (ClientError, BotoCoreError) as e:
            raise self._upstream_error("presign_get", e) from e

        logger.debug(f"Generated presigned read URL for {object_key} (expires in {expiration}s)")
        return url

    def stream_object(self, object_key: str) -> StoredObject:
        """
        Fetch an object for proxying through the API.

        Raises:
            NotFoundError: the object does not exist
            ConfigError: credentials are not configured
            UpstreamError: any other provider failure
        """
        client = self._require_client()

        try:
            response = client.get_object(Bucket=self.bucket, Key=object_key)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in MISSING_OBJECT_CODES:
                raise NotFoundError("File not found") from e
            raise self._upstream_error("get_object", e) from e
        except BotoCoreError as e:
            raise self._upstream_error("get_object", e) from e

        body = response.get('Body')
        if body is None:
            raise NotFoundError("File not found")

        return StoredObject(
            content_type=response.get('ContentType') or 'application/octet-stream',
            content_length=response.get('ContentLength'),
            body=body.iter_chunks(chunk_size=STREAM_CHUNK_SIZE),
        )


# Singleton instance
_r2_client: Optional[R2Client] = None


def get_r2_client() -> R2Client:
    """
    Get the singleton R2 client instance.

    Returns:
        R2Client instance (may or may not be configured)
    """
    global _r2_client
    if _r2_client is None:
        _r2_client = R2Client()
    return _r2_client
