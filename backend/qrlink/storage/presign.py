"""
Presigned URL generation service.

Handles the business logic behind POST /api/r2/presign.

Flow:
1. Client requests a PUT URL with the original filename, content type and size
2. Backend picks the object key (timestamp + original extension)
3. Backend signs a PUT URL for that key and returns URL + key
4. Client uploads directly to R2 using the presigned URL
5. Client later asks for a GET URL (or builds the public URL) from the key

Nothing is persisted: validity is carried entirely by the URL signature.
"""
import time
import logging
from dataclasses import dataclass
from typing import Optional

from qrlink.config import settings
from qrlink.errors import ValidationError
from qrlink.storage.r2_client import R2Client
from qrlink.utils.logging import log_presign_issued
from qrlink.utils.metrics import presigned_urls_total

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


@dataclass
class UploadGrant:
    """A minted upload permission. Never stored."""
    url: str
    key: str
    content_type: str
    size_bytes: int
    expires_in: int


@dataclass
class DownloadGrant:
    """A download URL; expires_in is None for public-domain URLs."""
    url: str
    key: str
    expires_in: Optional[int]


class PresignService:
    """
    Service for handling presigned upload and download operations.

    Responsibilities:
    - Validate upload size
    - Choose object keys
    - Create presigned URLs
    """

    @staticmethod
    def get_extension(filename: str) -> str:
        """
        Get the extension of the client-provided filename.

        Args:
            filename: Original name, e.g. "photo.png"

        Returns:
            Everything from the last dot (".png"), or "" without a dot
        """
        if '.' not in filename:
            return ''
        return filename[filename.rindex('.'):]

    @staticmethod
    def generate_object_key(filename: str, timestamp_ms: Optional[int] = None) -> str:
        """
        Generate the object key for an upload.

        Pattern: {unix_ms_timestamp}{ext}

        The client filename only contributes its extension, never the key
        itself. Two uploads in the same millisecond with the same extension
        map to the same key.
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return f"{timestamp_ms}{PresignService.get_extension(filename)}"

    @staticmethod
    def create_upload(
        r2: R2Client,
        filename: str,
        content_type: Optional[str],
        size_bytes: Optional[int],
    ) -> UploadGrant:
        """
        Create a presigned upload URL.

        Args:
            r2: Storage client
            filename: Original filename (extension source only)
            content_type: MIME type, defaults to application/octet-stream
            size_bytes: Declared size; required and non-zero

        Raises:
            ValidationError: size missing or above the ceiling
            ConfigError / UpstreamError: from the storage client
        """
        if not size_bytes:
            raise ValidationError("File size is required for upload")

        content_type = content_type or DEFAULT_CONTENT_TYPE
        object_key = PresignService.generate_object_key(filename)

        url = r2.generate_presigned_upload_url(object_key, content_type, size_bytes)

        presigned_urls_total.labels(action="put").inc()
        log_presign_issued(
            logger,
            action="put",
            key=object_key,
            expires_in=settings.upload_url_expiration,
            size_bytes=size_bytes,
            content_type=content_type,
        )

        return UploadGrant(
            url=url,
            key=object_key,
            content_type=content_type,
            size_bytes=size_bytes,
            expires_in=settings.upload_url_expiration,
        )

    @staticmethod
    def create_download(r2: R2Client, object_key: str) -> DownloadGrant:
        """Create a download URL for an existing key."""
        url = r2.get_download_url(object_key)
        expires_in = None if settings.r2_public_domain else settings.download_url_expiration

        presigned_urls_total.labels(action="get").inc()
        log_presign_issued(logger, action="get", key=object_key, expires_in=expires_in)

        return DownloadGrant(url=url, key=object_key, expires_in=expires_in)
