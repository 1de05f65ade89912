"""
Storage module for Cloudflare R2 (S3-compatible) and Cloudflare KV.

R2 uploads/downloads go directly between browser and bucket using
presigned URLs. KV holds short-link records with a fixed TTL.
"""
from qrlink.storage.r2_client import get_r2_client, R2Client, StoredObject
from qrlink.storage.presign import PresignService, UploadGrant, DownloadGrant
from qrlink.storage.kv_client import KVClient

__all__ = [
    "get_r2_client",
    "R2Client",
    "StoredObject",
    "PresignService",
    "UploadGrant",
    "DownloadGrant",
    "KVClient",
]
