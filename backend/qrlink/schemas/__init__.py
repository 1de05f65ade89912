"""
Pydantic schemas for API request/response validation.
"""
from qrlink.schemas.presign import (
    PresignRequest,
    PresignResponse,
    VerifyResponse,
)
from qrlink.schemas.shortlink import (
    ShortLinkCreate,
    ShortLinkCreateResponse,
    ShortLinkRecord,
)
from qrlink.schemas.scan import (
    ScanInspectRequest,
    ScanInspection,
)

__all__ = [
    "PresignRequest",
    "PresignResponse",
    "VerifyResponse",
    "ShortLinkCreate",
    "ShortLinkCreateResponse",
    "ShortLinkRecord",
    "ScanInspectRequest",
    "ScanInspection",
]
