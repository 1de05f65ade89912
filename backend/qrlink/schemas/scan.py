"""
Pydantic schemas for scan inspection.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional

from qrlink.schemas.shortlink import MAX_CONTENT_LENGTH


class ScanInspectRequest(BaseModel):
    """Decoded QR payload sent by the scanner."""
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class ScanInspection(BaseModel):
    """Classification of a scanned payload, one scan history entry."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str = Field(..., description="Scanned text, or the resolved short link content")
    is_url: bool
    extracted_url: Optional[str] = None
    short_code_url: Optional[str] = Field(None, description="Scanned short link, when one was resolved")
    is_r2_image: bool = False
    r2_key: Optional[str] = None
