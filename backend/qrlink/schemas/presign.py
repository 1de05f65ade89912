"""
Pydantic schemas for the R2 presign endpoint.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Literal, Optional


class PresignRequest(BaseModel):
    """Request schema for presigned URL generation."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "action": "put",
                "key": "photo.png",
                "contentType": "image/png",
                "size": 1048576
            }
        }
    )

    action: Literal["put", "get", "verify"] = Field(..., description="put, get, or verify")
    key: str = Field(..., min_length=1, description="Filename for put, object key for get")
    content_type: Optional[str] = Field(None, description="MIME type of the upload")
    size: Optional[int] = Field(None, ge=0, description="File size in bytes, required for put")


class PresignResponse(BaseModel):
    """Response schema for put/get presign."""
    url: str = Field(..., description="Presigned or public URL")
    key: str = Field(..., description="Object key in storage bucket")


class VerifyResponse(BaseModel):
    """Response schema for the verify action."""
    status: Literal["ok"] = "ok"
