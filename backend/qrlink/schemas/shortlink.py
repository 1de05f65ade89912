"""
Pydantic schemas for short link endpoints.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Literal

MAX_CONTENT_LENGTH = 10000

LinkType = Literal["url", "text"]


class ShortLinkCreate(BaseModel):
    """Schema for creating a short link."""
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH, description="URL or arbitrary text")


class ShortLinkCreateResponse(BaseModel):
    """Schema for short link creation response."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code: str
    short_url: str


class ShortLinkRecord(BaseModel):
    """
    Record stored in KV under short:<code>.

    Serialized with camelCase keys, which is also the stored JSON shape.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str
    type: LinkType
    created_at: str = Field(..., description="ISO-8601 UTC timestamp")
