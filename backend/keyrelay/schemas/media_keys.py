"""Media key schemas"""
from typing import Dict

from pydantic import BaseModel, Field


class MediaKeyPut(BaseModel):
    """Schema for storing a media key under the caller's API key"""

    key: str = Field(..., min_length=1, max_length=255, description="Label, e.g. DEV_TO_APIKEY")
    value: str = Field(..., min_length=1, description="Secret value")


class MediaKeyListResponse(BaseModel):
    mediaKeys: Dict[str, str]


class MediaKeyUpdateResponse(BaseModel):
    done: bool
    message: str
