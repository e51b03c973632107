"""API key schemas"""
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """Claims carried by an API key token"""

    jti: str = Field(..., min_length=1, description="Unique key identifier")
    iat: Optional[int] = Field(None, description="Issued-at, seconds since epoch")
    limit: int = Field(100, description="Requests allowed per timeframe (informational)")
    timeframe: int = Field(60, description="Rate-limit window in seconds (informational)")


class KeyCreate(BaseModel):
    """Schema for issuing a new API key"""

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Display name")


class KeyRename(BaseModel):
    """Schema for renaming an API key"""

    key: str = Field(..., min_length=1, description="The API key token")
    name: str = Field(..., min_length=1, max_length=255, description="New display name")


class KeyDetails(TokenPayload):
    """Token payload plus the key's display name"""

    name: str


class IssuedKey(BaseModel):
    """Schema returned once at issuance (token is never shown again outside listings)"""

    done: bool = True
    token: str = Field(..., description="API key - save securely!")
    name: str
    jti: str


class KeyListResponse(BaseModel):
    apiKeys: List[Tuple[str, KeyDetails]]


class KeyUpdateResponse(BaseModel):
    done: bool
    message: str


class KeyRevokeResponse(BaseModel):
    done: bool
