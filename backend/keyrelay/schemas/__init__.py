"""Pydantic schemas for request/response validation"""
from keyrelay.schemas.keys import IssuedKey, KeyCreate, KeyDetails, KeyRename, TokenPayload
from keyrelay.schemas.media_keys import MediaKeyListResponse, MediaKeyPut, MediaKeyUpdateResponse
from keyrelay.schemas.publish import Article, MultiPublishRequest, MultiPublishResponse, PublishResult

__all__ = [
    "TokenPayload",
    "KeyCreate",
    "KeyRename",
    "KeyDetails",
    "IssuedKey",
    "MediaKeyPut",
    "MediaKeyListResponse",
    "MediaKeyUpdateResponse",
    "Article",
    "MultiPublishRequest",
    "MultiPublishResponse",
    "PublishResult",
]
