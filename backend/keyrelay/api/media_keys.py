"""Media key endpoints, scoped to the calling API key"""
from fastapi import APIRouter, Depends, Query

from keyrelay.api.deps import get_media_key_service, require_api_key
from keyrelay.schemas.keys import TokenPayload
from keyrelay.schemas.media_keys import MediaKeyListResponse, MediaKeyPut, MediaKeyUpdateResponse
from keyrelay.services.media_keys import MediaKeyService

router = APIRouter(prefix="/mediakeys", tags=["media keys"])


@router.get("", response_model=MediaKeyListResponse)
async def list_media_keys(
    media_keys: MediaKeyService = Depends(get_media_key_service),
    caller: TokenPayload = Depends(require_api_key)
):
    """List the caller's media keys as ``{label: value}``"""
    return MediaKeyListResponse(mediaKeys=await media_keys.list(caller.jti))


@router.put("", response_model=MediaKeyUpdateResponse)
async def put_media_key(
    media_key: MediaKeyPut,
    media_keys: MediaKeyService = Depends(get_media_key_service),
    caller: TokenPayload = Depends(require_api_key)
):
    """Store (or overwrite) a media key under the caller's API key"""
    done = await media_keys.put(caller.jti, media_key.key, media_key.value)
    return MediaKeyUpdateResponse(done=done, message="Media key stored successfully")


@router.delete("", response_model=MediaKeyUpdateResponse)
async def delete_media_key(
    key: str = Query(..., min_length=1, description="Media key label"),
    media_keys: MediaKeyService = Depends(get_media_key_service),
    caller: TokenPayload = Depends(require_api_key)
):
    """Delete one of the caller's media keys; ``done`` is false if it did not exist"""
    done = await media_keys.delete(caller.jti, key)
    return MediaKeyUpdateResponse(done=done, message="Media key deleted successfully")
