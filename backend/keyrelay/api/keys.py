"""API key management endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from keyrelay.api.deps import get_key_service, require_admin
from keyrelay.schemas.keys import (
    IssuedKey,
    KeyCreate,
    KeyListResponse,
    KeyRename,
    KeyRevokeResponse,
    KeyUpdateResponse,
)
from keyrelay.services.keys import KeyService
from keyrelay.utils.jwt_utils import TokenDecodeError

router = APIRouter(prefix="/keys", tags=["keys"])


@router.get("", response_model=KeyListResponse)
async def list_keys(
    keys: KeyService = Depends(get_key_service),
    _: str = Depends(require_admin)
):
    """
    List all API keys with their decoded payloads (Admin only)

    Keys without a stored name are reported as "Unnamed Key".
    """
    return KeyListResponse(apiKeys=await keys.list())


@router.put("", response_model=IssuedKey)
async def issue_key(
    key_data: Optional[KeyCreate] = None,
    keys: KeyService = Depends(get_key_service),
    _: str = Depends(require_admin)
):
    """
    Issue a new API key (Admin only)

    The token is only returned here; afterwards it is only visible in listings.
    """
    return await keys.issue(key_data.name if key_data else None)


@router.patch("", response_model=KeyUpdateResponse)
async def rename_key(
    key_data: KeyRename,
    keys: KeyService = Depends(get_key_service),
    _: str = Depends(require_admin)
):
    """
    Rename an API key (Admin only)

    ``done`` is true when an existing name was replaced.
    """
    try:
        done = await keys.rename(key_data.key, key_data.name)
    except TokenDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request")

    return KeyUpdateResponse(done=done, message="Key name updated successfully")


@router.delete("", response_model=KeyRevokeResponse)
async def revoke_key(
    key: str = Query(..., min_length=1, description="API key token or its jti"),
    keys: KeyService = Depends(get_key_service),
    _: str = Depends(require_admin)
):
    """
    Revoke an API key (Admin only)

    ``done`` is true only when both the key and its name were removed.
    """
    try:
        done = await keys.revoke(key)
    except TokenDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request")

    return KeyRevokeResponse(done=done)
