"""API dependencies for authentication and service wiring.

Three independent credentials guard the API:

- ``X-Login-Passwd``: shared admin secret for ``/keys`` (``LOGIN_PASSWD``)
- ``X-API-Key``: an issued API key token for ``/mediakeys`` and ``/publish/{platform}``
- ``X-Publish-Password``: shared secret for ``/publish-multi`` (``PUBLISH_PASSWORD``)

Every check runs before any store access; failures raise 401.
"""
import secrets
from typing import Optional

import httpx
import redis.asyncio as redis
from fastapi import Depends, Header, HTTPException, status

from keyrelay.config import Settings, get_settings
from keyrelay.database import get_redis
from keyrelay.middleware.monitoring import record_auth_failure
from keyrelay.schemas.keys import TokenPayload
from keyrelay.services.keys import KeyService
from keyrelay.services.media_keys import MediaKeyService
from keyrelay.services.publish import PublishService
from keyrelay.stores.keys import KeyStore
from keyrelay.stores.media_keys import MediaKeyStore
from keyrelay.utils.logger import logger


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------

def get_key_service(
    client: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> KeyService:
    return KeyService(KeyStore(client, settings), settings)


def get_media_key_service(
    client: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> MediaKeyService:
    return MediaKeyService(MediaKeyStore(client, settings))


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport for platform calls; ``None`` means httpx's default"""
    return None


def get_publish_service(
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> PublishService:
    return PublishService(settings, transport=transport)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _secret_matches(provided: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time compare; an unconfigured secret never matches"""
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())


def _unauthorized(detail: str, auth_type: str) -> HTTPException:
    record_auth_failure(auth_type)
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


# ---------------------------------------------------------------------------
# require_admin
# ---------------------------------------------------------------------------

def require_admin(
    x_login_passwd: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Require the shared admin secret in ``X-Login-Passwd``."""
    if not _secret_matches(x_login_passwd, settings.LOGIN_PASSWD):
        logger.info("Admin authentication failed", extra={"action": "require_admin"})
        raise _unauthorized("Unauthorized", "admin")
    return "admin"


# ---------------------------------------------------------------------------
# require_api_key
# ---------------------------------------------------------------------------

async def require_api_key(
    x_api_key: Optional[str] = Header(None),
    keys: KeyService = Depends(get_key_service),
) -> TokenPayload:
    """Require an active API key in ``X-API-Key``.

    Malformed and revoked keys are indistinguishable to the caller.
    Returns the decoded token payload; its ``jti`` scopes all further access.
    """
    if not x_api_key:
        raise _unauthorized("API key required", "api_key")

    payload = await keys.authenticate(x_api_key)
    if payload is None:
        raise _unauthorized("Invalid API key", "api_key")
    return payload


# ---------------------------------------------------------------------------
# require_publish_password
# ---------------------------------------------------------------------------

def require_publish_password(
    x_publish_password: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Require the shared publish secret in ``X-Publish-Password``."""
    if not _secret_matches(x_publish_password, settings.PUBLISH_PASSWORD):
        raise _unauthorized("Invalid password", "publish")
