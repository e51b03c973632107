"""Multi-platform publish fan-out.

Every requested platform gets its own coroutine; all of them run concurrently
and each one turns its own failure into a :class:`PublishResult`, so a single
rejected platform never aborts its siblings.

Credentials are resolved per platform, inside that platform's coroutine:

- :class:`MediaKeyCredentials` reads the caller's stored media keys
  (``DEV_TO_APIKEY`` / ``MEDIUM_APIKEY``) for ``POST /publish/{platform}``.
- :class:`SettingsCredentials` reads ``DEV_TO_API_KEY`` / ``MEDIUM_API_KEY``
  from configuration for ``POST /publish-multi``.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

import httpx
from redis.exceptions import RedisError

from keyrelay.config import Settings
from keyrelay.middleware.monitoring import record_publish_result
from keyrelay.platforms import PlatformError, devto, medium
from keyrelay.schemas.publish import Article, PublishResult
from keyrelay.services.media_keys import MediaKeyService
from keyrelay.utils.logger import logger

DEVTO = "devto"
MEDIUM = "medium"

SUPPORTED_PLATFORMS = (DEVTO, MEDIUM)

# Media key labels holding per-key platform credentials
MEDIA_KEY_LABELS: Dict[str, str] = {
    DEVTO: "DEV_TO_APIKEY",
    MEDIUM: "MEDIUM_APIKEY",
}

_DISPLAY_NAMES: Dict[str, str] = {
    DEVTO: "DevTo",
    MEDIUM: "Medium",
}

# Reported in place of Redis error details
STORE_ERROR_MESSAGE = "An internal server error occurred"


class MissingCredentialError(Exception):
    """No credential is available for the requested platform."""


# ---------------------------------------------------------------------------
# Credential resolution
# ---------------------------------------------------------------------------

class CredentialResolver(Protocol):
    async def resolve(self, platform: str) -> str:
        ...


class MediaKeyCredentials:
    """Per-key credentials stored as media keys under the caller's ``jti``"""

    def __init__(self, media_keys: MediaKeyService, jti: str):
        self.media_keys = media_keys
        self.jti = jti

    async def resolve(self, platform: str) -> str:
        api_key = await self.media_keys.get(self.jti, MEDIA_KEY_LABELS[platform])
        if not api_key:
            raise MissingCredentialError(f"{_DISPLAY_NAMES[platform]} API key not found")
        return api_key


class SettingsCredentials:
    """Shared credentials from process configuration"""

    def __init__(self, settings: Settings):
        self.keys = {
            DEVTO: ("DEV_TO_API_KEY", settings.DEV_TO_API_KEY),
            MEDIUM: ("MEDIUM_API_KEY", settings.MEDIUM_API_KEY),
        }

    async def resolve(self, platform: str) -> str:
        setting_name, api_key = self.keys[platform]
        if not api_key:
            raise MissingCredentialError(f"{setting_name} not configured")
        return api_key


# ---------------------------------------------------------------------------
# Fan-out
# ---------------------------------------------------------------------------

class PublishService:
    """Relays one article to several platforms concurrently"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport
        self._publishers: Dict[str, Callable[[httpx.AsyncClient, str, Article], Awaitable[Any]]] = {
            DEVTO: lambda client, key, article: devto.publish_article(
                client, settings.DEVTO_API_BASE, key, article
            ),
            MEDIUM: lambda client, key, article: medium.publish_article(
                client, settings.MEDIUM_API_BASE, key, article
            ),
        }

    async def publish(
        self,
        article: Article,
        platforms: List[str],
        credentials: CredentialResolver,
    ) -> List[PublishResult]:
        """Publish to every platform and return one result per platform.

        Never raises for a platform failure; the returned list is in the same
        order as ``platforms``.
        """
        async with httpx.AsyncClient(transport=self.transport) as client:
            return list(await asyncio.gather(
                *(self._publish_one(client, platform, article, credentials) for platform in platforms)
            ))

    async def _publish_one(
        self,
        client: httpx.AsyncClient,
        platform: str,
        article: Article,
        credentials: CredentialResolver,
    ) -> PublishResult:
        try:
            publisher = self._publishers.get(platform)
            if publisher is None:
                raise PlatformError(f"Unsupported platform: {platform}")

            api_key = await credentials.resolve(platform)
            published = await publisher(client, api_key, article)
        except RedisError as exc:
            logger.error(
                f"Credential lookup for {platform} failed: {exc.__class__.__name__}",
                extra={"platform": platform, "action": "publish"},
                exc_info=True,
            )
            return self._failed(platform, STORE_ERROR_MESSAGE)
        except Exception as exc:
            error = str(exc) or exc.__class__.__name__
            logger.warning(
                f"Publish to {platform} failed",
                extra={"platform": platform, "action": "publish", "error": error},
            )
            return self._failed(platform, error)

        logger.info(f"Published to {platform}", extra={"platform": platform, "action": "publish"})
        record_publish_result(platform, success=True)
        return PublishResult(platform=platform, success=True, article=published)

    @staticmethod
    def _failed(platform: str, error: str) -> PublishResult:
        if platform in SUPPORTED_PLATFORMS:
            record_publish_result(platform, success=False)
        return PublishResult(platform=platform, success=False, error=error)
