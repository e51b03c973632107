"""Redis adapter for per-key media credentials"""
from typing import Dict, Optional

import redis.asyncio as redis

from keyrelay.config import Settings


def media_key_id(jti: str, label: str) -> str:
    """Composite hash field that scopes a label to its owning key"""
    return f"{jti}:{label}"


class MediaKeyStore:
    """Hash commands over the media-key namespace, fields named ``{jti}:{label}``"""

    def __init__(self, client: redis.Redis, settings: Settings):
        self.client = client
        self.hash = settings.MEDIA_KEYS_HASH

    async def put(self, jti: str, label: str, value: str) -> bool:
        await self.client.hset(self.hash, media_key_id(jti, label), value)
        return True

    async def get(self, jti: str, label: str) -> Optional[str]:
        return await self.client.hget(self.hash, media_key_id(jti, label))

    async def list(self, jti: str) -> Dict[str, str]:
        """Return ``label -> value`` for one owner.

        Scans every media key in the namespace and filters by prefix, so the
        cost grows with the total number of stored media keys.
        """
        prefix = media_key_id(jti, "")
        everything = await self.client.hgetall(self.hash)
        return {
            field[len(prefix):]: value
            for field, value in everything.items()
            if field.startswith(prefix)
        }

    async def delete(self, jti: str, label: str) -> bool:
        removed = await self.client.hdel(self.hash, media_key_id(jti, label))
        return removed == 1
