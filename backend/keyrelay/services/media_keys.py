"""Media key storage scoped to an owning API key"""
from typing import Dict, Optional

from keyrelay.stores.media_keys import MediaKeyStore
from keyrelay.utils.logger import logger


class MediaKeyService:
    """CRUD over :class:`MediaKeyStore` for an already-authenticated ``jti``"""

    def __init__(self, store: MediaKeyStore):
        self.store = store

    async def put(self, jti: str, label: str, value: str) -> bool:
        done = await self.store.put(jti, label, value)
        logger.info(f"Stored media key {label}", extra={"jti": jti, "action": "put_media_key"})
        return done

    async def get(self, jti: str, label: str) -> Optional[str]:
        return await self.store.get(jti, label)

    async def list(self, jti: str) -> Dict[str, str]:
        return await self.store.list(jti)

    async def delete(self, jti: str, label: str) -> bool:
        done = await self.store.delete(jti, label)
        logger.info(f"Deleted media key {label}", extra={"jti": jti, "action": "delete_media_key"})
        return done
