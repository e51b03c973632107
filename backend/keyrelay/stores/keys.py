"""Redis adapter for API keys and their display names"""
import asyncio
from typing import Dict, Tuple

import redis.asyncio as redis

from keyrelay.config import Settings


class KeyStore:
    """Pass-through hash commands over the active-key and key-name namespaces.

    No caching and no transactions: each method maps to one or two Redis
    commands, and Redis errors propagate to the caller.
    """

    def __init__(self, client: redis.Redis, settings: Settings):
        self.client = client
        self.keys_hash = settings.API_KEYS_HASH
        self.names_hash = settings.API_KEY_NAMES_HASH

    async def list_all(self) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Return ``(jti -> token, jti -> name)``"""
        tokens, names = await asyncio.gather(
            self.client.hgetall(self.keys_hash),
            self.client.hgetall(self.names_hash),
        )
        return tokens, names

    async def create(self, jti: str, token: str, name: str) -> bool:
        # No rollback if only one write lands
        await asyncio.gather(
            self.client.hset(self.keys_hash, jti, token),
            self.client.hset(self.names_hash, jti, name),
        )
        return True

    async def rename(self, jti: str, name: str) -> bool:
        """Write a new name; True when an existing name was overwritten"""
        added = await self.client.hset(self.names_hash, jti, name)
        return added == 0

    async def revoke(self, jti: str) -> bool:
        """Delete both entries; True only when each namespace removed exactly one"""
        removed_key, removed_name = await asyncio.gather(
            self.client.hdel(self.keys_hash, jti),
            self.client.hdel(self.names_hash, jti),
        )
        return removed_key == 1 and removed_name == 1

    async def exists(self, jti: str) -> bool:
        return bool(await self.client.hexists(self.keys_hash, jti))
