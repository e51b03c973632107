"""API key issuance, listing, renaming and revocation"""
from typing import List, Optional, Tuple

from keyrelay.config import Settings
from keyrelay.schemas.keys import IssuedKey, KeyDetails, TokenPayload
from keyrelay.stores.keys import KeyStore
from keyrelay.utils.jwt_utils import (
    TokenDecodeError,
    decode_token,
    encode_token,
    get_signing_secret,
    new_token_payload,
)
from keyrelay.utils.logger import logger

UNNAMED_KEY = "Unnamed Key"


class KeyService:
    """Orchestrates key records over :class:`KeyStore`.

    Admin authorisation is enforced by the ``require_admin`` dependency before
    any of these methods run.
    """

    def __init__(self, store: KeyStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def issue(self, name: Optional[str] = None) -> IssuedKey:
        """Create, sign and persist a new key. The token is returned once."""
        name = name or self.settings.DEFAULT_KEY_NAME
        payload = new_token_payload(
            limit=self.settings.DEFAULT_RATE_LIMIT,
            timeframe=self.settings.DEFAULT_RATE_TIMEFRAME,
        )
        token = encode_token(
            payload,
            get_signing_secret(self.settings),
            algorithm=self.settings.JWT_ALGORITHM,
        )
        await self.store.create(payload.jti, token, name)

        logger.info(f"Issued API key: {payload.jti}", extra={"jti": payload.jti, "action": "issue_key"})
        return IssuedKey(token=token, name=name, jti=payload.jti)

    async def list(self) -> List[Tuple[str, KeyDetails]]:
        """Every active key with its decoded payload and display name"""
        tokens, names = await self.store.list_all()

        api_keys = []
        for jti, token in tokens.items():
            try:
                payload = decode_token(token)
            except TokenDecodeError:
                logger.warning(f"Skipping undecodable stored key: {jti}", extra={"jti": jti, "action": "list_keys"})
                continue
            details = KeyDetails(**payload.model_dump(), name=names.get(jti) or UNNAMED_KEY)
            api_keys.append((token, details))
        return api_keys

    async def rename(self, token: str, name: str) -> bool:
        """Rename the key behind ``token``. Revoked keys are not rejected.

        Raises:
            TokenDecodeError: ``token`` is malformed.
        """
        payload = decode_token(token)
        renamed = await self.store.rename(payload.jti, name)

        logger.info(f"Renamed API key: {payload.jti}", extra={"jti": payload.jti, "action": "rename_key"})
        return renamed

    async def revoke(self, token_or_jti: str) -> bool:
        """Delete a key given its token or its bare ``jti``.

        Raises:
            TokenDecodeError: a dotted (token-shaped) value is malformed.
        """
        jti = resolve_jti(token_or_jti)
        done = await self.store.revoke(jti)

        logger.info(f"Revoked API key: {jti}", extra={"jti": jti, "action": "revoke_key"})
        return done

    async def authenticate(self, api_key: str) -> Optional[TokenPayload]:
        """Return the payload when ``api_key`` names an active key, else ``None``"""
        try:
            payload = decode_token(api_key)
        except TokenDecodeError:
            return None

        if not await self.store.exists(payload.jti):
            return None
        return payload


def resolve_jti(token_or_jti: str) -> str:
    """Tokens always contain dots; generated key ids never do"""
    if "." in token_or_jti:
        return decode_token(token_or_jti).jti
    return token_or_jti
