"""API key token codec: HS256 signing and unverified decoding"""
import json
import secrets
import time
from typing import Any, Dict, Optional

from jose import jwt
from jose.utils import base64url_decode
from pydantic import ValidationError

from keyrelay.config import Settings
from keyrelay.schemas.keys import TokenPayload
from keyrelay.utils.logger import logger

# ---------------------------------------------------------------------------
# Signing secret
# ---------------------------------------------------------------------------

_generated_secret: Optional[str] = None


class TokenDecodeError(ValueError):
    """Raised when a presented token cannot be parsed into a payload."""


def get_signing_secret(settings: Settings) -> str:
    """Return the HS256 secret, generating a per-process one on first use if unset.

    Tokens signed with a generated secret stay usable after a restart because
    the signature is never checked; only the ``jti`` lookup authorises a key.
    """
    global _generated_secret

    if settings.API_KEYS_JWT_SECRET_KEY:
        return settings.API_KEYS_JWT_SECRET_KEY

    if _generated_secret is None:
        _generated_secret = secrets.token_urlsafe(32)
        logger.warning(
            "API_KEYS_JWT_SECRET_KEY not set; generated a signing secret for this session. "
            "Set API_KEYS_JWT_SECRET_KEY in .env to sign keys with a stable secret."
        )
    return _generated_secret


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def generate_jti() -> str:
    """Generate a unique, 21-character url-safe key identifier"""
    return secrets.token_urlsafe(16)[:21]


def new_token_payload(limit: int, timeframe: int) -> TokenPayload:
    """Build the payload for a freshly issued key"""
    return TokenPayload(
        jti=generate_jti(),
        iat=int(time.time()),
        limit=limit,
        timeframe=timeframe,
    )


def encode_token(payload: TokenPayload, secret: str, algorithm: str = "HS256") -> str:
    """Sign a payload and return the compact token string.

    Signing errors are not caught; they surface as internal errors.
    """
    claims: Dict[str, Any] = payload.model_dump()
    return jwt.encode(claims, secret, algorithm=algorithm)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_token(token: str) -> TokenPayload:
    """Parse the claims segment of a token WITHOUT verifying its signature.

    Only the middle segment is read; the header and signature segments are
    never inspected. The result is only trustworthy once the caller has
    confirmed that its ``jti`` is present in the active-key store.

    Raises:
        TokenDecodeError: the token is malformed or carries no ``jti``.
    """
    segments = token.split(".")
    if len(segments) != 3:
        raise TokenDecodeError("Malformed token: expected three segments")

    try:
        # binascii, unicode and JSON errors are all ValueErrors
        claims = json.loads(base64url_decode(segments[1].encode("ascii")))
    except ValueError as exc:
        raise TokenDecodeError(f"Malformed token: {exc}") from exc

    try:
        return TokenPayload.model_validate(claims)
    except ValidationError as exc:
        raise TokenDecodeError("Token payload is missing required claims") from exc
