"""Publishing platform adapters"""
import json

import httpx


class PlatformError(Exception):
    """A platform rejected the request; the message carries its error body."""


def raise_for_platform_status(response: httpx.Response) -> None:
    """Raise :class:`PlatformError` with the platform's own error body on non-2xx"""
    if response.is_success:
        return
    try:
        detail = json.dumps(response.json())
    except ValueError:
        detail = response.text or f"HTTP {response.status_code}"
    raise PlatformError(detail)
