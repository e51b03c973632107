"""
Medium Platform Adapter
=======================

Publishes markdown posts via the Medium official API.
Requires an integration token from medium.com/me/settings/security.
"""
from typing import Any

import httpx

from keyrelay.platforms import PlatformError, raise_for_platform_status
from keyrelay.schemas.publish import Article


async def _get_user_id(client: httpx.AsyncClient, api_base: str, headers: dict) -> str:
    """Fetch the authenticated user's Medium ID (posts are created under it)."""
    response = await client.get(f"{api_base}/me", headers=headers)
    raise_for_platform_status(response)

    user_id = (response.json().get("data") or {}).get("id")
    if not user_id:
        raise PlatformError("Could not fetch Medium user ID")
    return user_id


async def publish_article(client: httpx.AsyncClient, api_base: str, token: str, article: Article) -> Any:
    """
    Create a post on Medium, as a draft when ``article.is_draft`` is set.

    Returns:
        The created post as returned by Medium.

    Raises:
        PlatformError: the user lookup or the publish call was rejected.
    """
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/json",
    }
    user_id = await _get_user_id(client, api_base, headers)

    response = await client.post(
        f"{api_base}/users/{user_id}/posts",
        headers=headers,
        json={
            "title": article.title,
            "contentFormat": "markdown",
            "content": article.content,
            "tags": article.tags,
            "publishStatus": "draft" if article.is_draft else "public",
        },
    )
    raise_for_platform_status(response)
    return response.json()
