"""
dev.to Platform Adapter
=======================

Publishes markdown articles via the Forem (dev.to) API.
Requires an API key from dev.to/settings/extensions.
"""
from typing import Any

import httpx

from keyrelay.platforms import raise_for_platform_status
from keyrelay.schemas.publish import Article


async def publish_article(client: httpx.AsyncClient, api_base: str, api_key: str, article: Article) -> Any:
    """
    Create an article on dev.to.

    Returns:
        The created article as returned by dev.to.

    Raises:
        PlatformError: dev.to answered with a non-2xx status.
    """
    response = await client.post(
        f"{api_base}/articles",
        headers={"api-key": api_key},
        json={
            "article": {
                "title": article.title,
                "body_markdown": article.content,
                "tags": article.tags,
                "published": not article.is_draft,
            }
        },
    )
    raise_for_platform_status(response)
    return response.json()
