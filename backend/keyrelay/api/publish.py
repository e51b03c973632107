"""Article publishing endpoints"""
from fastapi import APIRouter, Depends, HTTPException, status

from keyrelay.api.deps import (
    get_media_key_service,
    get_publish_service,
    require_api_key,
    require_publish_password,
)
from keyrelay.config import Settings, get_settings
from keyrelay.schemas.keys import TokenPayload
from keyrelay.schemas.publish import Article, MultiPublishRequest, MultiPublishResponse, PublishResponse
from keyrelay.services.media_keys import MediaKeyService
from keyrelay.services.publish import (
    SUPPORTED_PLATFORMS,
    MediaKeyCredentials,
    PublishService,
    SettingsCredentials,
)

router = APIRouter(tags=["publish"])


@router.post("/publish/{platform}", response_model=PublishResponse)
async def publish_to_platform(
    platform: str,
    article: Article,
    publisher: PublishService = Depends(get_publish_service),
    media_keys: MediaKeyService = Depends(get_media_key_service),
    caller: TokenPayload = Depends(require_api_key)
):
    """
    Publish an article to one platform with the caller's stored credential

    Supported platforms:
    - devto: uses the caller's DEV_TO_APIKEY media key
    - medium: uses the caller's MEDIUM_APIKEY media key

    A platform rejection returns 500 with the platform's error body as detail.
    """
    if platform not in SUPPORTED_PLATFORMS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unsupported media type: {platform}"
        )

    [result] = await publisher.publish(article, [platform], MediaKeyCredentials(media_keys, caller.jti))
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.error
        )

    return PublishResponse(article=result.article)


@router.post("/publish-multi", response_model=MultiPublishResponse, response_model_exclude_none=True)
async def publish_multi(
    request: MultiPublishRequest,
    publisher: PublishService = Depends(get_publish_service),
    settings: Settings = Depends(get_settings),
    _: None = Depends(require_publish_password)
):
    """
    Publish an article to several platforms concurrently with shared credentials

    Always returns one result per requested platform; a failing platform is
    reported in its own result and never affects the others.
    """
    article = Article(**request.model_dump(exclude={"platforms"}))
    results = await publisher.publish(article, request.platforms, SettingsCredentials(settings))
    return MultiPublishResponse(results=results)
