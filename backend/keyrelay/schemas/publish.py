"""Publishing schemas"""
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class Article(BaseModel):
    """Article payload relayed to publishing platforms"""

    title: str = Field(..., min_length=1, description="Article title")
    content: str = Field(..., min_length=1, description="Article body in markdown")
    tags: List[str] = Field(..., description="Platform tags")
    is_draft: bool = Field(False, description="Create as draft instead of publishing")


class MultiPublishRequest(Article):
    """Article plus the platforms to publish it on"""

    platforms: List[str] = Field(..., min_length=1, description="Target platforms, e.g. ['devto', 'medium']")

    @field_validator("platforms")
    @classmethod
    def dedupe_platforms(cls, platforms: List[str]) -> List[str]:
        """Collapse repeated platforms, keeping first-seen order"""
        return list(dict.fromkeys(platforms))


class PublishResult(BaseModel):
    """Outcome of publishing to a single platform"""

    platform: str
    success: bool
    article: Optional[Any] = None
    error: Optional[str] = None


class PublishResponse(BaseModel):
    done: bool = True
    article: Any


class MultiPublishResponse(BaseModel):
    results: List[PublishResult]
