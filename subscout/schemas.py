"""Request bodies for the HTTP API."""

from typing import Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


def sanitize_string(value: str, max_length: int = 10000) -> str:
    """Trim, drop angle brackets, and cap length."""
    return value.strip().replace("<", "").replace(">", "")[:max_length]


class CreateAppRequest(BaseModel):
    url: str = Field(..., max_length=2048)

    @field_validator("url")
    @classmethod
    def must_be_http_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Must be a valid HTTP/HTTPS URL")
        return value


class SubredditUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_monitored: Optional[bool] = Field(None, alias="isMonitored")
    activity: Optional[Literal["high", "medium", "low"]] = None
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("is_monitored", "activity")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class GeneratePostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subreddit_id: str = Field(..., alias="subredditId", min_length=1)
    app_id: str = Field(..., alias="appId", min_length=1)


class PostUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = Field(None, min_length=1, max_length=40000)
    status: Optional[Literal["draft", "approved", "published"]] = None
    reddit_post_id: Optional[str] = Field(None, alias="redditPostId", max_length=32)

    @field_validator("status")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value

    @field_validator("title", "content")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("must not be null")
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    limit: int = Field(10, ge=1, le=100)

    @field_validator("query")
    @classmethod
    def clean_query(cls, value: str) -> str:
        value = sanitize_string(value, max_length=500)
        if not value:
            raise ValueError("Search query is required")
        return value
