"""YouTube API schemas."""

from typing import Any, Literal, Optional
from pydantic import AliasChoices, BaseModel, Field

SearchType = Literal["video", "channel", "playlist"]
SearchOrder = Literal["relevance", "date", "rating", "viewCount"]


class SearchParams(BaseModel):
    """Query parameters for a YouTube search."""

    q: str = Field(..., min_length=1, max_length=500)
    type: SearchType = "video"
    order: SearchOrder = "relevance"
    max_results: int = Field(20, ge=1, le=50)
    page_token: Optional[str] = None


class PageInfo(BaseModel):
    """Result counts, read from the camelCase API payload."""

    total_results: int = Field(0, validation_alias=AliasChoices("totalResults", "total_results"))
    results_per_page: int = Field(0, validation_alias=AliasChoices("resultsPerPage", "results_per_page"))


class SearchResultItem(BaseModel):
    """A single search hit flattened for the client."""

    kind: SearchType
    id: str
    title: str
    description: str = ""
    channel_id: Optional[str] = None
    channel_title: Optional[str] = None
    published_at: Optional[str] = None
    thumbnail_url: Optional[str] = None
    url: str


class SearchResponse(BaseModel):
    """Schema for search results."""

    items: list[SearchResultItem]
    page_info: PageInfo
    next_page_token: Optional[str] = None
    prev_page_token: Optional[str] = None


class ChannelStatistics(BaseModel):
    """Channel counters; the API sends them as strings."""

    subscriber_count: Optional[int] = Field(None, validation_alias=AliasChoices("subscriberCount", "subscriber_count"))
    video_count: Optional[int] = Field(None, validation_alias=AliasChoices("videoCount", "video_count"))
    view_count: Optional[int] = Field(None, validation_alias=AliasChoices("viewCount", "view_count"))
    hidden_subscriber_count: bool = Field(False, validation_alias=AliasChoices("hiddenSubscriberCount", "hidden_subscriber_count"))


class ChannelInfo(BaseModel):
    """Schema for channel metadata."""

    id: str
    title: str
    description: str = ""
    custom_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    banner_url: Optional[str] = None
    statistics: Optional[ChannelStatistics] = None
    url: str


class ChannelResponse(BaseModel):
    """Schema for channel lookup results."""

    query: str
    items: list[ChannelInfo]


def pick_thumbnail(thumbnails: Optional[dict[str, Any]]) -> Optional[str]:
    """Prefer the medium thumbnail, falling back to the largest available."""
    if not thumbnails:
        return None
    for size in ("medium", "high", "default"):
        if size in thumbnails and thumbnails[size].get("url"):
            return thumbnails[size]["url"]
    return None
