"""YouTube search and channel routes, authenticated with the user's stored key."""

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import ApiKeyServiceDep, CurrentUserId
from app.api.errors import HANDLED_ERRORS, http_error
from app.core.youtube.identifiers import build_youtube_url, extract_channel_identifier
from app.models.schemas.youtube import (
    ChannelInfo,
    ChannelResponse,
    ChannelStatistics,
    PageInfo,
    SearchParams,
    SearchResponse,
    SearchResultItem,
    pick_thumbnail,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/youtube", tags=["youtube"])

_ID_FIELDS = {"video": "videoId", "channel": "channelId", "playlist": "playlistId"}


def _search_item(raw: dict[str, Any]) -> Optional[SearchResultItem]:
    raw_id = raw.get("id") or {}
    kind = raw_id.get("kind", "").split("#")[-1]
    item_id = raw_id.get(_ID_FIELDS.get(kind, ""))
    if not item_id:
        return None
    snippet = raw.get("snippet") or {}
    return SearchResultItem(
        kind=kind,
        id=item_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        channel_id=snippet.get("channelId"),
        channel_title=snippet.get("channelTitle"),
        published_at=snippet.get("publishedAt"),
        thumbnail_url=pick_thumbnail(snippet.get("thumbnails")),
        url=build_youtube_url(kind, item_id),
    )


def _channel_info(raw: dict[str, Any]) -> ChannelInfo:
    snippet = raw.get("snippet") or {}
    branding = raw.get("brandingSettings") or {}
    statistics = raw.get("statistics")
    return ChannelInfo(
        id=raw["id"],
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        custom_url=snippet.get("customUrl"),
        thumbnail_url=pick_thumbnail(snippet.get("thumbnails")),
        banner_url=(branding.get("image") or {}).get("bannerExternalUrl"),
        statistics=ChannelStatistics.model_validate(statistics) if statistics else None,
        url=build_youtube_url("channel", raw["id"]),
    )


@router.get("/search", response_model=SearchResponse)
async def search(
    params: Annotated[SearchParams, Depends()],
    user_id: CurrentUserId,
    service: ApiKeyServiceDep,
):
    """Search videos, channels or playlists."""
    try:
        async with await service.open_youtube_client(user_id) as client:
            data = await client.search(
                q=params.q,
                type=params.type,
                order=params.order,
                max_results=params.max_results,
                page_token=params.page_token,
            )
    except HANDLED_ERRORS as e:
        raise http_error(e)

    items = [item for item in map(_search_item, data.get("items", [])) if item is not None]
    return SearchResponse(
        items=items,
        page_info=PageInfo.model_validate(data.get("pageInfo") or {}),
        next_page_token=data.get("nextPageToken"),
        prev_page_token=data.get("prevPageToken"),
    )


@router.get("/channels", response_model=ChannelResponse)
async def get_channel(
    user_id: CurrentUserId,
    service: ApiKeyServiceDep,
    channel: str = Query(..., min_length=1, description="Channel ID, channel URL or @handle"),
):
    """Look up channel metadata."""
    identifier = extract_channel_identifier(channel)
    if not identifier:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Channel is required")

    try:
        async with await service.open_youtube_client(user_id) as client:
            data = await client.get_channel(identifier)
    except HANDLED_ERRORS as e:
        raise http_error(e)

    return ChannelResponse(
        query=identifier,
        items=[_channel_info(raw) for raw in data.get("items", [])],
    )
