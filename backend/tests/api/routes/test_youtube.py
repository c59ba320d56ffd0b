"""Tests for YouTube API routes."""

import httpx
import pytest
from httpx import AsyncClient

VALID_API_KEY = "AIzaSyTESTKEY1234567890"
CHANNEL_ID = "UCuAXFkgsw1L7xaCfnd5JJOw"


@pytest.fixture
async def client_with_key(client: AsyncClient):
    response = await client.post("/api/v1/settings/youtube-api-key", json={"api_key": VALID_API_KEY})
    assert response.status_code == 201
    return client


@pytest.mark.api
class TestSearchAPI:
    """Test cases for YouTube search."""

    @pytest.mark.asyncio
    async def test_search_without_key(self, client: AsyncClient, fake_youtube):
        response = await client.get("/api/v1/youtube/search", params={"q": "python"})

        assert response.status_code == 412
        assert response.json()["detail"] == "YouTube API key is not configured"
        assert fake_youtube.requests == []

    @pytest.mark.asyncio
    async def test_search(self, client_with_key: AsyncClient, fake_youtube):
        response = await client_with_key.get(
            "/api/v1/youtube/search",
            params={"q": "python", "type": "video", "order": "viewCount", "max_results": 10},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["page_info"]["total_results"] == 2
        assert data["next_page_token"] == "CBQQAA"
        assert [item["kind"] for item in data["items"]] == ["video", "playlist"]

        video = data["items"][0]
        assert video["id"] == "dQw4w9WgXcQ"
        assert video["url"] == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert video["thumbnail_url"].endswith("mqdefault.jpg")
        assert data["items"][1]["url"] == "https://www.youtube.com/playlist?list=PL1234567890"

        upstream = fake_youtube.requests[-1]
        assert upstream.url.params["order"] == "viewCount"
        assert upstream.url.params["maxResults"] == "10"
        assert upstream.headers["X-Goog-Api-Key"] == VALID_API_KEY
        assert VALID_API_KEY not in response.text

    @pytest.mark.asyncio
    async def test_search_page_token(self, client_with_key: AsyncClient, fake_youtube):
        await client_with_key.get("/api/v1/youtube/search", params={"q": "python", "page_token": "CBQQAA"})

        assert fake_youtube.requests[-1].url.params["pageToken"] == "CBQQAA"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [
            {"q": ""},
            {"q": "python", "type": "short"},
            {"q": "python", "order": "popular"},
            {"q": "python", "max_results": 51},
        ],
    )
    async def test_search_validation(self, client_with_key: AsyncClient, params):
        response = await client_with_key.get("/api/v1/youtube/search", params=params)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_search_quota_exceeded(self, client_with_key: AsyncClient, fake_youtube):
        def quota_handler(request):
            return httpx.Response(
                403,
                json={"error": {"code": 403, "message": "quota", "errors": [{"reason": "quotaExceeded"}]}},
            )

        fake_youtube.handler = quota_handler

        response = await client_with_key.get("/api/v1/youtube/search", params={"q": "python"})

        assert response.status_code == 429

    @pytest.mark.asyncio
    async def test_search_upstream_down(self, client_with_key: AsyncClient, fake_youtube):
        fake_youtube.handler = lambda request: httpx.Response(503)

        response = await client_with_key.get("/api/v1/youtube/search", params={"q": "python"})

        assert response.status_code == 502

    @pytest.mark.asyncio
    async def test_search_after_key_revoked_upstream(self, client_with_key: AsyncClient, fake_youtube):
        fake_youtube.valid_keys.clear()

        response = await client_with_key.get("/api/v1/youtube/search", params={"q": "python"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid YouTube API key"


@pytest.mark.api
class TestChannelAPI:
    """Test cases for channel lookup."""

    @pytest.mark.asyncio
    async def test_get_channel_by_url(self, client_with_key: AsyncClient, fake_youtube):
        response = await client_with_key.get(
            "/api/v1/youtube/channels",
            params={"channel": f"https://www.youtube.com/channel/{CHANNEL_ID}"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["query"] == CHANNEL_ID
        channel = data["items"][0]
        assert channel["id"] == CHANNEL_ID
        assert channel["title"] == "Test channel"
        assert channel["banner_url"] == "https://yt3.ggpht.com/b.jpg"
        assert channel["thumbnail_url"] == "https://yt3.ggpht.com/a.jpg"
        assert channel["statistics"]["subscriber_count"] == 50
        assert channel["statistics"]["video_count"] == 7
        assert channel["url"] == f"https://www.youtube.com/channel/{CHANNEL_ID}"

        assert fake_youtube.requests[-1].url.params["id"] == CHANNEL_ID

    @pytest.mark.asyncio
    async def test_get_channel_by_handle(self, client_with_key: AsyncClient, fake_youtube):
        response = await client_with_key.get(
            "/api/v1/youtube/channels", params={"channel": "https://www.youtube.com/@testchannel"}
        )

        assert response.status_code == 200
        assert response.json()["query"] == "@testchannel"
        assert fake_youtube.requests[-1].url.params["forHandle"] == "@testchannel"

    @pytest.mark.asyncio
    async def test_get_channel_not_found(self, client_with_key: AsyncClient, fake_youtube):
        fake_youtube.channel_response = {"items": []}

        response = await client_with_key.get("/api/v1/youtube/channels", params={"channel": "UCnothing"})

        assert response.status_code == 200
        assert response.json()["items"] == []

    @pytest.mark.asyncio
    async def test_get_channel_blank(self, client_with_key: AsyncClient):
        response = await client_with_key.get("/api/v1/youtube/channels", params={"channel": "   "})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_channel_without_key(self, client: AsyncClient):
        response = await client.get("/api/v1/youtube/channels", params={"channel": CHANNEL_ID})

        assert response.status_code == 412
