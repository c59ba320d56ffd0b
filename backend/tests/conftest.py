"""Shared test fixtures."""

import pytest
import httpx
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security.encryption import KeyEncryptionService, derive_master_key
from app.core.storage.database import Base, get_db
from app.core.youtube.client import YouTubeClient
from app.models import database  # noqa: F401

TEST_SECRET_HEX = "000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f"
VALID_API_KEY = "AIzaSyTESTKEY1234567890"
TEST_USER_ID = "user-1"


class FakeYouTube:
    """In-process stand-in for the YouTube Data API."""

    def __init__(self):
        self.valid_keys = {VALID_API_KEY}
        self.requests: list[httpx.Request] = []
        self.search_response = {
            "kind": "youtube#searchListResponse",
            "nextPageToken": "CBQQAA",
            "pageInfo": {"totalResults": 2, "resultsPerPage": 20},
            "items": [
                {
                    "id": {"kind": "youtube#video", "videoId": "dQw4w9WgXcQ"},
                    "snippet": {
                        "title": "Test video",
                        "description": "A video",
                        "channelId": "UCuAXFkgsw1L7xaCfnd5JJOw",
                        "channelTitle": "Test channel",
                        "publishedAt": "2009-10-25T06:57:33Z",
                        "thumbnails": {"medium": {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/mqdefault.jpg"}},
                    },
                },
                {
                    "id": {"kind": "youtube#playlist", "playlistId": "PL1234567890"},
                    "snippet": {"title": "Test playlist", "description": ""},
                },
            ],
        }
        self.channel_response = {
            "kind": "youtube#channelListResponse",
            "items": [
                {
                    "id": "UCuAXFkgsw1L7xaCfnd5JJOw",
                    "snippet": {
                        "title": "Test channel",
                        "description": "Channel description",
                        "customUrl": "@testchannel",
                        "thumbnails": {"default": {"url": "https://yt3.ggpht.com/a.jpg"}},
                    },
                    "statistics": {
                        "viewCount": "1000",
                        "subscriberCount": "50",
                        "hiddenSubscriberCount": False,
                        "videoCount": "7",
                    },
                    "brandingSettings": {"image": {"bannerExternalUrl": "https://yt3.ggpht.com/b.jpg"}},
                }
            ],
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("X-Goog-Api-Key") not in self.valid_keys:
            return httpx.Response(
                400,
                json={
                    "error": {
                        "code": 400,
                        "message": "API key not valid. Please pass a valid API key.",
                        "errors": [{"domain": "global", "reason": "badRequest"}],
                        "details": [{"reason": "API_KEY_INVALID"}],
                    }
                },
            )
        if request.url.path.endswith("/search"):
            return httpx.Response(200, json=self.search_response)
        if request.url.path.endswith("/channels"):
            return httpx.Response(200, json=self.channel_response)
        return httpx.Response(404, json={"error": {"code": 404, "message": "Not found"}})


@pytest.fixture
def master_key():
    """Master key derived from a fixed secret."""
    return derive_master_key(TEST_SECRET_HEX)


@pytest.fixture
def encryption_service(master_key):
    return KeyEncryptionService(master_key)


@pytest.fixture
async def db_engine():
    """In-memory database engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Database session bound to the in-memory engine."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session_maker() as session:
        yield session


@pytest.fixture
def fake_youtube():
    return FakeYouTube()


@pytest.fixture
def youtube_client_factory(fake_youtube):
    """Factory producing clients that talk to the fake YouTube API."""

    def factory(api_key: str) -> YouTubeClient:
        return YouTubeClient(
            api_key,
            max_retries=0,
            transport=httpx.MockTransport(fake_youtube.handler),
        )

    return factory


@pytest.fixture
def test_app(db_engine, encryption_service, youtube_client_factory):
    """FastAPI app with routers wired to the test database and fake YouTube."""
    from app.api.dependencies import get_youtube_client_factory
    from app.api.routes import settings as settings_routes, youtube

    app = FastAPI()
    app.include_router(settings_routes.router, prefix="/api/v1")
    app.include_router(youtube.router, prefix="/api/v1")
    app.state.encryption_service = encryption_service

    async def get_test_db():
        async_session_maker = async_sessionmaker(
            db_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        async with async_session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_youtube_client_factory] = lambda: youtube_client_factory

    return app


@pytest.fixture
async def client(test_app):
    """Create async test client authenticated as TEST_USER_ID."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": TEST_USER_ID},
    ) as client:
        yield client
