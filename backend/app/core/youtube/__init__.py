"""YouTube Data API integration."""

from app.core.youtube.client import (
    InvalidYouTubeApiKeyError,
    YouTubeApiError,
    YouTubeClient,
    YouTubeQuotaExceededError,
    YouTubeUnavailableError,
)
from app.core.youtube.identifiers import build_youtube_url, extract_channel_identifier

__all__ = [
    "InvalidYouTubeApiKeyError",
    "YouTubeApiError",
    "YouTubeClient",
    "YouTubeQuotaExceededError",
    "YouTubeUnavailableError",
    "build_youtube_url",
    "extract_channel_identifier",
]
