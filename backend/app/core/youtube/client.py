"""Async client for the YouTube Data API v3."""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.youtube.identifiers import is_handle

logger = logging.getLogger(__name__)

SEARCH_TYPES = ("video", "channel", "playlist")
SEARCH_ORDERS = ("relevance", "date", "rating", "viewCount")
MAX_RESULTS_LIMIT = 50
API_KEY_HEADER = "X-Goog-Api-Key"

_INVALID_KEY_REASONS = {
    "keyInvalid",
    "keyExpired",
    "forbidden",
    "accessNotConfigured",
    "ipRefererBlocked",
    "API_KEY_INVALID",
}
_QUOTA_REASONS = {
    "quotaExceeded",
    "dailyLimitExceeded",
    "rateLimitExceeded",
    "userRateLimitExceeded",
}


class YouTubeApiError(Exception):
    """Error response from the YouTube Data API."""

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.reason = reason


class InvalidYouTubeApiKeyError(YouTubeApiError):
    """The API key was rejected by YouTube."""


class YouTubeQuotaExceededError(YouTubeApiError):
    """The API key's quota is exhausted."""


class YouTubeUnavailableError(YouTubeApiError):
    """YouTube could not be reached after retrying."""


def _error_from_response(response: httpx.Response) -> YouTubeApiError:
    """Map an error response onto the exception hierarchy."""
    message = f"YouTube API returned HTTP {response.status_code}"
    reasons = []
    try:
        body = response.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        message = error.get("message") or message
        # Legacy "errors" and newer "details" entries both carry a reason
        for entry in (error.get("errors") or []) + (error.get("details") or []):
            if isinstance(entry, dict) and entry.get("reason"):
                reasons.append(entry["reason"])
        if "API key not valid" in message:
            reasons.append("keyInvalid")

    reason = reasons[0] if reasons else None
    quota = next((r for r in reasons if r in _QUOTA_REASONS), None)
    if quota or response.status_code == 429:
        return YouTubeQuotaExceededError(message, response.status_code, quota or reason)
    invalid = next((r for r in reasons if r in _INVALID_KEY_REASONS), None)
    if invalid:
        return InvalidYouTubeApiKeyError(message, response.status_code, invalid)
    return YouTubeApiError(message, response.status_code, reason)


class YouTubeClient:
    """
    Thin async wrapper over the YouTube Data API.

    The API key is sent in the ``X-Goog-Api-Key`` header, never in the URL, and
    is never logged. Timeouts, transport errors and 5xx responses are retried
    with exponential backoff; 4xx responses are not.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.googleapis.com/youtube/v3",
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize client.

        Args:
            api_key: Plaintext YouTube Data API key
            base_url: API root
            timeout: Per-request timeout in seconds
            max_retries: Retries after the first attempt for retryable failures
            backoff: Initial delay between retries, doubled each time
            transport: Optional httpx transport (used by tests)
        """
        self._api_key = api_key
        self.max_retries = max(0, max_retries)
        self.backoff = backoff
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, api_key: str, settings, **kwargs) -> "YouTubeClient":
        return cls(
            api_key,
            base_url=settings.youtube_api_base_url,
            timeout=settings.youtube_request_timeout,
            max_retries=settings.youtube_max_retries,
            backoff=settings.youtube_retry_backoff,
            **kwargs,
        )

    async def __aenter__(self) -> "YouTubeClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, resource: str, params: Dict[str, Any]) -> Dict[str, Any]:
        query = {k: v for k, v in params.items() if v is not None}

        attempt = 0
        while True:
            try:
                response = await self._client.get(
                    resource, params=query, headers={API_KEY_HEADER: self._api_key}
                )
            except httpx.TransportError as e:
                failure = YouTubeUnavailableError(f"YouTube API request failed: {e.__class__.__name__}")
            else:
                if response.status_code < 400:
                    return response.json()
                if response.status_code < 500:
                    raise _error_from_response(response)
                failure = YouTubeUnavailableError(
                    f"YouTube API returned HTTP {response.status_code}", response.status_code
                )

            if attempt >= self.max_retries:
                raise failure
            delay = self.backoff * (2**attempt)
            attempt += 1
            logger.warning(
                "YouTube %s failed (%s), retrying in %.1fs (attempt %d/%d)",
                resource,
                failure.message,
                delay,
                attempt,
                self.max_retries,
            )
            await asyncio.sleep(delay)

    async def validate(self) -> None:
        """
        Verify the API key with a minimal search request.

        Raises:
            InvalidYouTubeApiKeyError: If YouTube rejects the key
        """
        await self._get("search", {"part": "id", "q": "test", "maxResults": 1, "type": "video"})

    async def search(
        self,
        q: str,
        type: str = "video",
        order: str = "relevance",
        max_results: int = 20,
        page_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Search videos, channels or playlists.

        Returns:
            Raw ``search.list`` response (items, pageInfo, nextPageToken, ...)
        """
        if type not in SEARCH_TYPES:
            raise ValueError(f"Unsupported search type: {type}")
        if order not in SEARCH_ORDERS:
            raise ValueError(f"Unsupported search order: {order}")
        if not 1 <= max_results <= MAX_RESULTS_LIMIT:
            raise ValueError(f"max_results must be between 1 and {MAX_RESULTS_LIMIT}")

        return await self._get(
            "search",
            {
                "part": "snippet",
                "q": q,
                "type": type,
                "order": order,
                "maxResults": max_results,
                "pageToken": page_token,
            },
        )

    async def get_channel(self, identifier: str) -> Dict[str, Any]:
        """
        Fetch channel metadata by channel ID or ``@handle``.

        Returns:
            Raw ``channels.list`` response
        """
        params: Dict[str, Any] = {"part": "snippet,statistics,brandingSettings"}
        if is_handle(identifier):
            params["forHandle"] = identifier
        else:
            params["id"] = identifier
        return await self._get("channels", params)
