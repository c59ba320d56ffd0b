"""Parsing of user-entered channel references and building of YouTube links."""

import re

_CHANNEL_ID = re.compile(r"^UC[a-zA-Z0-9_-]{22}$")
_CHANNEL_URL = re.compile(r"youtube\.com/channel/([a-zA-Z0-9_-]{24})")
_HANDLE_URL = re.compile(r"youtube\.com/@([a-zA-Z0-9_.-]+)")
_CUSTOM_URL = re.compile(r"youtube\.com/c/([a-zA-Z0-9_.-]+)")

_WATCH_URLS = {
    "video": "https://www.youtube.com/watch?v={}",
    "channel": "https://www.youtube.com/channel/{}",
    "playlist": "https://www.youtube.com/playlist?list={}",
}


def extract_channel_identifier(raw: str) -> str:
    """
    Turn a channel ID, channel URL or handle URL into an API identifier.

    ``youtube.com/@name`` and legacy ``youtube.com/c/name`` URLs become
    ``@name``; anything unrecognised is returned trimmed.
    """
    value = raw.strip()
    if _CHANNEL_ID.match(value):
        return value

    for pattern, prefix in ((_CHANNEL_URL, ""), (_HANDLE_URL, "@"), (_CUSTOM_URL, "@")):
        match = pattern.search(value)
        if match:
            return prefix + match.group(1)

    return value


def is_handle(identifier: str) -> bool:
    return identifier.startswith("@")


def build_youtube_url(kind: str, item_id: str) -> str:
    """Public URL for a video, channel or playlist."""
    try:
        return _WATCH_URLS[kind].format(item_id)
    except KeyError:
        raise ValueError(f"Unknown YouTube resource kind: {kind}") from None
