"""Database models."""

from app.models.database.user_preference import Language, UserPreference
from app.models.database.youtube_api_key import YoutubeApiKey

__all__ = ["Language", "UserPreference", "YoutubeApiKey"]
