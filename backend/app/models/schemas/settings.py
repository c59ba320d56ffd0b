"""Settings API schemas."""

from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional

from app.models.database.user_preference import Language


class ApiKeyCreate(BaseModel):
    """Schema for creating/updating the user's YouTube API key."""

    api_key: str = Field(
        ..., min_length=1, max_length=512, description="The API key to store (will be encrypted)"
    )


class ApiKeyStatusResponse(BaseModel):
    """Schema for API key status response (without exposing the key)."""

    has_key: bool = Field(..., description="Whether an active key is configured")
    last_validated: Optional[datetime] = Field(
        None, description="Last successful validation against the YouTube API"
    )
    updated_at: Optional[datetime] = Field(None, description="When the key was last saved")


class PreferencesUpdate(BaseModel):
    """Schema for updating user preferences."""

    language: Language = Field(..., description="Interface language")


class PreferencesResponse(BaseModel):
    """Schema for user preferences response."""

    language: Language = Language.EN
