"""YouTube API key database model."""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Boolean

from app.core.storage.database import Base


class YoutubeApiKey(Base):
    """Encrypted YouTube Data API key, one row per user."""

    __tablename__ = "youtube_api_keys"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    encrypted_api_key = Column(Text, nullable=False)  # hex AES-256-CBC ciphertext + HMAC tag
    iv = Column(String(32), nullable=False)  # hex, 16 bytes
    is_active = Column(Boolean, default=True, nullable=False)
    last_validated = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<YoutubeApiKey(user_id={self.user_id}, is_active={self.is_active})>"
