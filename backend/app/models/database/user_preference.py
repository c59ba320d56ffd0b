"""User preference database model."""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum
import enum

from app.core.storage.database import Base


class Language(str, enum.Enum):
    """Interface language."""

    EN = "en"
    RU = "ru"


class UserPreference(Base):
    """Per-user interface settings."""

    __tablename__ = "user_preferences"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    language = Column(Enum(Language), default=Language.EN, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
