"""Persistence for per-user interface preferences."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.storage.credential_store import store_guard
from app.models.database import Language, UserPreference

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Store for user preferences. Users without a row get the defaults."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_language(self, user_id: str) -> Language:
        async with store_guard(self.session, "get_preferences"):
            result = await self.session.execute(
                select(UserPreference.language).where(UserPreference.user_id == user_id)
            )
            language = result.scalar_one_or_none()
        return language or Language.EN

    async def set_language(self, user_id: str, language: Language) -> Language:
        """Create or update the user's language preference."""
        async with store_guard(self.session, "set_preferences"):
            result = await self.session.execute(
                select(UserPreference).where(UserPreference.user_id == user_id)
            )
            preference = result.scalar_one_or_none()

            if preference:
                preference.language = language
            else:
                preference = UserPreference(user_id=user_id, language=language)
                self.session.add(preference)

            await self.session.commit()
            await self.session.refresh(preference)

        logger.info("Updated preferences for user %s", user_id)
        return preference.language
