"""Tests for YoutubeApiKey and UserPreference database models."""

import pytest
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.models.database import Language, UserPreference, YoutubeApiKey


@pytest.mark.unit
class TestYoutubeApiKeyModel:
    """Test cases for the YoutubeApiKey model."""

    @pytest.mark.asyncio
    async def test_create_api_key(self, db_session):
        """Test creating a new API key record."""
        api_key = YoutubeApiKey(
            user_id="user-1",
            encrypted_api_key="ab" * 48,
            iv="cd" * 16,
        )
        db_session.add(api_key)
        await db_session.commit()
        await db_session.refresh(api_key)

        assert api_key.id is not None
        assert len(api_key.id) == 36
        assert api_key.is_active is True
        assert api_key.last_validated is None
        assert isinstance(api_key.created_at, datetime)
        assert isinstance(api_key.updated_at, datetime)

    @pytest.mark.asyncio
    async def test_user_id_unique(self, db_session):
        """Test that a user can only have one row."""
        db_session.add(YoutubeApiKey(user_id="user-1", encrypted_api_key="k1", iv="00" * 16))
        await db_session.commit()

        db_session.add(YoutubeApiKey(user_id="user-1", encrypted_api_key="k2", iv="11" * 16))

        with pytest.raises(IntegrityError):
            await db_session.commit()

    @pytest.mark.asyncio
    async def test_query_by_user(self, db_session):
        for user_id in ("user-1", "user-2"):
            db_session.add(YoutubeApiKey(user_id=user_id, encrypted_api_key=f"k-{user_id}", iv="00" * 16))
        await db_session.commit()

        result = await db_session.execute(select(YoutubeApiKey).where(YoutubeApiKey.user_id == "user-2"))
        fetched = result.scalar_one()

        assert fetched.encrypted_api_key == "k-user-2"

    def test_repr_has_no_secret_material(self):
        api_key = YoutubeApiKey(user_id="user-1", encrypted_api_key="secret-blob", iv="00" * 16)

        assert "secret-blob" not in repr(api_key)


@pytest.mark.unit
class TestUserPreferenceModel:
    """Test cases for the UserPreference model."""

    @pytest.mark.asyncio
    async def test_default_language(self, db_session):
        preference = UserPreference(user_id="user-1")
        db_session.add(preference)
        await db_session.commit()
        await db_session.refresh(preference)

        assert preference.language == Language.EN

    @pytest.mark.asyncio
    async def test_russian(self, db_session):
        preference = UserPreference(user_id="user-1", language=Language.RU)
        db_session.add(preference)
        await db_session.commit()
        await db_session.refresh(preference)

        assert preference.language == Language.RU
