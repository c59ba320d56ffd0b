"""Persistence for encrypted per-user YouTube API keys."""

import enum
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import StoreUnavailableError
from app.models.database import YoutubeApiKey

logger = logging.getLogger(__name__)

# Errors meaning the backing store could not be reached, as opposed to a bad query
UNAVAILABLE_ERRORS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    PoolTimeoutError,
    DBAPIError,
    OSError,
)

# Dialects with native INSERT ... ON CONFLICT support
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


@asynccontextmanager
async def store_guard(session: AsyncSession, operation: str):
    """
    Run a storage operation, reporting connectivity failures as StoreUnavailableError.

    Constraint violations are driver errors too, but they propagate
    unchanged.
    """
    try:
        yield
    except IntegrityError:
        raise
    except UNAVAILABLE_ERRORS as e:
        logger.error("Store %s failed: %s", operation, e.__class__.__name__)
        try:
            await session.rollback()
        except SQLAlchemyError as rollback_error:
            logger.debug("Rollback after store failure also failed: %s", rollback_error.__class__.__name__)
        raise StoreUnavailableError() from e


class CredentialStatus(str, enum.Enum):
    """Whether a user has a stored key, and whether it is usable."""

    MISSING = "missing"
    INACTIVE = "inactive"
    ACTIVE = "active"


class CredentialStore:
    """
    Store for encrypted YouTube API keys.

    Holds at most one row per user. Only ciphertext and IV are ever written;
    plaintext keys never reach this layer.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _fetch(self, user_id: str, active_only: bool = False) -> Optional[YoutubeApiKey]:
        query = (
            select(YoutubeApiKey)
            .where(YoutubeApiKey.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        if active_only:
            query = query.where(YoutubeApiKey.is_active.is_(True))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def upsert(self, user_id: str, ciphertext: str, iv: str) -> YoutubeApiKey:
        """
        Insert or replace the credential for a user.

        The row is re-activated and its validation timestamp cleared. On
        SQLite and PostgreSQL this is a single INSERT ... ON CONFLICT
        statement, so concurrent writers for the same user resolve to the
        last one.

        Args:
            user_id: Owner of the key
            ciphertext: Hex ciphertext from the cipher module
            iv: Hex IV produced by the same encryption call

        Returns:
            The stored record
        """
        async with store_guard(self.session, "upsert"):
            now = datetime.utcnow()
            insert = _UPSERT_INSERTS.get(self.session.get_bind().dialect.name)
            if insert is not None:
                stmt = insert(YoutubeApiKey).values(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    encrypted_api_key=ciphertext,
                    iv=iv,
                    is_active=True,
                    last_validated=None,
                    created_at=now,
                    updated_at=now,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["user_id"],
                    set_={
                        "encrypted_api_key": stmt.excluded.encrypted_api_key,
                        "iv": stmt.excluded.iv,
                        "is_active": True,
                        "last_validated": None,
                        "updated_at": now,
                    },
                )
                await self.session.execute(stmt)
                await self.session.commit()
            else:
                await self._replace_or_insert(user_id, ciphertext, iv, now)

            credential = await self._fetch(user_id)

        logger.info("Stored YouTube API key for user %s", user_id)
        return credential

    async def _replace_or_insert(self, user_id: str, ciphertext: str, iv: str, now: datetime) -> None:
        # Fallback for dialects without ON CONFLICT; the unique constraint on
        # user_id still guarantees a single row, a losing insert becomes an update.
        for attempt in range(2):
            existing = await self._fetch(user_id)
            if existing:
                existing.encrypted_api_key = ciphertext
                existing.iv = iv
                existing.is_active = True
                existing.last_validated = None
                existing.updated_at = now
            else:
                self.session.add(
                    YoutubeApiKey(user_id=user_id, encrypted_api_key=ciphertext, iv=iv)
                )
            try:
                await self.session.commit()
                return
            except IntegrityError:
                await self.session.rollback()
                if attempt:
                    raise

    async def get(self, user_id: str) -> Optional[YoutubeApiKey]:
        """Return the active credential for a user, or None."""
        async with store_guard(self.session, "get"):
            return await self._fetch(user_id, active_only=True)

    async def status(self, user_id: str) -> CredentialStatus:
        """Distinguish a missing credential from a deactivated one."""
        async with store_guard(self.session, "status"):
            result = await self.session.execute(
                select(YoutubeApiKey.is_active).where(YoutubeApiKey.user_id == user_id)
            )
            is_active = result.scalar_one_or_none()

        if is_active is None:
            return CredentialStatus.MISSING
        return CredentialStatus.ACTIVE if is_active else CredentialStatus.INACTIVE

    async def deactivate(self, user_id: str) -> None:
        """Mark the credential inactive. No-op if missing or already inactive."""
        async with store_guard(self.session, "deactivate"):
            await self.session.execute(
                update(YoutubeApiKey)
                .where(YoutubeApiKey.user_id == user_id, YoutubeApiKey.is_active.is_(True))
                .values(is_active=False, updated_at=datetime.utcnow())
            )
            await self.session.commit()

    async def delete(self, user_id: str) -> None:
        """Physically delete the credential. No-op if missing."""
        async with store_guard(self.session, "delete"):
            await self.session.execute(delete(YoutubeApiKey).where(YoutubeApiKey.user_id == user_id))
            await self.session.commit()

    async def touch_validated(self, user_id: str, timestamp: Optional[datetime] = None) -> None:
        """Record a successful validation of the active key against the upstream API."""
        async with store_guard(self.session, "touch_validated"):
            await self.session.execute(
                update(YoutubeApiKey)
                .where(YoutubeApiKey.user_id == user_id, YoutubeApiKey.is_active.is_(True))
                .values(last_validated=timestamp or datetime.utcnow())
            )
            await self.session.commit()
