"""User service — accounts, login verification, credential changes.

Learn: Login never reveals which half of the credentials was wrong.
An unknown email still pays for one Argon2 verification (against a
throwaway hash) so response timing doesn't give the answer away either.

Credentials are replaced wholesale: a password change writes a brand-new
Argon2 string with a fresh salt, never an edit of the old one.
"""

import secrets
from functools import lru_cache
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from dissipate.auth.password import (
    hash_password,
    hash_password_async,
    needs_upgrade,
    verify_password_async,
)
from dissipate.db.models import Message, User, utcnow

logger = structlog.get_logger()


class InvalidCredentialsError(Exception):
    """Raised when an email/password pair doesn't match an account."""
    pass


class EmailTakenError(Exception):
    """Raised when an email is already registered to another account."""
    pass


class UserNotFoundError(Exception):
    """Raised when the user doesn't exist."""
    pass


@lru_cache(maxsize=1)
def _decoy_credential() -> str:
    return hash_password(secrets.token_urlsafe(16))


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookup ──────────────────────────────────────────

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def _require_user(self, user_id: str) -> User:
        user = await self.get_user(user_id)
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    # ─── Create / delete ─────────────────────────────────

    async def create_user(self, email: str, username: str, password: str) -> User:
        if await self.get_by_email(email):
            raise EmailTakenError(f"Email {email} is already registered")

        user = User(
            email=email,
            username=username,
            password_hash=await hash_password_async(password),
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("user.created", user_id=user.id)
        return user

    async def delete_by_email(self, email: str) -> bool:
        """Delete a user and all their messages. Returns False if no such user."""
        user = await self.get_by_email(email)
        if not user:
            return False
        await self.db.execute(delete(Message).where(Message.user_id == user.id))
        await self.db.delete(user)
        await self.db.commit()
        logger.info("user.deleted", user_id=user.id)
        return True

    # ─── Login ───────────────────────────────────────────

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user for a valid email/password pair.

        Raises InvalidCredentialsError for an unknown email and for a wrong
        password alike.
        """
        user = await self.get_by_email(email)
        if not user:
            decoy = await run_in_threadpool(_decoy_credential)
            await verify_password_async(password, decoy)
            raise InvalidCredentialsError("Invalid email or password")

        if not await verify_password_async(password, user.password_hash):
            raise InvalidCredentialsError("Invalid email or password")

        # Re-hash on successful login if the cost parameters have been raised
        if needs_upgrade(user.password_hash):
            user.password_hash = await hash_password_async(password)
            await self.db.commit()
            logger.info("user.credential_upgraded", user_id=user.id)

        return user

    # ─── Account settings ────────────────────────────────

    async def update_email(self, user_id: str, email: str) -> User:
        user = await self._require_user(user_id)
        existing = await self.get_by_email(email)
        if existing and existing.id != user.id:
            raise EmailTakenError(f"Email {email} is already registered")
        user.email = email
        user.updated_at = utcnow()
        await self.db.commit()
        return user

    async def update_username(self, user_id: str, username: str) -> User:
        user = await self._require_user(user_id)
        user.username = username
        user.updated_at = utcnow()
        await self.db.commit()
        return user

    async def change_password(
        self, user_id: str, current_password: str, new_password: str
    ) -> User:
        user = await self._require_user(user_id)
        if not await verify_password_async(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")
        user.password_hash = await hash_password_async(new_password)
        user.updated_at = utcnow()
        await self.db.commit()
        logger.info("user.password_changed", user_id=user.id)
        return user
