"""
Brainboard Backend: Credential Store
====================================

What:  Account creation and password verification over the `users` table.
How:   passlib CryptContext with the bcrypt scheme. Hashing and verification
       run in a worker thread (asyncio.to_thread) so a login never stalls the
       event loop. Unknown emails still run one hash verification so login
       timing does not reveal which emails have accounts.
"""

import asyncio
import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.exceptions import DuplicateEmailError, InvalidCredentialsError
from brainboard.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """
    Creates users and checks their passwords.

    Stateless apart from the hashing context; the database session is passed
    to every call.
    """

    def __init__(self, bcrypt_rounds: int = 12):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds,
        )
        # Verified against when the email is unknown
        self._dummy_hash = self.pwd_context.hash("brainboard-dummy-password")

    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def get(self, db: AsyncSession, user_id: int) -> Optional[User]:
        return await db.get(User, user_id)

    async def create(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Registers a new account.

        Raises:
            DuplicateEmailError: an account with this email already exists
        """
        email = normalize_email(email)
        if await self.find_by_email(db, email) is not None:
            raise DuplicateEmailError(email)

        password_hash = await asyncio.to_thread(self.pwd_context.hash, password)
        user = User(email=email, password_hash=password_hash)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Concurrent signup with the same email won the race
            raise DuplicateEmailError(email)

        logger.info("User %d signed up", user.id)
        return user

    async def verify(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Returns the user whose email and password match.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        user = await self.find_by_email(db, email)
        stored_hash = user.password_hash if user is not None else self._dummy_hash
        matches = await asyncio.to_thread(self.pwd_context.verify, password, stored_hash)
        if user is None or not matches:
            raise InvalidCredentialsError()
        return user
