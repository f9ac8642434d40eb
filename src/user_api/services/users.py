"""Persistence operations for User records.

Each method is a single delegation to the ORM; HTTP concerns (status codes,
error bodies) belong to the router.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User

logger = logging.getLogger(__name__)


class UserService:
    async def create(self, session: AsyncSession, data: dict[str, Any]) -> User:
        user = User(**data)
        session.add(user)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise
        await session.refresh(user)
        logger.info("Created user %s", user.id)
        return user

    async def find_all(self, session: AsyncSession) -> list[User]:
        users = (
            await session.execute(select(User).order_by(User.id))
        ).scalars().all()
        return list(users)

    async def find_one(self, session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    async def update(
        self, session: AsyncSession, user_id: int, data: dict[str, Any]
    ) -> User | None:
        """Apply only the given fields. Returns None if the user is missing."""
        user = await session.get(User, user_id)
        if not user:
            return None

        for field, value in data.items():
            setattr(user, field, value)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise
        await session.refresh(user)
        logger.info("Updated user %s (%s)", user.id, ", ".join(sorted(data)) or "no fields")
        return user

    async def remove(self, session: AsyncSession, user_id: int) -> User | None:
        user = await session.get(User, user_id)
        if not user:
            return None

        await session.delete(user)
        await session.commit()
        logger.info("Deleted user %s", user_id)
        return user


user_service = UserService()
