"""
User Service - profile lookup for authenticated callers.
"""

import uuid
import logging
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.errors import ProfileNotFound
from storefront.models.profile import Profile

logger = logging.getLogger(__name__)


def parse_uuid(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Parse a UUID, returning None for blank or malformed input."""
    if isinstance(value, uuid.UUID):
        return value
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class UserService:
    """Service for resolving auth users to storefront profiles."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self, user_id: Union[str, uuid.UUID]) -> Profile:
        """Profile of an auth user, or ProfileNotFound."""
        user_uuid = parse_uuid(user_id)
        if not user_uuid:
            logger.error(f"Invalid user_id format: {user_id}")
            raise ProfileNotFound()

        result = await self.db.execute(
            select(Profile).where(Profile.user_id == user_uuid)
        )
        profile = result.scalar_one_or_none()

        if not profile:
            logger.error(f"Profile not found for user {user_id}")
            raise ProfileNotFound()

        return profile
