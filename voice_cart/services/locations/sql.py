"""
SQL Location Directory

Reads the `phone_number_locations` table. Used when ENV_MODE=production or
ENV_MODE=staging.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voice_cart.core.errors import InternalError, NotFoundError
from voice_cart.database import get_session_maker
from voice_cart.models import PhoneNumberLocation
from voice_cart.services.cart.models import RestaurantKey
from voice_cart.services.locations.base import BaseLocationDirectory

logger = logging.getLogger(__name__)


class SqlLocationDirectory(BaseLocationDirectory):
    """Location directory backed by PostgreSQL."""

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_maker = session_maker or get_session_maker()
        logger.info("SqlLocationDirectory initialized")

    @property
    def provider_name(self) -> str:
        return "postgres"

    async def _lookup(self, phone_number: str) -> RestaurantKey:
        logger.info(f"Looking up location for phone number: {phone_number}")

        try:
            async with self._session_maker() as session:
                row = await session.get(PhoneNumberLocation, phone_number)
        except SQLAlchemyError as e:
            logger.error(f"Error looking up location: {e}")
            raise InternalError("Location lookup failed", {"details": str(e)})

        if row is None:
            raise NotFoundError(f"No location found for phone number: {phone_number}")

        logger.info(f"Found location: {row.restaurant_name} - {row.location_id}")
        return RestaurantKey(row.restaurant_name, row.location_id)

    async def health_check(self) -> bool:
        try:
            async with self._session_maker() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Location directory health check failed: {e}")
            return False
