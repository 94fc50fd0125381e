"""
SQL Menu Catalog

Production menu catalog reading the `client_menus` table through the
SQLAlchemy async engine. Used when ENV_MODE=production or ENV_MODE=staging.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voice_cart.core.errors import InternalError, NotFoundError
from voice_cart.database import get_session_maker
from voice_cart.models import ClientMenu
from voice_cart.services.cart.models import MenuItem, RestaurantKey
from voice_cart.services.menu.base import BaseMenuCatalog, parse_catalog_items

logger = logging.getLogger(__name__)


class SqlMenuCatalog(BaseMenuCatalog):
    """Menu catalog backed by PostgreSQL."""

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_maker = session_maker or get_session_maker()
        logger.info("SqlMenuCatalog initialized")

    @property
    def provider_name(self) -> str:
        return "postgres"

    async def get_menu(self, restaurant: RestaurantKey) -> dict[str, MenuItem]:
        logger.info(f"Getting menu for: {restaurant}")

        try:
            async with self._session_maker() as session:
                result = await session.execute(
                    select(ClientMenu).where(
                        ClientMenu.restaurant_name == restaurant.restaurant_name,
                        ClientMenu.location_id == restaurant.location_id,
                    )
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting location menu: {e}")
            raise InternalError("Menu lookup failed", {"details": str(e)})

        if row is None:
            raise NotFoundError(f"No menu found for {restaurant}")

        menu = parse_catalog_items(row.items)
        logger.info(f"Found menu with {row.item_count or len(menu)} items")
        return menu

    async def health_check(self) -> bool:
        try:
            async with self._session_maker() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Menu catalog health check failed: {e}")
            return False
