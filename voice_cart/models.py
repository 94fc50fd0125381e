"""
SQLAlchemy Database Models

Read-only reference data consumed by the cart layer:
- Restaurant phone number → location mapping
- Per-location menus (stored in the POS catalog's JSON shape)

Catalog ingestion writes these tables; this service only reads them.

Author: Khalil Bannouri
Version: 1.0.0
"""

from sqlalchemy import Column, DateTime, Integer, String, JSON, PrimaryKeyConstraint
from sqlalchemy.sql import func

from voice_cart.database import Base


class PhoneNumberLocation(Base):
    """
    Maps the number a caller dialled to the restaurant location that owns it.
    """
    __tablename__ = "phone_number_locations"

    phone_number = Column(String(32), primary_key=True)
    restaurant_name = Column(String(200), nullable=False)
    location_id = Column(String(64), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return (
            f"<PhoneNumberLocation {self.phone_number} → "
            f"{self.restaurant_name}/{self.location_id}>"
        )


class ClientMenu(Base):
    """
    One menu per restaurant location.

    `items` is a JSON object keyed by item name; each value follows the
    catalog shape parsed by `MenuItem.from_catalog`.
    """
    __tablename__ = "client_menus"
    __table_args__ = (
        PrimaryKeyConstraint("restaurant_name", "location_id"),
    )

    restaurant_name = Column(String(200), nullable=False)
    location_id = Column(String(64), nullable=False)
    items = Column(JSON, nullable=False, default=dict)
    item_count = Column(Integer, nullable=True)

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<ClientMenu {self.restaurant_name}/{self.location_id} ({self.item_count} items)>"
