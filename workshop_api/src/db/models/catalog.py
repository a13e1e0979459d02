from __future__ import annotations

from decimal import Decimal
from typing import Optional
from sqlalchemy import Text, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from src.db.base import Base, IntPkMixin, TimestampMixin


class InventoryItem(IntPkMixin, TimestampMixin, Base):
    """Stocked part. quantity_on_hand is not floored and may go negative."""
    __tablename__ = "inventory_items"

    sku: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity_on_hand: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reorder_point: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))


class ServiceItem(IntPkMixin, TimestampMixin, Base):
    """Labor/service catalog entry."""
    __tablename__ = "service_items"

    name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    default_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
