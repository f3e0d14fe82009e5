"""
Player Inventory Model
======================

Stack counts of gathered items, unique per (player, item_type).
Quantities only grow through reconciliation.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import Base, IdMixin, utc_now


class PlayerInventoryItem(Base, IdMixin):
    __tablename__ = "inventory"
    __table_args__ = (
        UniqueConstraint("player_id", "item_type", name="uq_inventory_player_item"),
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )

    player_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    item_type: Mapped[str] = mapped_column(String(50), nullable=False)

    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerInventoryItem(player_id={self.player_id!r}, "
            f"item_type={self.item_type!r}, quantity={self.quantity})>"
        )
