"""
Player Equipment Model
======================

One row per (player, slot). An empty slot has ``item_type = NULL`` and zero
bonuses. Bonuses are percentages copied from the item catalog on equip.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import Base, IdMixin


class PlayerEquipment(Base, IdMixin):
    __tablename__ = "equipment"
    __table_args__ = (
        UniqueConstraint("player_id", "slot", name="uq_equipment_player_slot"),
        CheckConstraint("efficiency_bonus >= 0", name="ck_equipment_efficiency_non_negative"),
        CheckConstraint("experience_bonus >= 0", name="ck_equipment_experience_non_negative"),
    )

    player_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    slot: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="tool | helmet | gloves | boots",
    )

    item_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    efficiency_bonus: Mapped[int] = mapped_column(
        nullable=False,
        default=0,
        doc="Percent reduction of time per action",
    )

    experience_bonus: Mapped[int] = mapped_column(
        nullable=False,
        default=0,
        doc="Percent increase of experience gained",
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerEquipment(player_id={self.player_id!r}, slot={self.slot!r}, "
            f"item_type={self.item_type!r})>"
        )
