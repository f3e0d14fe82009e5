"""
Player Core Model
=================

Identity and presence metadata for a player.

Schema-only representation of:
- Primary identity (string id, display name)
- Presence (last_seen, updated whenever the player is observed)
- Creation timestamp

All behavior and game rules live in service/domain layers.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import Base, utc_now


class PlayerCore(Base):
    """
    Central player entity referenced by skills, inventory and equipment.
    """

    __tablename__ = "players"
    __table_args__ = (Index("ix_players_last_seen", "last_seen"),)

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        doc="Player identifier supplied by the session layer",
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="Adventurer",
        doc="Display name",
    )

    last_seen: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        doc="Last time the player was observed (resume, registration)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        doc="Registration time",
    )

    def __repr__(self) -> str:
        return f"<PlayerCore(id={self.id!r}, name={self.name!r})>"
