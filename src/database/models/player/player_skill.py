"""
Player Skill Model
==================

One row per (player, skill type), created at registration and never deleted.

Schema-only representation of:
- Level and experience
- Training state (is_active, current_resource)
- Reconciliation watermark (last_action_time)

At most one row per player has ``is_active = true``; the reconciliation
service enforces this.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import Base, IdMixin


class PlayerSkill(Base, IdMixin):
    """Per-player skill state."""

    __tablename__ = "skills"
    __table_args__ = (
        UniqueConstraint("player_id", "skill_type", name="uq_skills_player_skill"),
        Index("ix_skills_player_active", "player_id", "is_active"),
        CheckConstraint("level >= 1", name="ck_skills_level_positive"),
        CheckConstraint("experience >= 0", name="ck_skills_experience_non_negative"),
    )

    player_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    skill_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="mining | fishing | woodcutting | cooking",
    )

    level: Mapped[int] = mapped_column(nullable=False, default=1)

    experience: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        doc="Total experience; never decreases",
    )

    is_active: Mapped[bool] = mapped_column(nullable=False, default=False)

    last_action_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        doc="Instant up to which progress has been applied",
    )

    current_resource: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        default=None,
        doc="Resource being gathered while active",
    )

    def __repr__(self) -> str:
        return (
            f"<PlayerSkill(player_id={self.player_id!r}, skill_type={self.skill_type!r}, "
            f"level={self.level}, experience={self.experience}, active={self.is_active})>"
        )
