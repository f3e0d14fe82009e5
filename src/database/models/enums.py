"""
Database Model Enums
====================

Type-safe constants for categorical columns. They are schema helpers;
parsing of untrusted input lives in ``InputValidator``.
"""

from __future__ import annotations

import enum


class SkillType(str, enum.Enum):
    """The fixed set of trainable skills."""

    MINING = "mining"
    FISHING = "fishing"
    WOODCUTTING = "woodcutting"
    COOKING = "cooking"


class EquipmentSlot(str, enum.Enum):
    """Equipment slots every player has, filled or empty."""

    TOOL = "tool"
    HELMET = "helmet"
    GLOVES = "gloves"
    BOOTS = "boots"
