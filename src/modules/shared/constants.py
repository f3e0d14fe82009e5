"""
Skill Progression Domain Constants

Purpose
-------
Gameplay constants for the leveling curve and accrual engine. Values that
are meant to be tuned at runtime (rates, success curve, resume model) live in
``config/skills.yaml`` and are read through ConfigManager; the constants
below are their fallbacks and the fixed rules of the curve.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Grouped by game system
- No side effects at import time
"""

from __future__ import annotations

from typing import Final

# ============================================================================
# LEVELING CURVE
# ============================================================================

MIN_SKILL_LEVEL: Final[int] = 1
EXPERIENCE_CURVE_FACTOR: Final[int] = 25  # exp_for_level(L) = (L-1)^2 * 25
LEVEL_TWO_THRESHOLD: Final[int] = 50  # Below this, level is always 1

# ============================================================================
# ACCRUAL UNITS
# ============================================================================

MS_PER_SECOND: Final[int] = 1000
MS_PER_MINUTE: Final[int] = 60_000
SECONDS_PER_MINUTE: Final[int] = 60

# ============================================================================
# ITEM YIELD (fallbacks for config/skills.yaml)
# ============================================================================

BASE_ITEMS_PER_MINUTE: Final[float] = 0.8
SUCCESS_RATE_BASE: Final[float] = 0.85
SUCCESS_RATE_PER_LEVEL: Final[float] = 0.005
SUCCESS_RATE_CAP: Final[float] = 1.0

# ============================================================================
# PLAYER DEFAULTS
# ============================================================================

DEFAULT_PLAYER_NAME: Final[str] = "Adventurer"
MAX_PLAYER_ID_LENGTH: Final[int] = 64
MAX_PLAYER_NAME_LENGTH: Final[int] = 100
