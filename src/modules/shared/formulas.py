"""
Skill Leveling Formulas

Purpose
-------
Pure calculation functions for the experience/level curve shared by every
skill.

Design Notes
------------
All formulas:
- Accept parameters explicitly
- Return calculated values
- Have no external dependencies
- Use integer arithmetic where the curve allows it

``experience_for_level`` and ``level_for_experience`` are not exact
inverses: 25..49 experience is ``experience_for_level(2)`` or more but still
level 1, because level 2 starts at 50 experience.

Usage
-----
    from src.modules.shared.formulas import level_for_experience

    level = level_for_experience(37543)  # 39
"""

from __future__ import annotations

import math

from src.modules.shared.constants import (
    EXPERIENCE_CURVE_FACTOR,
    LEVEL_TWO_THRESHOLD,
    MIN_SKILL_LEVEL,
)


def experience_for_level(level: int) -> int:
    """
    Total experience at which ``level`` begins on the curve.

    Example:
        >>> experience_for_level(1)
        0
        >>> experience_for_level(10)
        2025
    """
    if level <= MIN_SKILL_LEVEL:
        return 0
    return (level - 1) ** 2 * EXPERIENCE_CURVE_FACTOR


def level_for_experience(experience: int) -> int:
    """
    Level reached with ``experience`` total experience.

    ``floor(1 + sqrt(experience / 25))`` evaluated exactly with integer
    square roots.

    Example:
        >>> level_for_experience(49)
        1
        >>> level_for_experience(50)
        2
        >>> level_for_experience(37543)
        39
    """
    if experience < LEVEL_TWO_THRESHOLD:
        return MIN_SKILL_LEVEL
    return 1 + math.isqrt(int(experience) // EXPERIENCE_CURVE_FACTOR)


def experience_to_next(experience: int) -> int:
    """
    Experience still needed to reach the next level.

    Example:
        >>> experience_to_next(0)
        25
        >>> experience_to_next(523)
        102
    """
    return experience_for_level(level_for_experience(experience) + 1) - experience


def level_progress_percent(experience: int, level: int) -> float:
    """
    Percent of the way from ``level`` to ``level + 1``, clamped to 0..100.

    The clamp covers experience below the level's own threshold (levels 1
    and 2 overlap on 25..49 experience).
    """
    floor_exp = experience_for_level(level)
    ceiling_exp = experience_for_level(level + 1)
    span = ceiling_exp - floor_exp
    if span <= 0:
        return 0.0

    percent = (experience - floor_exp) / span * 100
    return round(max(0.0, min(100.0, percent)), 2)
