"""
Skill Progression Domain Validators

Purpose
-------
Domain validation utilities for enforcing game rules. These validators raise
structured domain exceptions when validation fails.

Design Notes
------------
Validators:
- Accept data to validate as parameters
- Raise specific domain exceptions on failure
- Return None on success (raise-on-error pattern)
- Never touch the store (they operate on passed data)

Usage
-----
    from src.modules.shared.validators import validate_elapsed_ms

    validate_elapsed_ms(-5)
    # Raises: InvalidElapsedTimeError
"""

from __future__ import annotations

from typing import Any, Optional

from .exceptions import (
    InvalidElapsedTimeError,
    NotFoundError,
    ProgressionInvariantError,
    ResourceLockedError,
    SkillNotFoundError,
)


def validate_elapsed_ms(elapsed_ms: float) -> None:
    """
    Raises:
        InvalidElapsedTimeError: If elapsed_ms is negative
    """
    if elapsed_ms < 0:
        raise InvalidElapsedTimeError(elapsed_ms)


def validate_level_progression(skill_type: str, old_level: int, new_level: int) -> None:
    """
    Validate that applying a gain did not lower the level.

    Raises:
        ProgressionInvariantError: If new_level < old_level
    """
    if new_level < old_level:
        raise ProgressionInvariantError(skill_type, old_level, new_level)


def validate_player_exists(player: Optional[Any], player_id: str) -> None:
    """
    Raises:
        NotFoundError: If player is None
    """
    if player is None:
        raise NotFoundError("Player", player_id)


def validate_skill_exists(skill: Optional[Any], player_id: str, skill_type: str) -> None:
    """
    Raises:
        SkillNotFoundError: If skill is None
    """
    if skill is None:
        raise SkillNotFoundError(player_id, skill_type)


def validate_resource_unlocked(
    skill_type: str,
    resource: str,
    required_level: int,
    current_level: int,
) -> None:
    """
    Validate that a skill's level unlocks a resource.

    Args:
        skill_type: Skill being trained
        resource: Requested resource
        required_level: Minimum level on the skill's resource ladder
        current_level: Skill's current level

    Raises:
        ResourceLockedError: If current_level < required_level
    """
    if current_level < required_level:
        raise ResourceLockedError(skill_type, resource, required_level, current_level)
