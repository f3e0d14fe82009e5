"""
Shared Domain Module

Purpose
-------
Provides domain-level foundations for all game modules:
- Domain exceptions and error handling
- Base service and repository patterns
- Gameplay constants and the leveling curve
- Domain validation utilities

Architecture
------------
- BaseService: Foundation for service classes (logging, config, events)
- BaseRepository: Type-safe database access patterns
- Domain exceptions: Game-facing errors and rule violations
- Formulas: Pure experience/level functions
- Validators: Domain validation with structured error raising
- Constants: Curve and fallback balance values

Usage
-----
    from src.modules.shared import (
        BaseService,
        ResourceLockedError,
        level_for_experience,
    )
"""

from __future__ import annotations

from .base_repository import BaseRepository
from .base_service import BaseService
from .constants import (
    BASE_ITEMS_PER_MINUTE,
    DEFAULT_PLAYER_NAME,
    MIN_SKILL_LEVEL,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    SUCCESS_RATE_BASE,
    SUCCESS_RATE_CAP,
    SUCCESS_RATE_PER_LEVEL,
)
from .exceptions import (
    DomainException,
    InvalidElapsedTimeError,
    InvalidOperationError,
    NotFoundError,
    ProgressionInvariantError,
    ResourceLockedError,
    SkillNotFoundError,
    UnknownSkillTypeError,
    ValidationError,
)
from .formulas import (
    experience_for_level,
    experience_to_next,
    level_for_experience,
    level_progress_percent,
)
from .validators import (
    validate_elapsed_ms,
    validate_level_progression,
    validate_player_exists,
    validate_resource_unlocked,
    validate_skill_exists,
)

__all__ = [
    # Base patterns
    "BaseService",
    "BaseRepository",
    # Exceptions
    "DomainException",
    "NotFoundError",
    "SkillNotFoundError",
    "ValidationError",
    "UnknownSkillTypeError",
    "InvalidElapsedTimeError",
    "ProgressionInvariantError",
    "InvalidOperationError",
    "ResourceLockedError",
    # Constants
    "MIN_SKILL_LEVEL",
    "MS_PER_SECOND",
    "MS_PER_MINUTE",
    "BASE_ITEMS_PER_MINUTE",
    "SUCCESS_RATE_BASE",
    "SUCCESS_RATE_PER_LEVEL",
    "SUCCESS_RATE_CAP",
    "DEFAULT_PLAYER_NAME",
    # Formulas
    "experience_for_level",
    "level_for_experience",
    "experience_to_next",
    "level_progress_percent",
    # Validators
    "validate_elapsed_ms",
    "validate_level_progression",
    "validate_player_exists",
    "validate_skill_exists",
    "validate_resource_unlocked",
]
