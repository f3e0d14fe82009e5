"""
Domain exceptions for skill progression.

Purpose
-------
Structured, domain-specific exceptions raised by services for game rule
violations and player-facing errors. Callers at the transport edge turn
them into responses via ``to_dict()``.

Design Notes
------------
- All domain exceptions inherit from `DomainException`, which shares the
  structured base with infrastructure errors (message, details, severity,
  is_retryable, error_code).
- Reconciliation records `error_code` and `message` of per-skill failures
  on its result instead of aborting sibling skills.
"""

from __future__ import annotations

from typing import Any, Optional

from src.core.exceptions import ErrorSeverity, StructuredError


class DomainException(StructuredError):
    """
    Base exception for domain-level errors.

    Example:
        >>> raise DomainException("Training failed", {"reason": "no skill"})
    """


class NotFoundError(DomainException):
    """
    Raised when a requested entity cannot be found.

    Args:
        resource_type: Type of entity (e.g., "Player", "Item")
        identifier: Optional identifier for the missing entity
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class SkillNotFoundError(DomainException):
    """
    Raised when a player's skill row is missing.

    Skill rows are created at registration and never deleted, so this points
    at a data initialization bug rather than bad input.
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, player_id: str, skill_type: str) -> None:
        self.player_id = player_id
        self.skill_type = skill_type
        super().__init__(
            f"Skill '{skill_type}' not found for player {player_id}",
            details={"player_id": player_id, "skill_type": skill_type},
            error_code="SKILL_NOT_FOUND",
        )


class ValidationError(DomainException):
    """
    Raised when input fails domain validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={"field": field, "validation_message": message},
            error_code=f"VALIDATION_{field.upper()}",
        )


class UnknownSkillTypeError(ValidationError):
    """Raised when a skill type outside the fixed set is requested."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__("skill_type", f"unknown skill type {value!r}")
        self.error_code = "UNKNOWN_SKILL_TYPE"


class InvalidElapsedTimeError(DomainException):
    """Raised when the progression engine is given a negative duration."""

    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(self, elapsed_ms: float) -> None:
        self.elapsed_ms = elapsed_ms
        super().__init__(
            f"Elapsed time must be non-negative, got {elapsed_ms}ms",
            details={"elapsed_ms": elapsed_ms},
            error_code="INVALID_ELAPSED_TIME",
        )


class ProgressionInvariantError(DomainException):
    """
    Raised when applying a gain would lower a skill's level.

    Experience never decreases, so a negative level delta means the stored
    level disagrees with the stored experience.
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, skill_type: str, old_level: int, new_level: int) -> None:
        self.skill_type = skill_type
        self.old_level = old_level
        self.new_level = new_level
        super().__init__(
            f"Level for {skill_type} would drop from {old_level} to {new_level}",
            details={
                "skill_type": skill_type,
                "old_level": old_level,
                "new_level": new_level,
            },
            error_code="PROGRESSION_INVARIANT_VIOLATION",
        )


class InvalidOperationError(DomainException):
    """
    Raised when a player attempts an action that violates game rules.

    Args:
        action: Description of the invalid action
        reason: Explanation of why it's not allowed

    Example:
        >>> raise InvalidOperationError(
        ...     "start_training",
        ...     "resource 'coal' is not gathered by fishing"
        ... )
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Invalid operation '{action}': {reason}",
            details={"action": action, "reason": reason},
            error_code=f"INVALID_{action.upper()}",
        )


class ResourceLockedError(DomainException):
    """
    Raised when training targets a resource above the skill's level.

    Args:
        skill_type: Skill being trained
        resource: Requested resource
        required_level: Level that unlocks the resource
        current_level: Skill's current level
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(
        self,
        skill_type: str,
        resource: str,
        required_level: int,
        current_level: int,
    ) -> None:
        self.skill_type = skill_type
        self.resource = resource
        self.required_level = required_level
        self.current_level = current_level
        super().__init__(
            f"{resource} requires {skill_type} level {required_level} "
            f"(current {current_level})",
            details={
                "skill_type": skill_type,
                "resource": resource,
                "required_level": required_level,
                "current_level": current_level,
            },
            error_code="RESOURCE_LOCKED",
        )
