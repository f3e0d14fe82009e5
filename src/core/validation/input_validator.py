"""
Input Validation Layer

Purpose
-------
Centralized validation for caller-supplied values (player ids, names, skill
types, slots, timestamps). Every method converts the raw value into its
typed form or raises ``ValidationError``, so services never start mutating
state with bad input.

Non-Responsibilities
--------------------
- Game rule validation such as resource unlocks (service layer concern)
- Persistence constraints (database concern)

Observability
-------------
Every validation failure is logged at debug level with field_name, raw_value
(repr) and reason.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, NoReturn, Optional, Sequence

from src.core.logging.logger import get_logger
from src.database.models.enums import EquipmentSlot, SkillType
from src.modules.shared.exceptions import UnknownSkillTypeError, ValidationError

logger = get_logger(__name__)

PLAYER_ID_MAX_LENGTH = 64
PLAYER_NAME_MAX_LENGTH = 100
_PLAYER_ID_CHARS = "A-Za-z0-9_-"


def _raise_validation_error(field_name: str, value: Any, message: str) -> NoReturn:
    logger.debug(
        "Input validation failed",
        extra={
            "field_name": field_name,
            "raw_value": repr(value),
            "reason": message,
        },
    )
    raise ValidationError(field_name, message)


class InputValidator:
    """
    Stateless input validation.

    All methods return the validated value on success and raise
    ``ValidationError`` (or a subclass) on failure.
    """

    # =========================================================================
    # STRING VALIDATION
    # =========================================================================

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        allowed_chars: Optional[str] = None,
    ) -> str:
        """
        Validate string input with optional length and character constraints.

        Args:
            value: Value to validate (converted via str())
            field_name: Name of field for error messages
            min_length: Minimum string length
            max_length: Maximum string length
            allowed_chars: Regex character class for allowed characters

        Returns:
            Stripped string
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        str_value = str(value).strip()

        if min_length is not None and len(str_value) < min_length:
            _raise_validation_error(
                field_name, str_value, f"Must be at least {min_length} characters"
            )

        if max_length is not None and len(str_value) > max_length:
            _raise_validation_error(
                field_name, str_value, f"Cannot exceed {max_length} characters"
            )

        if allowed_chars is not None and not re.fullmatch(f"[{allowed_chars}]+", str_value):
            _raise_validation_error(field_name, str_value, "Contains invalid characters")

        return str_value

    @staticmethod
    def validate_player_id(value: Any) -> str:
        return InputValidator.validate_string(
            value,
            "player_id",
            min_length=1,
            max_length=PLAYER_ID_MAX_LENGTH,
            allowed_chars=_PLAYER_ID_CHARS,
        )

    @staticmethod
    def validate_player_name(value: Any) -> str:
        return InputValidator.validate_string(
            value, "name", min_length=1, max_length=PLAYER_NAME_MAX_LENGTH
        )

    # =========================================================================
    # CHOICE VALIDATION
    # =========================================================================

    @staticmethod
    def validate_choice(
        value: Any,
        field_name: str,
        valid_choices: Sequence[str],
    ) -> str:
        """
        Validate that value is one of the allowed choices (case-insensitive).

        Returns:
            Lowercased validated choice
        """
        str_value = str(value).lower().strip()
        if str_value not in {choice.lower() for choice in valid_choices}:
            _raise_validation_error(
                field_name,
                value,
                f"Invalid choice '{value}'. Must be one of: {', '.join(sorted(valid_choices))}",
            )
        return str_value

    @staticmethod
    def validate_skill_type(value: Any) -> SkillType:
        """
        Parse a skill type.

        Raises:
            UnknownSkillTypeError: If the value is not one of the fixed skills
        """
        if isinstance(value, SkillType):
            return value
        try:
            return SkillType(str(value).lower().strip())
        except ValueError:
            logger.debug(
                "Input validation failed",
                extra={
                    "field_name": "skill_type",
                    "raw_value": repr(value),
                    "reason": "unknown skill type",
                },
            )
            raise UnknownSkillTypeError(value) from None

    @staticmethod
    def validate_equipment_slot(value: Any) -> EquipmentSlot:
        if isinstance(value, EquipmentSlot):
            return value
        choice = InputValidator.validate_choice(
            value, "slot", [slot.value for slot in EquipmentSlot]
        )
        return EquipmentSlot(choice)

    # =========================================================================
    # TIME VALIDATION
    # =========================================================================

    @staticmethod
    def validate_timestamp(value: Any, field_name: str = "now") -> datetime:
        """
        Require a timezone-aware datetime.

        Naive datetimes are rejected rather than guessed at; elapsed-time
        arithmetic across the store must use one clock.
        """
        if not isinstance(value, datetime):
            _raise_validation_error(field_name, value, "Must be a datetime")
        if value.tzinfo is None or value.utcoffset() is None:
            _raise_validation_error(field_name, value, "Must be timezone-aware")
        return value
