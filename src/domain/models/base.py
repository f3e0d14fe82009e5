"""
Base domain model helpers.

Purpose
-------
Foundations shared by the immutable value objects in this package:

- ``DomainEvent``: a named state change with a payload, published on the
  event bus after the change commits.
- ``DomainValidationError`` and ``validate_*`` helpers used from
  ``__post_init__`` to keep invalid values from ever being constructed.

Domain models are separate from database models:
- Database models (src/database/models/): SQLAlchemy schemas
- Domain models (src/domain/models/): frozen dataclasses built via ``from_db``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class DomainEvent:
    """
    Represents a domain event that has occurred.

    Attributes
    ----------
    event_name : str
        Event name (e.g., "skill.leveled_up")
    payload : Dict[str, Any]
        Event payload with relevant data
    occurred_at : datetime
        When the event occurred (UTC)
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class DomainValidationError(ValueError):
    """Raised when a value object would be constructed in an invalid state."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_positive(value: int, field_name: str) -> None:
    if value <= 0:
        raise DomainValidationError(
            f"{field_name} must be positive, got {value}",
            field=field_name,
        )


def validate_non_negative(value: float, field_name: str) -> None:
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}",
            field=field_name,
        )


def validate_not_empty(value: Optional[str], field_name: str) -> None:
    if not value or not value.strip():
        raise DomainValidationError(f"{field_name} cannot be empty", field=field_name)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes.

    Some drivers hand back naive values; all arithmetic in the engine is done
    on aware datetimes.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
