"""
Skill progression value objects.

Snapshots of skill state and the results produced when progress is applied.
Everything here is immutable; services build new snapshots instead of
mutating existing ones.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from src.database.models.enums import SkillType
from src.domain.models.base import (
    DomainValidationError,
    ensure_utc,
    validate_non_negative,
    validate_positive,
)

if TYPE_CHECKING:
    from src.database.models.player import PlayerSkill


class AccrualModel(str, enum.Enum):
    """
    How elapsed time is turned into gains.

    ACTION
        Discrete gathering actions; offline catch-up.
    PER_MINUTE
        Minute-granularity rate model.
    PER_SECOND
        Second-granularity rate model; live ticks.
    """

    ACTION = "action"
    PER_MINUTE = "per_minute"
    PER_SECOND = "per_second"


@dataclass(frozen=True)
class SkillState:
    """
    Persisted state of one skill for one player.

    Attributes
    ----------
    last_action_time : Optional[datetime]
        Instant up to which progress has been applied; None if never trained
    current_resource : Optional[str]
        Resource being gathered while active
    """

    player_id: str
    skill_type: SkillType
    level: int = 1
    experience: int = 0
    is_active: bool = False
    last_action_time: Optional[datetime] = None
    current_resource: Optional[str] = None

    def __post_init__(self) -> None:
        validate_positive(self.level, "level")
        validate_non_negative(self.experience, "experience")

    @classmethod
    def from_db(cls, row: "PlayerSkill") -> SkillState:
        return cls(
            player_id=row.player_id,
            skill_type=SkillType(row.skill_type),
            level=row.level,
            experience=row.experience,
            is_active=row.is_active,
            last_action_time=ensure_utc(row.last_action_time),
            current_resource=row.current_resource,
        )


@dataclass(frozen=True)
class EquipmentBonus:
    """Summed equipment percentages relevant to one skill."""

    efficiency_pct: float = 0.0
    experience_pct: float = 0.0

    def __post_init__(self) -> None:
        validate_non_negative(self.efficiency_pct, "efficiency_pct")
        validate_non_negative(self.experience_pct, "experience_pct")

    @property
    def experience_multiplier(self) -> float:
        return 1 + self.experience_pct / 100

    @property
    def efficiency_multiplier(self) -> float:
        return 1 + self.efficiency_pct / 100


NO_BONUS = EquipmentBonus()


@dataclass(frozen=True)
class ProgressionResult:
    """
    Output of one progression computation.

    ``level_ups`` is ``new_level - old_level``; ``units`` is the number of
    whole accrual units (actions, minutes or seconds) that fit in the
    elapsed time.
    """

    units: int
    exp_gained: int
    items_gained: int
    old_level: int
    new_experience: int
    new_level: int

    def __post_init__(self) -> None:
        validate_non_negative(self.units, "units")
        validate_non_negative(self.exp_gained, "exp_gained")
        validate_non_negative(self.items_gained, "items_gained")

    @property
    def level_ups(self) -> int:
        return self.new_level - self.old_level

    @property
    def is_zero(self) -> bool:
        return self.exp_gained == 0 and self.items_gained == 0


@dataclass(frozen=True)
class SkillGain:
    """Progress applied to one skill during a reconciliation."""

    skill_type: SkillType
    exp_gained: int
    items_gained: int
    level_ups: int
    old_level: int
    new_level: int
    resource: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill": self.skill_type.value,
            "exp_gained": self.exp_gained,
            "items_gained": self.items_gained,
            "level_ups": self.level_ups,
            "old_level": self.old_level,
            "new_level": self.new_level,
            "resource": self.resource,
        }


@dataclass(frozen=True)
class SkillReconciliationError:
    """A per-skill failure recorded instead of aborting sibling skills."""

    skill_type: SkillType
    error_code: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill": self.skill_type.value,
            "error_code": self.error_code,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Outcome of reconciling every active skill of a player at ``reconciled_at``.

    ``offline_minutes`` is only set by resume, where it is measured from the
    player's previous ``last_seen``.
    """

    player_id: str
    reconciled_at: datetime
    model: AccrualModel
    gains: Tuple[SkillGain, ...] = ()
    errors: Tuple[SkillReconciliationError, ...] = ()
    offline_minutes: Optional[int] = None

    @property
    def total_exp_gained(self) -> int:
        return sum(g.exp_gained for g in self.gains)

    @property
    def total_items_gained(self) -> int:
        return sum(g.items_gained for g in self.gains)

    @property
    def total_level_ups(self) -> int:
        return sum(g.level_ups for g in self.gains)

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "player_id": self.player_id,
            "reconciled_at": self.reconciled_at.isoformat(),
            "model": self.model.value,
            "gains": [g.to_dict() for g in self.gains],
            "errors": [e.to_dict() for e in self.errors],
            "total_exp_gained": self.total_exp_gained,
            "total_items_gained": self.total_items_gained,
            "total_level_ups": self.total_level_ups,
        }
        if self.offline_minutes is not None:
            payload["offline_minutes"] = self.offline_minutes
        return payload


@dataclass(frozen=True)
class SkillView:
    """Read model of a skill for display."""

    skill_type: SkillType
    level: int
    experience: int
    experience_to_next: int
    progress_percent: float
    is_active: bool
    current_resource: Optional[str]
    available_resources: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 0 <= self.progress_percent <= 100:
            raise DomainValidationError(
                f"progress_percent must be within 0..100, got {self.progress_percent}",
                field="progress_percent",
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill": self.skill_type.value,
            "level": self.level,
            "experience": self.experience,
            "experience_to_next": self.experience_to_next,
            "progress_percent": self.progress_percent,
            "is_active": self.is_active,
            "current_resource": self.current_resource,
            "available_resources": list(self.available_resources),
        }
