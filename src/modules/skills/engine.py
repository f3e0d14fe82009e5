"""
Progression engine.

Turns a skill snapshot, its equipment bonus and an elapsed duration into
experience, items and level transitions. The engine is pure: it never reads
the store, and the same inputs always produce the same result.

Accrual Form
------------
Every model is one instance of::

    units        = floor(elapsed_ms / unit_ms)
    exp_gained   = floor(units * exp_per_unit * (1 + experience_bonus / 100))
    items_gained = floor(units * items_per_unit)

ACTION
    ``unit_ms = time_per_action / (1 + efficiency / 100)``,
    ``exp_per_unit = base_experience_per_action``,
    ``items_per_unit = success_rate(level)``
PER_MINUTE
    ``unit_ms = 60000``, ``exp_per_unit = offline rate``,
    ``items_per_unit = item_rate * (1 + efficiency / 100)``
PER_SECOND
    ``unit_ms = 1000``, ``exp_per_unit = live rate / 60``,
    ``items_per_unit = item_rate * (1 + efficiency / 100) / 60``
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from src.database.models.enums import SkillType
from src.domain.models.skill import (
    NO_BONUS,
    AccrualModel,
    EquipmentBonus,
    ProgressionResult,
    SkillState,
)
from src.modules.shared.constants import (
    BASE_ITEMS_PER_MINUTE,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    SECONDS_PER_MINUTE,
    SUCCESS_RATE_BASE,
    SUCCESS_RATE_CAP,
    SUCCESS_RATE_PER_LEVEL,
)
from src.modules.shared.formulas import level_for_experience
from src.modules.shared.validators import (
    validate_elapsed_ms,
    validate_level_progression,
)
from src.modules.skills.rates import SKILL_RATES, get_skill_rate

if TYPE_CHECKING:
    from src.core.config.manager import ConfigManager

# Absorbs binary float error such as 60 * 2.3 == 137.99999999999997.
_FLOOR_PRECISION = 9


def _floor(value: float) -> int:
    return math.floor(round(value, _FLOOR_PRECISION))


@dataclass(frozen=True)
class AccrualRate:
    """Resolved parameters of the accrual form for one skill and model."""

    unit_ms: float
    exp_per_unit: float
    items_per_unit: float


class ProgressionEngine:
    """
    Deterministic progression calculator.

    Args:
        live_rates: Experience per minute for live ticks, per skill
        offline_rates: Experience per minute for the minute model, per skill
        base_items_per_minute: Item rate before efficiency
        success_base: Action-model item yield at level 0
        success_per_level: Yield added per level
        success_cap: Upper bound of the yield
    """

    def __init__(
        self,
        live_rates: Optional[Mapping[SkillType, float]] = None,
        offline_rates: Optional[Mapping[SkillType, float]] = None,
        base_items_per_minute: float = BASE_ITEMS_PER_MINUTE,
        success_base: float = SUCCESS_RATE_BASE,
        success_per_level: float = SUCCESS_RATE_PER_LEVEL,
        success_cap: float = SUCCESS_RATE_CAP,
    ) -> None:
        self._live_rates: Dict[SkillType, float] = {
            skill: rate.live_exp_per_minute for skill, rate in SKILL_RATES.items()
        }
        self._offline_rates: Dict[SkillType, float] = {
            skill: rate.offline_exp_per_minute for skill, rate in SKILL_RATES.items()
        }
        self._live_rates.update(live_rates or {})
        self._offline_rates.update(offline_rates or {})
        self._base_items_per_minute = float(base_items_per_minute)
        self._success_base = float(success_base)
        self._success_per_level = float(success_per_level)
        self._success_cap = float(success_cap)

    @classmethod
    def from_config(cls, config_manager: type[ConfigManager]) -> ProgressionEngine:
        """Build an engine from ``skills.*`` balance keys, falling back to the rate table."""
        live: Dict[SkillType, float] = {}
        offline: Dict[SkillType, float] = {}
        for skill, rate in SKILL_RATES.items():
            live[skill] = float(
                config_manager.get(f"skills.live_rates.{skill.value}", rate.live_exp_per_minute)
            )
            offline[skill] = float(
                config_manager.get(
                    f"skills.offline_rates.{skill.value}", rate.offline_exp_per_minute
                )
            )

        return cls(
            live_rates=live,
            offline_rates=offline,
            base_items_per_minute=config_manager.get(
                "skills.item_rate.base_per_minute", BASE_ITEMS_PER_MINUTE
            ),
            success_base=config_manager.get("skills.success_rate.base", SUCCESS_RATE_BASE),
            success_per_level=config_manager.get(
                "skills.success_rate.per_level", SUCCESS_RATE_PER_LEVEL
            ),
            success_cap=config_manager.get("skills.success_rate.cap", SUCCESS_RATE_CAP),
        )

    def success_rate(self, level: int) -> float:
        return min(self._success_cap, self._success_base + level * self._success_per_level)

    def live_rate(self, skill_type: SkillType) -> float:
        return self._live_rates[SkillType(skill_type)]

    def offline_rate(self, skill_type: SkillType) -> float:
        return self._offline_rates[SkillType(skill_type)]

    def accrual_rate(
        self,
        skill_type: SkillType,
        level: int,
        bonus: EquipmentBonus,
        model: AccrualModel,
    ) -> AccrualRate:
        if model is AccrualModel.ACTION:
            rate = get_skill_rate(skill_type)
            return AccrualRate(
                unit_ms=rate.base_time_per_action_ms / bonus.efficiency_multiplier,
                exp_per_unit=rate.base_experience_per_action,
                items_per_unit=self.success_rate(level),
            )

        items_per_minute = self._base_items_per_minute * bonus.efficiency_multiplier
        if model is AccrualModel.PER_MINUTE:
            return AccrualRate(
                unit_ms=MS_PER_MINUTE,
                exp_per_unit=self.offline_rate(skill_type),
                items_per_unit=items_per_minute,
            )

        return AccrualRate(
            unit_ms=MS_PER_SECOND,
            exp_per_unit=self.live_rate(skill_type) / SECONDS_PER_MINUTE,
            items_per_unit=items_per_minute / SECONDS_PER_MINUTE,
        )

    def compute(
        self,
        state: SkillState,
        elapsed_ms: float,
        model: AccrualModel,
        bonus: EquipmentBonus = NO_BONUS,
    ) -> ProgressionResult:
        """
        Compute gains for ``elapsed_ms`` of training.

        Inactive skills and skills that were never started yield a zero
        result. A zero result means the caller must leave
        ``last_action_time`` where it is so the time keeps accruing.

        Raises:
            InvalidElapsedTimeError: If elapsed_ms is negative
            ProgressionInvariantError: If the level would decrease
        """
        validate_elapsed_ms(elapsed_ms)

        if not state.is_active or state.last_action_time is None:
            return self._zero(state)

        rate = self.accrual_rate(state.skill_type, state.level, bonus, model)
        units = int(elapsed_ms // rate.unit_ms)
        if units <= 0:
            return self._zero(state)

        exp_gained = _floor(units * rate.exp_per_unit * bonus.experience_multiplier)
        items_gained = _floor(units * rate.items_per_unit)

        new_experience = state.experience + exp_gained
        new_level = level_for_experience(new_experience)
        validate_level_progression(state.skill_type.value, state.level, new_level)

        return ProgressionResult(
            units=units,
            exp_gained=exp_gained,
            items_gained=items_gained,
            old_level=state.level,
            new_experience=new_experience,
            new_level=new_level,
        )

    @staticmethod
    def _zero(state: SkillState) -> ProgressionResult:
        return ProgressionResult(
            units=0,
            exp_gained=0,
            items_gained=0,
            old_level=state.level,
            new_experience=state.experience,
            new_level=state.level,
        )
