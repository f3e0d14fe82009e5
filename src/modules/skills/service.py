"""
Skill Reconciliation Service
============================

Purpose
-------
Applies the progression engine to persisted skill state. Owns the live tick,
offline resume, start/stop training and the one-active-skill rule.

Reconciliation Protocol
-----------------------
For every active skill with a ``last_action_time``:

1. ``elapsed = now - last_action_time``, clamped at zero
2. Compute gains with the skill's relevant equipment bonus
3. Non-zero gain: write experience, level and ``last_action_time = now``
   and add items to the current resource's stack, in one unit of work
4. Zero gain: write nothing, so the elapsed time keeps accruing

Calling again with the same ``now`` finds zero elapsed time and changes
nothing. All operations for one player run under that player's lock.

Events (published after commit)
-------------------------------
- ``skill.progress_applied``
- ``skill.leveled_up``
- ``skill.training_started``
- ``skill.training_stopped``
"""

from __future__ import annotations

import dataclasses
import math
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Optional, Tuple

from src.core.exceptions import ConfigurationError, StructuredError
from src.core.logging.logger import LogContext
from src.core.validation.input_validator import InputValidator
from src.database.models.enums import SkillType
from src.domain.models.skill import (
    AccrualModel,
    ReconciliationResult,
    SkillGain,
    SkillReconciliationError,
    SkillState,
    SkillView,
)
from src.modules.shared.base_service import BaseService
from src.modules.shared.exceptions import InvalidOperationError
from src.modules.shared.formulas import experience_to_next, level_progress_percent
from src.modules.shared.validators import (
    validate_player_exists,
    validate_resource_unlocked,
    validate_skill_exists,
)
from src.modules.skills.bonuses import aggregate_bonuses
from src.modules.skills.locks import PlayerLockRegistry
from src.modules.skills.rates import available_resources, best_resource, resource_tier

if TYPE_CHECKING:
    from logging import Logger

    from src.core.config.manager import ConfigManager
    from src.core.event.bus import EventBus
    from src.database.store.base import SkillStore
    from src.modules.skills.engine import ProgressionEngine

_ONE_MS = timedelta(milliseconds=1)


@dataclass
class _PendingEvents:
    """Events collected under the lock and published after it is released."""

    items: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

    def add(self, event_type: str, data: Dict[str, Any]) -> None:
        self.items.append((event_type, data))


class SkillReconciliationService(BaseService):
    """
    Reconciles elapsed training time into experience, levels and items.

    Public Methods
    --------------
    - reconcile() -> Apply progress to all active skills with a given model
    - tick() -> Live reconciliation (per-second model)
    - resume() -> Offline catch-up; touches last_seen
    - start_training() -> Activate a skill, deactivating any other
    - stop_training() -> Settle and deactivate a skill
    - get_skills() -> Read-only skill views
    """

    def __init__(
        self,
        store: SkillStore,
        engine: ProgressionEngine,
        config_manager: type[ConfigManager],
        event_bus: EventBus,
        logger: Logger,
        locks: Optional[PlayerLockRegistry] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._store = store
        self._engine = engine
        self._locks = locks or PlayerLockRegistry()

    # ========================================================================
    # PUBLIC API - Reconciliation
    # ========================================================================

    async def reconcile(
        self, player_id: str, now: datetime, model: AccrualModel
    ) -> ReconciliationResult:
        """
        Apply pending progress of every active skill at ``now``.

        Failures are scoped to one skill: they are recorded on the result and
        leave that skill's ``last_action_time`` untouched, while sibling skills
        still commit.

        Raises:
            ValidationError: If player_id or now is malformed
            NotFoundError: If the player does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)
        now = InputValidator.validate_timestamp(now)
        model = AccrualModel(model)

        async with LogContext(player_id=player_id, operation="reconcile"):
            events = _PendingEvents()
            async with self._locks.hold(player_id):
                result = await self._reconcile_locked(player_id, now, model, events)
            await self._publish(events)
            return result

    @asynccontextmanager
    async def settled(self, player_id: str, now: datetime) -> AsyncIterator[ReconciliationResult]:
        """
        Apply pending live progress and keep the player's lock for the block.

        Lets callers change state that feeds the next reconciliation (gear)
        in the same critical section as the settlement. Progress events are
        published once the lock is released, even if the block raises.
        """
        player_id = InputValidator.validate_player_id(player_id)
        now = InputValidator.validate_timestamp(now)

        async with LogContext(player_id=player_id, operation="settle"):
            events = _PendingEvents()
            try:
                async with self._locks.hold(player_id):
                    yield await self._reconcile_locked(
                        player_id, now, AccrualModel.PER_SECOND, events
                    )
            finally:
                await self._publish(events)

    async def tick(self, player_id: str, now: datetime) -> ReconciliationResult:
        """Live reconciliation using whole seconds and live rates."""
        return await self.reconcile(player_id, now, AccrualModel.PER_SECOND)

    async def resume(self, player_id: str, now: datetime) -> ReconciliationResult:
        """
        Offline catch-up when a player returns.

        Uses the configured resume model (``skills.resume_model``), reports
        whole minutes since the previous ``last_seen`` and then moves
        ``last_seen`` to ``now``.
        """
        player_id = InputValidator.validate_player_id(player_id)
        now = InputValidator.validate_timestamp(now)
        model = self._resume_model()

        async with LogContext(player_id=player_id, operation="resume"):
            events = _PendingEvents()
            async with self._locks.hold(player_id):
                async with self._store.unit_of_work() as uow:
                    player = await uow.get_player(player_id)
                    validate_player_exists(player, player_id)
                previous_seen = player.last_seen

                result = await self._reconcile_locked(player_id, now, model, events)

                async with self._store.unit_of_work() as uow:
                    await uow.touch_player(player_id, now)

            await self._publish(events)

            offline_minutes = max(0, math.floor((now - previous_seen).total_seconds() / 60))
            self.log_operation(
                "resume",
                player_id=player_id,
                offline_minutes=offline_minutes,
                total_exp_gained=result.total_exp_gained,
                total_items_gained=result.total_items_gained,
                total_level_ups=result.total_level_ups,
            )
            return dataclasses.replace(result, offline_minutes=offline_minutes)

    # ========================================================================
    # PUBLIC API - Training
    # ========================================================================

    async def start_training(
        self,
        player_id: str,
        skill_type: Any,
        now: datetime,
        resource: Optional[str] = None,
    ) -> SkillState:
        """
        Make ``skill_type`` the player's only active skill.

        Pending progress of the currently active skill is applied first
        (live model); that skill is then deactivated with
        ``last_action_time = now``. Without ``resource`` the best unlocked
        resource is selected.

        Raises:
            UnknownSkillTypeError: If skill_type is not a known skill
            InvalidOperationError: If resource is not gathered by the skill
            ResourceLockedError: If resource needs a higher level
        """
        skill = InputValidator.validate_skill_type(skill_type)
        player_id = InputValidator.validate_player_id(player_id)
        now = InputValidator.validate_timestamp(now)

        async with LogContext(player_id=player_id, operation="start_training"):
            events = _PendingEvents()
            async with self._locks.hold(player_id):
                async with self._store.unit_of_work() as uow:
                    player = await uow.get_player(player_id)
                    validate_player_exists(player, player_id)
                    target = await uow.get_skill(player_id, skill)
                    validate_skill_exists(target, player_id, skill.value)
                    skills = await uow.list_skills(player_id)
                if resource is not None:
                    self._check_resource(skill, resource, target.level)

                for state in skills:
                    if state.is_active:
                        await self._settle(player_id, state.skill_type, now, events)

                async with self._store.unit_of_work() as uow:
                    for state in await uow.list_skills(player_id):
                        if state.is_active and state.skill_type is not skill:
                            await uow.update_skill(
                                player_id,
                                state.skill_type,
                                is_active=False,
                                last_action_time=now,
                            )
                            events.add(
                                "skill.training_stopped",
                                {
                                    "player_id": player_id,
                                    "skill": state.skill_type.value,
                                    "reason": "switched",
                                },
                            )

                    current = await uow.get_skill(player_id, skill, for_update=True)
                    validate_skill_exists(current, player_id, skill.value)
                    chosen = resource or best_resource(skill, current.level).resource_id
                    started = await uow.update_skill(
                        player_id,
                        skill,
                        is_active=True,
                        current_resource=chosen,
                        last_action_time=now,
                    )

                events.add(
                    "skill.training_started",
                    {
                        "player_id": player_id,
                        "skill": skill.value,
                        "resource": chosen,
                        "level": started.level,
                    },
                )

            await self._publish(events)
            self.log_operation(
                "start_training", player_id=player_id, skill=skill.value, resource=chosen
            )
            return started

    async def stop_training(
        self, player_id: str, skill_type: Any, now: datetime
    ) -> SkillState:
        """
        Settle pending progress and deactivate ``skill_type``.

        Stopping a skill that is not active changes nothing.
        """
        skill = InputValidator.validate_skill_type(skill_type)
        player_id = InputValidator.validate_player_id(player_id)
        now = InputValidator.validate_timestamp(now)

        async with LogContext(player_id=player_id, operation="stop_training"):
            events = _PendingEvents()
            async with self._locks.hold(player_id):
                async with self._store.unit_of_work() as uow:
                    state = await uow.get_skill(player_id, skill)
                    validate_skill_exists(state, player_id, skill.value)

                if not state.is_active:
                    return state

                await self._settle(player_id, skill, now, events)

                async with self._store.unit_of_work() as uow:
                    stopped = await uow.update_skill(
                        player_id, skill, is_active=False, last_action_time=now
                    )
                events.add(
                    "skill.training_stopped",
                    {"player_id": player_id, "skill": skill.value, "reason": "stopped"},
                )

            await self._publish(events)
            self.log_operation("stop_training", player_id=player_id, skill=skill.value)
            return stopped

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_skills(self, player_id: str) -> List[SkillView]:
        """Per-skill display data in skill declaration order."""
        player_id = InputValidator.validate_player_id(player_id)

        async with self._store.unit_of_work() as uow:
            player = await uow.get_player(player_id)
            validate_player_exists(player, player_id)
            skills = await uow.list_skills(player_id)

        return [
            SkillView(
                skill_type=state.skill_type,
                level=state.level,
                experience=state.experience,
                experience_to_next=experience_to_next(state.experience),
                progress_percent=level_progress_percent(state.experience, state.level),
                is_active=state.is_active,
                current_resource=state.current_resource,
                available_resources=[
                    tier.resource_id
                    for tier in available_resources(state.skill_type, state.level)
                ],
            )
            for state in skills
        ]

    # ========================================================================
    # INTERNAL
    # ========================================================================

    def _resume_model(self) -> AccrualModel:
        value = self.get_config("skills.resume_model", AccrualModel.ACTION.value)
        try:
            return AccrualModel(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                "skills.resume_model", f"unknown accrual model {value!r}"
            ) from None

    @staticmethod
    def _check_resource(skill: SkillType, resource: str, level: int) -> None:
        tier = resource_tier(skill, resource)
        if tier is None:
            raise InvalidOperationError(
                "start_training", f"resource '{resource}' is not gathered by {skill.value}"
            )
        validate_resource_unlocked(skill.value, resource, tier.min_level, level)

    def _elapsed_ms(self, skill: SkillType, last_action_time: datetime, now: datetime) -> int:
        elapsed_ms = (now - last_action_time) // _ONE_MS
        if elapsed_ms < 0:
            self.log.warning(
                "Negative elapsed time clamped to zero",
                extra={
                    "skill": skill.value,
                    "elapsed_ms": elapsed_ms,
                    "last_action_time": last_action_time.isoformat(),
                    "now": now.isoformat(),
                },
            )
            return 0
        return elapsed_ms

    async def _reconcile_locked(
        self,
        player_id: str,
        now: datetime,
        model: AccrualModel,
        events: _PendingEvents,
    ) -> ReconciliationResult:
        async with self._store.unit_of_work() as uow:
            player = await uow.get_player(player_id)
            validate_player_exists(player, player_id)
            skills = await uow.list_skills(player_id)

        gains: List[SkillGain] = []
        errors: List[SkillReconciliationError] = []

        for state in skills:
            if not state.is_active or state.last_action_time is None:
                continue
            try:
                gain = await self._apply_progress(player_id, state.skill_type, now, model)
            except StructuredError as exc:
                self.log_error(
                    "reconcile", exc, player_id=player_id, skill=state.skill_type.value
                )
                errors.append(
                    SkillReconciliationError(
                        skill_type=state.skill_type,
                        error_code=exc.error_code,
                        reason=exc.message,
                    )
                )
                continue
            if gain is not None:
                gains.append(gain)
                self._collect_gain_events(player_id, gain, model, events)

        return ReconciliationResult(
            player_id=player_id,
            reconciled_at=now,
            model=model,
            gains=tuple(gains),
            errors=tuple(errors),
        )

    async def _settle(
        self,
        player_id: str,
        skill: SkillType,
        now: datetime,
        events: _PendingEvents,
    ) -> Optional[SkillGain]:
        """Apply pending live progress to one skill before its state changes."""
        gain = await self._apply_progress(player_id, skill, now, AccrualModel.PER_SECOND)
        if gain is not None:
            self._collect_gain_events(player_id, gain, AccrualModel.PER_SECOND, events)
        return gain

    async def _apply_progress(
        self,
        player_id: str,
        skill: SkillType,
        now: datetime,
        model: AccrualModel,
    ) -> Optional[SkillGain]:
        """
        One skill's read-modify-write in a single unit of work.

        Returns None when nothing was written.
        """
        async with self._store.unit_of_work() as uow:
            state = await uow.get_skill(player_id, skill, for_update=True)
            validate_skill_exists(state, player_id, skill.value)
            if not state.is_active or state.last_action_time is None:
                return None

            elapsed_ms = self._elapsed_ms(skill, state.last_action_time, now)
            bonus = aggregate_bonuses(await uow.list_equipment(player_id), skill)
            progress = self._engine.compute(state, elapsed_ms, model, bonus)
            if progress.is_zero:
                return None

            await uow.update_skill(
                player_id,
                skill,
                experience=progress.new_experience,
                level=progress.new_level,
                last_action_time=now,
            )
            if state.current_resource and progress.items_gained > 0:
                await uow.increment_inventory_item(
                    player_id, state.current_resource, progress.items_gained, now
                )

        self.log.debug(
            "Skill progress applied",
            extra={
                "skill": skill.value,
                "model": model.value,
                "elapsed_ms": elapsed_ms,
                "units": progress.units,
                "exp_gained": progress.exp_gained,
                "items_gained": progress.items_gained,
                "level_ups": progress.level_ups,
            },
        )
        return SkillGain(
            skill_type=skill,
            exp_gained=progress.exp_gained,
            items_gained=progress.items_gained,
            level_ups=progress.level_ups,
            old_level=progress.old_level,
            new_level=progress.new_level,
            resource=state.current_resource,
        )

    @staticmethod
    def _collect_gain_events(
        player_id: str,
        gain: SkillGain,
        model: AccrualModel,
        events: _PendingEvents,
    ) -> None:
        events.add(
            "skill.progress_applied",
            {"player_id": player_id, "model": model.value, **gain.to_dict()},
        )
        if gain.level_ups > 0:
            events.add(
                "skill.leveled_up",
                {
                    "player_id": player_id,
                    "skill": gain.skill_type.value,
                    "old_level": gain.old_level,
                    "new_level": gain.new_level,
                    "level_ups": gain.level_ups,
                },
            )

    async def _publish(self, events: _PendingEvents) -> None:
        for event_type, data in events.items:
            await self.emit_event(event_type, data)
