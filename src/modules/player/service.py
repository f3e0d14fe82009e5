"""
Player Service
==============

Purpose
-------
Player lifecycle and read models: registration, presence tracking and
inventory reads.

Domain
------
- Atomic registration of the player row, its four skills and its four
  empty equipment slots
- ``last_seen`` updates
- Inventory listing

Dependencies
------------
- SkillStore: Unit of work over persisted state
- ConfigManager: Balance configuration
- EventBus: For emitting player.registered
- Logger: Structured logging
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from src.core.config.config import Config
from src.core.logging.logger import LogContext
from src.core.validation.input_validator import InputValidator
from src.database.models.enums import EquipmentSlot, SkillType
from src.domain.models.player import EquipmentItem, InventoryStack, PlayerProfile
from src.domain.models.skill import SkillState
from src.modules.shared.base_service import BaseService
from src.modules.shared.constants import MIN_SKILL_LEVEL
from src.modules.shared.exceptions import InvalidOperationError
from src.modules.shared.validators import validate_player_exists

if TYPE_CHECKING:
    from logging import Logger

    from src.core.config.manager import ConfigManager
    from src.core.event.bus import EventBus
    from src.database.store.base import SkillStore


class PlayerService(BaseService):
    """
    Player registration and presence.

    Public Methods
    --------------
    - register_player() -> Create player, skills and equipment slots atomically
    - get_player() -> Fetch a player profile
    - player_exists() -> Check registration
    - touch_player() -> Update last_seen
    - get_inventory() -> Item stacks sorted by item type
    """

    def __init__(
        self,
        store: SkillStore,
        config_manager: type[ConfigManager],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._store = store

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def register_player(
        self,
        name: Optional[str],
        now: datetime,
        player_id: Optional[str] = None,
    ) -> PlayerProfile:
        """
        Register a new player.

        Creates in one unit of work:
        - the player row (``last_seen = created_at = now``)
        - one skill per skill type at level 1, 0 experience, inactive
        - one empty row per equipment slot

        Args:
            name: Display name; defaults to ``Config.DEFAULT_PLAYER_NAME``
            now: Registration time (timezone-aware)
            player_id: Identifier from the session layer; generated if omitted

        Raises:
            ValidationError: If an input is malformed
            InvalidOperationError: If the player is already registered

        Example:
            >>> profile = await service.register_player("Ayla", now)
            >>> profile.name
            'Ayla'
        """
        name = InputValidator.validate_player_name(name or Config.DEFAULT_PLAYER_NAME)
        now = InputValidator.validate_timestamp(now)
        player_id = InputValidator.validate_player_id(player_id or uuid.uuid4().hex)

        async with LogContext(player_id=player_id, operation="register_player"):
            self.log_operation("register_player", player_id=player_id, player_name=name)

            async with self._store.unit_of_work() as uow:
                if await uow.get_player(player_id) is not None:
                    raise InvalidOperationError(
                        "register_player",
                        f"player {player_id} is already registered",
                    )

                profile = await uow.create_player(
                    PlayerProfile(
                        player_id=player_id,
                        name=name,
                        last_seen=now,
                        created_at=now,
                    )
                )
                for skill_type in SkillType:
                    await uow.create_skill(
                        SkillState(
                            player_id=player_id,
                            skill_type=skill_type,
                            level=MIN_SKILL_LEVEL,
                            experience=0,
                        )
                    )
                for slot in EquipmentSlot:
                    await uow.create_equipment(EquipmentItem(player_id=player_id, slot=slot))

            await self.emit_event(
                "player.registered",
                {
                    "player_id": player_id,
                    "name": name,
                    "registered_at": now.isoformat(),
                },
            )
            return profile

    async def touch_player(self, player_id: str, now: datetime) -> PlayerProfile:
        """
        Mark the player as seen at ``now``.

        Raises:
            NotFoundError: If the player does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)
        now = InputValidator.validate_timestamp(now)

        async with self._store.unit_of_work() as uow:
            return await uow.touch_player(player_id, now)

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_player(self, player_id: str) -> PlayerProfile:
        """
        Raises:
            NotFoundError: If the player does not exist
        """
        player_id = InputValidator.validate_player_id(player_id)

        async with self._store.unit_of_work() as uow:
            player = await uow.get_player(player_id)
        validate_player_exists(player, player_id)
        return player

    async def player_exists(self, player_id: str) -> bool:
        player_id = InputValidator.validate_player_id(player_id)

        async with self._store.unit_of_work() as uow:
            return await uow.get_player(player_id) is not None

    async def get_inventory(self, player_id: str) -> List[InventoryStack]:
        """Item stacks owned by the player, sorted by item type."""
        player_id = InputValidator.validate_player_id(player_id)

        async with self._store.unit_of_work() as uow:
            player = await uow.get_player(player_id)
            validate_player_exists(player, player_id)
            return await uow.list_inventory(player_id)
