"""
Generic async repository over one ORM model.

The SQL skill store keeps one ``BaseRepository`` per table and drives them
with the session of the current unit of work. Repositories never commit;
``DatabaseService.get_transaction`` owns the transaction boundary.

    skills = BaseRepository[PlayerSkill](PlayerSkill, log)
    rows = await skills.find_many_where(
        session,
        PlayerSkill.player_id == player_id,
        order_by=PlayerSkill.skill_type,
        for_update=True,
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    def __init__(self, model_class: Type[T], logger: Logger) -> None:
        self.model_class = model_class
        self.log = logger

    def _select(
        self,
        conditions: tuple,
        order_by: Optional[Any] = None,
        for_update: bool = False,
    ) -> Select:
        stmt = select(self.model_class).where(*conditions)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        if for_update:
            stmt = stmt.with_for_update()
        return stmt

    def _trace(self, op: str, **fields: Any) -> None:
        self.log.debug(
            f"{self.model_class.__name__}.{op}",
            extra={"model": self.model_class.__name__, **fields},
        )

    async def get(
        self,
        session: AsyncSession,
        id_value: Any,
        for_update: bool = False,
    ) -> Optional[T]:
        """Fetch by primary key (the ``id`` column)."""
        stmt = self._select(
            (self.model_class.id == id_value,),  # type: ignore[attr-defined]
            for_update=for_update,
        )
        instance = (await session.execute(stmt)).scalar_one_or_none()
        self._trace("get", id=id_value, found=instance is not None, locked=for_update)
        return instance

    async def find_one_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        for_update: bool = False,
    ) -> Optional[T]:
        stmt = self._select(conditions, for_update=for_update)
        instance = (await session.execute(stmt)).scalar_one_or_none()
        self._trace("find_one_where", found=instance is not None, locked=for_update)
        return instance

    async def find_many_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Optional[Any] = None,
        for_update: bool = False,
    ) -> List[T]:
        """
        All rows matching ``conditions``.

        Pass ``order_by`` together with ``for_update`` so concurrent writers
        take row locks in the same order.
        """
        stmt = self._select(conditions, order_by=order_by, for_update=for_update)
        instances = list((await session.execute(stmt)).scalars().all())
        self._trace("find_many_where", found_count=len(instances), locked=for_update)
        return instances

    async def add(self, session: AsyncSession, instance: T) -> T:
        session.add(instance)
        await session.flush()
        self._trace("add")
        return instance

    async def flush(self, session: AsyncSession) -> None:
        await session.flush()
