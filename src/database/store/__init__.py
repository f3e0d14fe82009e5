"""
Persistence stores.

- SkillStore / SkillUnitOfWork: abstract unit-of-work interface
- InMemorySkillStore: dictionary-backed implementation
- SqlAlchemySkillStore: PostgreSQL implementation over DatabaseService
"""

from .base import SkillStore, SkillUnitOfWork
from .memory import InMemorySkillStore
from .sql import SqlAlchemySkillStore

__all__ = [
    "SkillStore",
    "SkillUnitOfWork",
    "InMemorySkillStore",
    "SqlAlchemySkillStore",
]
