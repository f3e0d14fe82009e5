"""
Core infrastructure layer for Idle Skills.

Purpose
-------
Provide a single import surface for the core infrastructure subsystems:

- Configuration management (Config, ConfigManager)
- Database subsystem (DatabaseService)
- Logging (structured logging, logger factory)
- Infrastructure exceptions (StructuredError hierarchy)

Non-Responsibilities
--------------------
- Implement infra logic (delegated to submodules)
- Skill progression rules (``src.modules``)

Design Decisions
----------------
- This module is intentionally thin: no logic, no configuration, no I/O.
- Domain modules import from their own packages, not from ``src.core``.
"""

from __future__ import annotations

from src.core.config import Config, ConfigManager
from src.core.database import DatabaseService
from src.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    ErrorSeverity,
    InfrastructureException,
    StructuredError,
)
from src.core.logging import get_logger, setup_logging

__all__ = [
    # Configuration
    "Config",
    "ConfigManager",
    # Database
    "DatabaseService",
    # Logging
    "setup_logging",
    "get_logger",
    # Exceptions
    "StructuredError",
    "InfrastructureException",
    "ConfigurationError",
    "DatabaseError",
    "ErrorSeverity",
]
