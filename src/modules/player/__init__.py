"""
Player Module
=============

Services
--------
- PlayerService: registration, presence (last_seen) and inventory reads
"""

from .service import PlayerService

__all__ = ["PlayerService"]
