"""
Validation package.

Canonical import surface for input validation primitives.
"""

from src.core.validation.input_validator import InputValidator

__all__ = [
    "InputValidator",
]
