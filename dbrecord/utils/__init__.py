"""
Utilities package for dbrecord.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of record-specific logic.
"""

from dbrecord.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
