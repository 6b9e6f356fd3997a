"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from orderdesk.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from orderdesk.core.exceptions import (
    OrderDeskError,
    ValidationError,
    NotFoundError,
    PersistenceError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "OrderDeskError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
]
