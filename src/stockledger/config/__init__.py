"""Configuration module."""

from stockledger.config.logging import configure_logging, get_logger
from stockledger.config.settings import (
    InventorySettings,
    Settings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "InventorySettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
]
