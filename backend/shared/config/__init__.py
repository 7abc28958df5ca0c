"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import settings, get_settings, Settings
from shared.config.logging import get_logger, setup_logging, mask_email
from shared.config.constants import (
    Roles,
    Collections,
    Routes,
    StatusFilter,
    Limits,
    ImageLimits,
    DEFAULT_ROLE,
)

__all__ = [
    # settings
    "settings",
    "get_settings",
    "Settings",
    # logging
    "get_logger",
    "setup_logging",
    "mask_email",
    # constants
    "Roles",
    "Collections",
    "Routes",
    "StatusFilter",
    "Limits",
    "ImageLimits",
    "DEFAULT_ROLE",
]
