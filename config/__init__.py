"""Configuration module."""

from config.settings import settings, Settings, PollingIntervals

__all__ = [
    "settings",
    "Settings",
    "PollingIntervals",
]
