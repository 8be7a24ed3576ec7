"""Configuration layer for AstroGuide."""

from __future__ import annotations

from .settings import (
    Settings,
    default_settings,
    get_settings,
    load_settings,
    save_settings,
)

__all__ = [
    "Settings",
    "default_settings",
    "get_settings",
    "load_settings",
    "save_settings",
]
