"""Core app configuration and security helpers."""

from app.core.config import get_settings, settings

__all__ = ["get_settings", "settings"]
