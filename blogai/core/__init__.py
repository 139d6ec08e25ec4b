"""Core app configuration, database, security and error taxonomy."""

from blogai.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
