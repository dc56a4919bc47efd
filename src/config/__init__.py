"""
pagepress settings (PAGEPRESS_* environment variables)
"""

from .settings import appsettings, AppSettings

__all__ = ["appsettings", "AppSettings"]
