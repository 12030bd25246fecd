"""
Repository layer for plugin metadata.

Usage:
    from plugininfo.repositories import SqlPluginInfoRepository

    repo = SqlPluginInfoRepository(session_factory)
    plugins = repo.get_by_service("orca")
"""

from .base_repository import BaseRepository
from .plugin_repository import PluginInfoRepository, SqlPluginInfoRepository

__all__ = [
    "BaseRepository",
    "PluginInfoRepository",
    "SqlPluginInfoRepository",
]
