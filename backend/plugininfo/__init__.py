"""
Plugin Info Service

Lifecycle management for plugin metadata records and their releases:
upsert with append-only release merging, release create/replace/delete,
the exclusive preferred release, audit stamping and pluggable validation.

Usage:
    from plugininfo import PluginInfo, Release, get_plugin_info_service

    service = get_plugin_info_service()
    service.upsert(PluginInfo(id="netflix.canary", releases=[Release(version="1.0.0")]))
"""

from .models import PluginInfo, Release, ServiceRequirement  # noqa: F401
from .services.plugin_info_service import PluginInfoService, get_plugin_info_service  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "PluginInfo",
    "Release",
    "ServiceRequirement",
    "PluginInfoService",
    "get_plugin_info_service",
]
