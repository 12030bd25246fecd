"""Plugin metadata models."""

from .plugin_models import REQUIRES_PATTERN, PluginInfo, Release, ServiceRequirement  # noqa: F401

__all__ = [
    "PluginInfo",
    "Release",
    "ServiceRequirement",
    "REQUIRES_PATTERN",
]
