"""
Unit test fixtures and helpers.

Provides lightweight fixtures for unit testing that do NOT require
external services: an in-memory SQLite repository, a temporary
filesystem binary store and a frozen clock.
"""

from datetime import datetime, timezone
from typing import Callable, Sequence

import pytest

from plugininfo.config import Settings
from plugininfo.database import create_session_factory
from plugininfo.models import PluginInfo, Release
from plugininfo.repositories import SqlPluginInfoRepository
from plugininfo.services.plugin_info_service import PluginInfoService
from plugininfo.services.plugins import FilesystemBinaryStorageService, default_validators

FROZEN_NOW = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


def make_plugin(plugin_id: str = "netflix.canary", versions: Sequence[str] = (), **kwargs) -> PluginInfo:
    """Build a PluginInfo with one release per version."""
    releases = [Release(version=v, requires="orca>=7.0.0") for v in versions]
    kwargs.setdefault("service", "orca")
    return PluginInfo(id=plugin_id, releases=releases, **kwargs)


@pytest.fixture
def plugin_factory() -> Callable[..., PluginInfo]:
    """Expose make_plugin to tests in subdirectories."""
    return make_plugin


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at in-memory SQLite and a temporary binary root."""
    return Settings(
        database_url="sqlite:///:memory:",
        binary_storage_path=str(tmp_path / "binaries"),
    )


@pytest.fixture
def repository(settings: Settings) -> SqlPluginInfoRepository:
    return SqlPluginInfoRepository(create_session_factory(settings))


@pytest.fixture
def storage(settings: Settings) -> FilesystemBinaryStorageService:
    return FilesystemBinaryStorageService(settings.binary_storage_path)


@pytest.fixture
def service(repository, storage) -> PluginInfoService:
    """Service wired with real collaborators, no ambient identity and a frozen clock."""
    return PluginInfoService(
        repository,
        storage_service=storage,
        validators=default_validators(),
        identity_resolver=None,
        clock=lambda: FROZEN_NOW,
    )


@pytest.fixture
def frozen_now() -> datetime:
    """The timestamp every service operation is stamped with."""
    return FROZEN_NOW
