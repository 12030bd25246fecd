"""
Plugin Info Repository

Defines the storage contract the plugin info service depends on and the
SQLAlchemy implementation of it. Records are stored as their camelCase JSON
body so opaque release payload round-trips unchanged.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from sqlalchemy.orm import sessionmaker

from ..database import PluginInfoRecord, as_utc, utcnow
from ..models.plugin_models import PluginInfo
from ..services.plugins.exceptions import InvalidRequestError, PluginNotFoundError
from ..utils.logging_security import sanitize_for_log
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PluginInfoRepository(ABC):
    """
    Durable keyed storage of plugin metadata records.

    Implementations raise PluginNotFoundError from find_by_id for unknown ids;
    the service relies on that signal to choose between create and update.
    """

    @abstractmethod
    def all(self) -> List[PluginInfo]:
        """Return every stored record."""

    @abstractmethod
    def get_by_service(self, service: str) -> List[PluginInfo]:
        """Return records tagged with the given service."""

    @abstractmethod
    def find_by_id(self, plugin_id: str) -> PluginInfo:
        """Return the record or raise PluginNotFoundError."""

    @abstractmethod
    def create(self, plugin_id: str, plugin_info: PluginInfo) -> PluginInfo:
        """Store a new record and return it."""

    @abstractmethod
    def update(self, plugin_id: str, plugin_info: PluginInfo) -> None:
        """Overwrite an existing record."""

    @abstractmethod
    def delete(self, plugin_id: str) -> None:
        """Remove a record; unknown ids are ignored."""


class SqlPluginInfoRepository(BaseRepository[PluginInfoRecord], PluginInfoRepository):
    """
    PluginInfoRepository backed by the plugin_info table.

    Example:
        repo = SqlPluginInfoRepository(create_session_factory(settings))
        plugin_info = repo.find_by_id("netflix.canary")
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        super().__init__(PluginInfoRecord, session_factory)

    def all(self) -> List[PluginInfo]:
        with self.session_scope() as session:
            return [self._to_model(row) for row in self.find_many(session)]

    def get_by_service(self, service: str) -> List[PluginInfo]:
        with self.session_scope() as session:
            rows = self.find_many(session, {"service": service})
            return [self._to_model(row) for row in rows]

    def find_by_id(self, plugin_id: str) -> PluginInfo:
        with self.session_scope() as session:
            row = self.get(session, plugin_id)
            if row is None:
                raise PluginNotFoundError(plugin_id)
            return self._to_model(row)

    def create(self, plugin_id: str, plugin_info: PluginInfo) -> PluginInfo:
        """
        Insert a new record.

        Raises:
            InvalidRequestError: If the id is already stored or does not
                match the record
        """
        self._check_id(plugin_id, plugin_info)
        with self.session_scope() as session:
            if self.get(session, plugin_id) is not None:
                raise InvalidRequestError(
                    f"Plugin already exists: {plugin_id}", plugin_id=plugin_id
                )
            now = utcnow()
            row = PluginInfoRecord(
                id=plugin_id,
                service=plugin_info.service,
                body=self._to_body(plugin_info),
                created_at=now,
                last_modified=now,
            )
            self.add(session, row)
            logger.debug(f"Created plugin record {sanitize_for_log(plugin_id)}")
            return self._to_model(row)

    def update(self, plugin_id: str, plugin_info: PluginInfo) -> None:
        """
        Overwrite an existing record and stamp its last_modified time.

        Raises:
            PluginNotFoundError: If the id is not stored
        """
        self._check_id(plugin_id, plugin_info)
        with self.session_scope() as session:
            row = self.get(session, plugin_id)
            if row is None:
                raise PluginNotFoundError(plugin_id)
            now = utcnow()
            row.service = plugin_info.service
            row.body = self._to_body(plugin_info)
            row.last_modified = now
            plugin_info.create_ts = as_utc(row.created_at)
            plugin_info.last_modified = now
            logger.debug(f"Updated plugin record {sanitize_for_log(plugin_id)}")

    def delete(self, plugin_id: str) -> None:
        with self.session_scope() as session:
            row = self.get(session, plugin_id)
            if row is None:
                return
            self.remove(session, row)
            logger.debug(f"Deleted plugin record {sanitize_for_log(plugin_id)}")

    @staticmethod
    def _check_id(plugin_id: str, plugin_info: PluginInfo) -> None:
        if plugin_info.id != plugin_id:
            raise InvalidRequestError(
                f"Plugin id mismatch: {plugin_id} != {plugin_info.id}", plugin_id=plugin_id
            )

    @staticmethod
    def _to_body(plugin_info: PluginInfo) -> dict:
        return plugin_info.model_dump(
            mode="json", by_alias=True, exclude={"create_ts", "last_modified"}
        )

    @staticmethod
    def _to_model(row: PluginInfoRecord) -> PluginInfo:
        plugin_info = PluginInfo.model_validate(row.body)
        plugin_info.create_ts = as_utc(row.created_at)
        plugin_info.last_modified = as_utc(row.last_modified)
        return plugin_info
