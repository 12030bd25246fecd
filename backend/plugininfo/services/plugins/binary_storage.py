"""
Plugin Binary Storage
Keyed blob storage for release artifacts
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from ...utils.logging_security import sanitize_for_log
from .exceptions import PluginStorageError

logger = logging.getLogger(__name__)


class PluginBinaryStorageService(ABC):
    """
    Release artifact store keyed by (plugin id, version).

    The plugin info service only needs get_key and delete; store, load and
    list_keys serve the publishing side.
    """

    def get_key(self, plugin_id: str, version: str) -> str:
        """Artifact key for a release, e.g. netflix.canary/1.2.0.zip"""
        return f"{plugin_id}/{version}.zip"

    @abstractmethod
    def store(self, key: str, content: bytes) -> None:
        """Write an artifact, replacing any existing content."""

    @abstractmethod
    def load(self, key: str) -> bytes:
        """Read an artifact or raise PluginStorageError."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an artifact; missing keys are ignored."""

    @abstractmethod
    def list_keys(self) -> List[str]:
        """Every stored key, sorted."""


class FilesystemBinaryStorageService(PluginBinaryStorageService):
    """
    Stores release artifacts as files under a root directory.

    Example:
        storage = FilesystemBinaryStorageService("/var/lib/plugininfo/binaries")
        key = storage.get_key("netflix.canary", "1.2.0")
        storage.store(key, archive_bytes)
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True, mode=0o755)

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise PluginStorageError(f"Artifact key escapes storage root: {key}", key, "resolve")
        return path

    def store(self, key: str, content: bytes) -> None:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
            path.chmod(0o644)
        except OSError as e:
            raise PluginStorageError(f"Failed to store artifact {key}: {e}", key, "store") from e
        logger.info(f"Stored artifact {sanitize_for_log(key)} ({len(content)} bytes)")

    def load(self, key: str) -> bytes:
        path = self._path_for(key)
        if not path.is_file():
            raise PluginStorageError(f"Artifact not found: {key}", key, "load")
        try:
            return path.read_bytes()
        except OSError as e:
            raise PluginStorageError(f"Failed to read artifact {key}: {e}", key, "load") from e

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        if not path.exists():
            return
        try:
            path.unlink()
        except OSError as e:
            raise PluginStorageError(f"Failed to delete artifact {key}: {e}", key, "delete") from e

        # Drop the per-plugin directory once its last release is gone
        parent = path.parent
        if parent != self.root and not any(parent.iterdir()):
            parent.rmdir()
        logger.info(f"Deleted artifact {sanitize_for_log(key)}")

    def list_keys(self) -> List[str]:
        return sorted(
            path.relative_to(self.root).as_posix() for path in self.root.rglob("*") if path.is_file()
        )
