"""
Plugin Info Service

Business logic for plugin metadata records and their releases. Sits between
the HTTP layer and the repository, and owns:
- Create-or-merge upsert that never rewrites a published release
- Release create / replace / delete and the preferred-release invariant
- Audit stamping of release mutations with the acting user
- The validation pipeline run before every write
- Best-effort cleanup of release binaries when releases are deleted

Every mutation is a synchronous read-modify-write against the repository.
No locking is done here; concurrent writers to the same plugin id get
whatever the repository provides.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import Settings, get_settings
from ..models.plugin_models import PluginInfo, Release
from ..repositories.plugin_repository import PluginInfoRepository
from ..utils.logging_security import create_audit_log_entry, sanitize_for_log, sanitize_release_for_log
from .plugins.binary_storage import PluginBinaryStorageService
from .plugins.exceptions import (
    InvalidRequestError,
    PluginNotFoundError,
    PluginValidationError,
    ReleaseNotFoundError,
)
from .plugins.identity import IdentityResolver, get_current_user
from .plugins.validation import PluginInfoValidator, ValidationErrors

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PluginInfoService:
    """
    Plugin metadata lifecycle management.

    Args:
        repository: Plugin record storage
        storage_service: Release binary store; binary cleanup is skipped when None
        validators: Validators run in order before every write
        identity_resolver: Returns the acting user; defaults to the
            request-scoped user bound with authenticated_user()
        anonymous_user: Audit name used when no identity is available
        clock: Source of operation timestamps

    Example:
        service = PluginInfoService(repository, storage, default_validators())
        service.upsert(PluginInfo(id="netflix.canary", releases=[...]))
        service.prefer_release_version("netflix.canary", "1.2.0", True, user="jdoe")
    """

    def __init__(
        self,
        repository: PluginInfoRepository,
        storage_service: Optional[PluginBinaryStorageService] = None,
        validators: Optional[Sequence[PluginInfoValidator]] = None,
        identity_resolver: Optional[IdentityResolver] = get_current_user,
        anonymous_user: str = ANONYMOUS_USER,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.storage_service = storage_service
        self.validators: List[PluginInfoValidator] = list(validators or [])
        self.identity_resolver = identity_resolver
        self.anonymous_user = anonymous_user
        self.clock = clock

    # ========================================================================
    # READS
    # ========================================================================

    def find_all(self) -> List[PluginInfo]:
        return self.repository.all()

    def find_all_by_service(self, service: str) -> List[PluginInfo]:
        """
        List plugins tagged with a consuming service.

        Raises:
            InvalidRequestError: If service is empty
        """
        if not service or not service.strip():
            raise InvalidRequestError("Service tag cannot be empty")
        return self.repository.get_by_service(service)

    def find_by_id(self, plugin_id: str) -> PluginInfo:
        """
        Get a single plugin record.

        Raises:
            PluginNotFoundError: If the plugin does not exist
        """
        return self.repository.find_by_id(plugin_id)

    # ========================================================================
    # PLUGIN RECORDS
    # ========================================================================

    def upsert(self, plugin_info: PluginInfo) -> PluginInfo:
        """
        Create a plugin record, or append new releases to an existing one.

        Upsert is not an authorized surface, so every incoming release is
        forced to preferred=False; preference changes go through
        prefer_release_version. Existing releases are kept unchanged and in
        order, followed by the new releases in request order.

        Args:
            plugin_info: Candidate record

        Returns:
            The persisted record

        Raises:
            InvalidRequestError: If a candidate release version is already stored
            PluginValidationError: If the resulting record fails validation
        """
        candidate = plugin_info.model_copy(deep=True)
        for release in candidate.releases:
            release.preferred = False

        try:
            current = self.repository.find_by_id(candidate.id)
        except PluginNotFoundError:
            self.validate(candidate)
            created = self.repository.create(candidate.id, candidate)
            logger.info(f"Created plugin {sanitize_for_log(candidate.id)}")
            return created

        existing_versions = set(current.versions())
        for release in candidate.releases:
            if release.version in existing_versions:
                raise InvalidRequestError(
                    f"Cannot update an existing release: {release.version}",
                    plugin_id=candidate.id,
                    version=release.version,
                )

        candidate.releases = list(current.releases) + list(candidate.releases)
        self.validate(candidate)
        self.repository.update(candidate.id, candidate)
        logger.info(
            f"Merged plugin {sanitize_for_log(candidate.id)} "
            f"({len(candidate.releases)} releases)"
        )
        return candidate

    def delete(self, plugin_id: str, user: Optional[str] = None) -> None:
        """
        Delete a plugin record and every release it owns.

        Each release is deleted individually so its binary is cleaned up
        too. Deleting an unknown plugin is a no-op.
        """
        try:
            plugin_info = self.repository.find_by_id(plugin_id)
        except PluginNotFoundError:
            logger.debug(f"Delete of unknown plugin {sanitize_for_log(plugin_id)} ignored")
            return

        for release in list(plugin_info.releases):
            self.delete_release(plugin_id, release.version, user=user)

        self.repository.delete(plugin_id)
        logger.info(create_audit_log_entry("delete", self._resolve_user(user), plugin_id))

    # ========================================================================
    # RELEASES
    # ========================================================================

    def create_release(self, plugin_id: str, release: Release, user: Optional[str] = None) -> PluginInfo:
        """
        Append a new release to an existing plugin.

        Args:
            plugin_id: Parent plugin
            release: Release to add; audit fields are overwritten
            user: Acting user, resolved from context when omitted

        Returns:
            The updated parent record

        Raises:
            PluginNotFoundError: If the plugin does not exist
            PluginValidationError: If the resulting record fails validation
        """
        now, actor = self._audit_stamp(user)
        release = self._stamped(release, now, actor)

        plugin_info = self.repository.find_by_id(plugin_id)
        plugin_info.releases.append(release)
        self._cleanup_preferred_releases(plugin_info, release, now, actor)

        self.validate(plugin_info)
        self.repository.update(plugin_info.id, plugin_info)
        logger.info(create_audit_log_entry("create_release", actor, plugin_id, release.version))
        return plugin_info

    def upsert_release(self, plugin_id: str, release: Release, user: Optional[str] = None) -> PluginInfo:
        """
        Replace an existing release version.

        This is the only path that may rewrite a published release. It never
        creates a new version; use create_release for that.

        Raises:
            PluginNotFoundError: If the plugin does not exist
            ReleaseNotFoundError: If the plugin has no release with that version
            PluginValidationError: If the resulting record fails validation
        """
        now, actor = self._audit_stamp(user)
        release = self._stamped(release, now, actor)

        plugin_info = self.repository.find_by_id(plugin_id)
        if plugin_info.get_release_by_version(release.version) is None:
            raise ReleaseNotFoundError(plugin_id, release.version)

        plugin_info.set_release_by_version(release.version, release)
        self._cleanup_preferred_releases(plugin_info, release, now, actor)

        self.validate(plugin_info)
        self.repository.update(plugin_info.id, plugin_info)
        logger.info(create_audit_log_entry("upsert_release", actor, plugin_id, release.version))
        return plugin_info

    def delete_release(self, plugin_id: str, version: str, user: Optional[str] = None) -> PluginInfo:
        """
        Remove a release version and, best-effort, its binary.

        The parent is written back even when no release matched. A failing
        binary store is logged and never undoes the metadata change.

        Raises:
            PluginNotFoundError: If the plugin does not exist
        """
        plugin_info = self.repository.find_by_id(plugin_id)
        plugin_info.releases = [r for r in plugin_info.releases if r.version != version]
        self.repository.update(plugin_info.id, plugin_info)
        logger.info(
            create_audit_log_entry("delete_release", self._resolve_user(user), plugin_id, version)
        )

        self._delete_release_binary(plugin_id, version)
        return plugin_info

    def prefer_release_version(
        self,
        plugin_id: str,
        version: str,
        preferred: bool,
        user: Optional[str] = None,
    ) -> Release:
        """
        Set or clear the preferred flag of a release.

        Preferring a release un-prefers every sibling.

        Returns:
            The updated release

        Raises:
            PluginNotFoundError: If the plugin does not exist
            ReleaseNotFoundError: If the plugin has no release with that version
        """
        plugin_info = self.repository.find_by_id(plugin_id)
        release = plugin_info.get_release_by_version(version)
        if release is None:
            raise ReleaseNotFoundError(plugin_id, version)

        now, actor = self._audit_stamp(user)
        release.preferred = preferred
        release.last_modified = now
        release.last_modified_by = actor

        plugin_info.set_release_by_version(version, release)
        self._cleanup_preferred_releases(plugin_info, release, now, actor)

        self.repository.update(plugin_info.id, plugin_info)
        logger.info(
            create_audit_log_entry(
                "prefer_release" if preferred else "unprefer_release", actor, plugin_id, version
            )
        )
        return release

    # ========================================================================
    # VALIDATION
    # ========================================================================

    def validate(self, plugin_info: PluginInfo) -> None:
        """
        Run every registered validator against plugin_info.

        All validators run, in registration order, before the outcome is
        decided.

        Raises:
            PluginValidationError: Carrying every accumulated error
        """
        errors = ValidationErrors(plugin_info)
        for validator in self.validators:
            validator.validate(plugin_info, errors)
        if errors.has_errors():
            logger.warning(
                f"Validation failed for plugin {sanitize_for_log(plugin_info.id)}: "
                f"{errors.error_count} error(s)"
            )
            raise PluginValidationError(errors)

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _resolve_user(self, user: Optional[str] = None) -> str:
        if user:
            return user
        if self.identity_resolver is not None:
            resolved = self.identity_resolver()
            if resolved:
                return resolved
        return self.anonymous_user

    def _audit_stamp(self, user: Optional[str] = None) -> Tuple[datetime, str]:
        return self.clock(), self._resolve_user(user)

    @staticmethod
    def _stamped(release: Release, now: datetime, actor: str) -> Release:
        return release.model_copy(update={"last_modified": now, "last_modified_by": actor}, deep=True)

    @staticmethod
    def _cleanup_preferred_releases(
        plugin_info: PluginInfo, release: Release, now: datetime, actor: str
    ) -> None:
        """Un-prefer every sibling of release when release is preferred."""
        if not release.preferred:
            return
        for other in plugin_info.releases:
            if other.version == release.version:
                continue
            other.preferred = False
            other.last_modified = now
            other.last_modified_by = actor

    def _delete_release_binary(self, plugin_id: str, version: str) -> None:
        if self.storage_service is None:
            return
        key = None
        try:
            key = self.storage_service.get_key(plugin_id, version)
            self.storage_service.delete(key)
        except Exception as e:
            logger.warning(
                f"Failed to delete binary for {sanitize_release_for_log(plugin_id, version)} "
                f"(key={sanitize_for_log(key)}), artifact left orphaned: {e}"
            )


def get_plugin_info_service(
    settings: Optional[Settings] = None,
    repository: Optional[PluginInfoRepository] = None,
) -> PluginInfoService:
    """
    Factory function wiring the service from settings.

    Builds the SQL repository (unless one is given), a filesystem binary
    store when binary_storage_path is set, and the built-in validators.

    Example:
        service = get_plugin_info_service()
        plugins = service.find_all_by_service("orca")
    """
    from ..database import create_session_factory
    from ..repositories.plugin_repository import SqlPluginInfoRepository
    from .plugins.binary_storage import FilesystemBinaryStorageService
    from .plugins.validation import default_validators

    settings = settings or get_settings()
    if repository is None:
        repository = SqlPluginInfoRepository(create_session_factory(settings))

    storage_service = None
    if settings.binary_storage_path:
        storage_service = FilesystemBinaryStorageService(settings.binary_storage_path)

    return PluginInfoService(
        repository,
        storage_service=storage_service,
        validators=default_validators(settings),
        anonymous_user=settings.anonymous_user,
    )
