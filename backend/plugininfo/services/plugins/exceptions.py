"""
Plugin Info Exceptions

Exception hierarchy for plugin metadata operations. Every error raised by the
plugin info service derives from PluginError so callers (typically an HTTP
controller) can translate the whole family with a single except clause.

Exception Hierarchy:
    PluginError (base)
    +-- PluginNotFoundError: Plugin record does not exist
    |   +-- ReleaseNotFoundError: Release version does not exist on a plugin
    +-- InvalidRequestError: Request would corrupt published release history
    +-- PluginValidationError: Validation pipeline rejected the record
    +-- PluginStorageError: Release binary store operation failed

Usage:
    from plugininfo.services.plugins.exceptions import (
        PluginError,
        PluginNotFoundError,
    )

    try:
        plugin_info = service.find_by_id("netflix.canary")
    except PluginNotFoundError as e:
        logger.warning(f"Lookup failed: {e}")
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .validation import ValidationErrors


class PluginError(Exception):
    """
    Base exception for all plugin metadata errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error (optional).
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary containing error type, message, and details.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class PluginNotFoundError(PluginError):
    """
    Raised when a requested plugin record does not exist.

    Also used internally by upsert to tell "create" apart from "update".

    Attributes:
        plugin_id: The ID of the plugin that was not found.
    """

    def __init__(self, plugin_id: str, message: Optional[str] = None) -> None:
        self.plugin_id = plugin_id
        super().__init__(
            message=message or f"Plugin not found: {plugin_id}",
            details={"plugin_id": plugin_id},
        )


class ReleaseNotFoundError(PluginNotFoundError):
    """
    Raised when a plugin exists but has no release with the requested version.

    Attributes:
        plugin_id: The plugin that was searched.
        version: The release version that was not found.
    """

    def __init__(self, plugin_id: str, version: str) -> None:
        self.version = version
        super().__init__(
            plugin_id,
            message=f"Plugin {plugin_id} with release {version} version not found",
        )
        self.details["version"] = version


class InvalidRequestError(PluginError):
    """
    Raised when a request is malformed or would silently rewrite a published release.

    Attributes:
        plugin_id: The plugin the request targeted (if applicable).
        version: The offending release version (if applicable).
    """

    def __init__(
        self,
        message: str,
        plugin_id: Optional[str] = None,
        version: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.plugin_id = plugin_id
        self.version = version
        error_details = details or {}
        if plugin_id is not None:
            error_details["plugin_id"] = plugin_id
        if version is not None:
            error_details["version"] = version
        super().__init__(message=message, details=error_details)


class PluginValidationError(PluginError):
    """
    Raised when the validation pipeline accumulates one or more errors.

    Nothing has been written to the repository when this is raised.

    Attributes:
        errors: The accumulator that collected the failures.
        validation_errors: Flat list of error messages.
    """

    def __init__(self, errors: "ValidationErrors") -> None:
        self.errors = errors
        self.validation_errors: List[str] = errors.messages()
        super().__init__(
            message=f"Validation failed for plugin {errors.plugin_id}",
            details={
                "plugin_id": errors.plugin_id,
                "validation_errors": self.validation_errors,
                "errors": errors.to_list(),
            },
        )


class PluginStorageError(PluginError):
    """
    Raised when the release binary store cannot complete an operation.

    Attributes:
        key: The artifact key involved.
        operation: The storage operation that failed (store, load, delete).
    """

    def __init__(self, message: str, key: str, operation: str) -> None:
        self.key = key
        self.operation = operation
        super().__init__(message=message, details={"key": key, "operation": operation})
