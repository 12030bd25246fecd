"""
Plugin Info Collaborators

Module Architecture:
    plugins/
    +-- __init__.py          # This file - public API
    +-- exceptions.py        # Error hierarchy raised by the service
    +-- validation.py        # Validator contract, error accumulator, built-ins
    +-- binary_storage.py    # Release artifact store
    +-- identity.py          # Request-scoped acting user

Usage:
    from plugininfo.services.plugins import (
        FilesystemBinaryStorageService,
        PluginNotFoundError,
        authenticated_user,
        default_validators,
    )
"""

from .binary_storage import FilesystemBinaryStorageService, PluginBinaryStorageService
from .exceptions import (
    InvalidRequestError,
    PluginError,
    PluginNotFoundError,
    PluginStorageError,
    PluginValidationError,
    ReleaseNotFoundError,
)
from .identity import IdentityResolver, authenticated_user, get_current_user
from .validation import (
    CanonicalPluginIdValidator,
    FieldError,
    PluginInfoValidator,
    RequiresFieldValidator,
    UniqueReleaseVersionValidator,
    ValidationErrors,
    default_validators,
)

__all__ = [
    # Exceptions
    "PluginError",
    "PluginNotFoundError",
    "ReleaseNotFoundError",
    "InvalidRequestError",
    "PluginValidationError",
    "PluginStorageError",
    # Validation
    "PluginInfoValidator",
    "ValidationErrors",
    "FieldError",
    "CanonicalPluginIdValidator",
    "RequiresFieldValidator",
    "UniqueReleaseVersionValidator",
    "default_validators",
    # Binary storage
    "PluginBinaryStorageService",
    "FilesystemBinaryStorageService",
    # Identity
    "IdentityResolver",
    "authenticated_user",
    "get_current_user",
]
