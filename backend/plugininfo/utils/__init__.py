"""Shared utilities."""

from .logging_security import (  # noqa: F401
    create_audit_log_entry,
    sanitize_for_log,
    sanitize_release_for_log,
)
