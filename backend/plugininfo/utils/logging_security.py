"""
Safe Logging Helpers
Plugin ids, versions and user names arrive from API callers, so they are
stripped of control characters before they reach a log line (CWE-117).
"""

import re
from typing import Any, Optional

LOG_INJECTION_PATTERNS = [
    r"[\r\n]",  # CRLF injection
    r"%0[ad]",  # URL-encoded CRLF
    r"\x00",  # Null bytes
    r"[\x01-\x08\x0b\x0c\x0e-\x1f\x7f]",  # Control characters
]

# Plugin ids, semantic versions, artifact keys and user names
SAFE_LOG_PATTERN = re.compile(r"^[a-zA-Z0-9._@/+\-\s]+$")


def sanitize_for_log(value: Optional[Any], max_length: int = 100) -> str:
    """
    Sanitize any value for safe logging.

    Args:
        value: Value to sanitize
        max_length: Maximum length of output

    Returns:
        str: Sanitized string safe for logging
    """
    if value is None:
        return "null"

    str_value = str(value)
    if len(str_value) > max_length:
        str_value = str_value[:max_length] + "..."

    for pattern in LOG_INJECTION_PATTERNS:
        str_value = re.sub(pattern, "", str_value)

    if not SAFE_LOG_PATTERN.match(str_value):
        str_value = re.sub(r"[^a-zA-Z0-9._@/+\-\s]", "", str_value)

    if not str_value.strip():
        return "[sanitized]"

    return str_value.strip()


def sanitize_release_for_log(plugin_id: Optional[str], version: Optional[str]) -> str:
    """Render a plugin release as id@version for log lines."""
    safe_id = sanitize_for_log(plugin_id) if plugin_id else "[no_id]"
    safe_version = sanitize_for_log(version, max_length=50) if version else "[no_version]"
    return f"{safe_id}@{safe_version}"


def create_audit_log_entry(
    action: str,
    user: Optional[str] = None,
    plugin_id: Optional[str] = None,
    version: Optional[str] = None,
    success: bool = True,
) -> str:
    """
    Create a standardized audit log entry for a plugin metadata mutation.

    Args:
        action: Operation performed (create_release, delete, ...)
        user: Acting user
        plugin_id: Plugin the action targeted
        version: Release version, for release scoped actions
        success: Whether the action succeeded

    Returns:
        str: Formatted audit log entry
    """
    parts = [
        f"action={sanitize_for_log(action)}",
        f"user={sanitize_for_log(user) if user else '[no_user]'}",
        f"plugin={sanitize_for_log(plugin_id) if plugin_id else '[no_id]'}",
    ]
    if version is not None:
        parts.append(f"version={sanitize_for_log(version, max_length=50)}")
    parts.append(f"success={success}")
    return "AUDIT: " + " ".join(parts)
