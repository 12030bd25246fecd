"""
Plugin Info Validation

Pluggable validators run by the plugin info service before every write.
Each validator appends structured errors to a shared ValidationErrors
accumulator; validators never raise and never short-circuit each other.
The service raises PluginValidationError once all of them have run.

Usage:
    from plugininfo.services.plugins.validation import (
        PluginInfoValidator,
        ValidationErrors,
        default_validators,
    )

    class HasDescriptionValidator(PluginInfoValidator):
        def validate(self, plugin_info, errors):
            if not plugin_info.description:
                errors.reject_value("description", "pluginInfo.description.empty", "Required")
"""

import logging
import re
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from ...config import Settings
from ...models.plugin_models import PluginInfo, ServiceRequirement

logger = logging.getLogger(__name__)

CANONICAL_ID_PATTERN = re.compile(r"^(?P<namespace>[a-zA-Z0-9_\-]+)\.(?P<name>[a-zA-Z0-9_\-]+)$")


@dataclass
class FieldError:
    """A single validation failure"""

    code: str
    message: str
    field: Optional[str] = None
    rejected_value: Any = None


class ValidationErrors:
    """
    Error accumulator bound to the record being validated.

    Global errors concern the record as a whole; field errors name the
    offending attribute path (e.g. releases[0].requires).
    """

    def __init__(self, target: PluginInfo) -> None:
        self.target = target
        self.errors: List[FieldError] = []

    @property
    def plugin_id(self) -> str:
        return self.target.id

    def reject(self, code: str, message: str) -> None:
        self.errors.append(FieldError(code=code, message=message))

    def reject_value(self, field: str, code: str, message: str, rejected_value: Any = None) -> None:
        self.errors.append(
            FieldError(code=code, message=message, field=field, rejected_value=rejected_value)
        )

    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def field_errors(self, field: Optional[str] = None) -> List[FieldError]:
        return [e for e in self.errors if e.field is not None and (field is None or e.field == field)]

    def global_errors(self) -> List[FieldError]:
        return [e for e in self.errors if e.field is None]

    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def to_list(self) -> List[Dict[str, Any]]:
        return [asdict(e) for e in self.errors]


class PluginInfoValidator(ABC):
    """Contract for a single validation rule"""

    @abstractmethod
    def validate(self, plugin_info: PluginInfo, errors: ValidationErrors) -> None:
        """Append zero or more errors for plugin_info to errors."""


class CanonicalPluginIdValidator(PluginInfoValidator):
    """Plugin ids must follow a '{namespace}.{name}' format."""

    def validate(self, plugin_info: PluginInfo, errors: ValidationErrors) -> None:
        if not CANONICAL_ID_PATTERN.match(plugin_info.id):
            errors.reject_value(
                "id",
                "pluginInfo.id.invalidFormat",
                "Plugin IDs must follow a '{namespace}.{name}' format "
                f"using letters, digits, '-' and '_' (got '{plugin_info.id}')",
                plugin_info.id,
            )


class RequiresFieldValidator(PluginInfoValidator):
    """Every requires entry must look like service>=1.2.3."""

    def validate(self, plugin_info: PluginInfo, errors: ValidationErrors) -> None:
        for index, release in enumerate(plugin_info.releases):
            entries = release.requirement_entries()
            if len(release.parsed_requires) == len(entries):
                continue
            for entry in entries:
                if ServiceRequirement.parse(entry) is None:
                    errors.reject_value(
                        f"releases[{index}].requires",
                        "pluginInfo.releases.invalidRequires",
                        f"Invalid requires entry '{entry}' on release {release.version}: "
                        "expected '{service}{operator}{major}.{minor}.{patch}' "
                        "with operator one of >=, <=, >, <, =",
                        entry,
                    )


class UniqueReleaseVersionValidator(PluginInfoValidator):
    """Release versions must be present and unique within a plugin."""

    def validate(self, plugin_info: PluginInfo, errors: ValidationErrors) -> None:
        for index, release in enumerate(plugin_info.releases):
            if not release.version:
                errors.reject_value(
                    f"releases[{index}].version",
                    "pluginInfo.releases.emptyVersion",
                    "Release version cannot be empty",
                )

        counts = Counter(v for v in plugin_info.versions() if v)
        for version, count in counts.items():
            if count > 1:
                errors.reject_value(
                    "releases",
                    "pluginInfo.releases.duplicateVersion",
                    f"Release version {version} appears {count} times",
                    version,
                )


def default_validators(settings: Optional[Settings] = None) -> List[PluginInfoValidator]:
    """
    Build the built-in validator list, honoring the enforce_* settings.

    Args:
        settings: Application settings; all validators enabled when omitted

    Returns:
        Validators in registration order
    """
    validators: List[PluginInfoValidator] = []
    if settings is None or settings.enforce_unique_versions:
        validators.append(UniqueReleaseVersionValidator())
    if settings is None or settings.enforce_canonical_ids:
        validators.append(CanonicalPluginIdValidator())
    if settings is None or settings.enforce_requires_format:
        validators.append(RequiresFieldValidator())
    logger.debug(f"Registered validators: {[type(v).__name__ for v in validators]}")
    return validators
