"""
Plugin Info Models
Plugin metadata records and their published releases
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# service>=1.2.3, service<2.0.0, service=1.0.0
REQUIRES_PATTERN = re.compile(
    r"^(?P<service>[\w\-]+)\s*(?P<operator>>=|<=|>|<|=)\s*(?P<version>\d+\.\d+\.\d+)$"
)


class ServiceRequirement(BaseModel):
    """A single parsed entry of a release's requires field"""

    service: str
    operator: str
    version: str

    @classmethod
    def parse(cls, entry: str) -> Optional["ServiceRequirement"]:
        """Parse one requires entry, returning None when it is malformed."""
        match = REQUIRES_PATTERN.match(entry.strip())
        if match is None:
            return None
        return cls(**match.groupdict())


class Release(BaseModel):
    """
    One published version of a plugin.

    Only version, preferred and the audit stamps are interpreted by the
    service; everything else, including keys not declared here, is opaque
    payload passed through unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    version: str = Field(..., description="Release version, unique within its plugin")
    date: Optional[str] = None
    requires: Optional[str] = Field(
        None, description="Comma separated service requirements, e.g. orca>=7.0.0"
    )
    url: Optional[str] = Field(None, description="Location of the release binary")
    sha512sum: Optional[str] = None
    release_notes: Optional[str] = None
    preferred: bool = False
    last_modified: Optional[datetime] = None
    last_modified_by: Optional[str] = None

    @field_validator("version")
    @classmethod
    def strip_version(cls, v: str) -> str:
        return v.strip()

    def requirement_entries(self) -> List[str]:
        """Raw requires entries, whitespace trimmed and empties dropped"""
        if not self.requires:
            return []
        return [entry.strip() for entry in self.requires.split(",") if entry.strip()]

    @property
    def parsed_requires(self) -> List[ServiceRequirement]:
        parsed = (ServiceRequirement.parse(entry) for entry in self.requirement_entries())
        return [requirement for requirement in parsed if requirement is not None]


class PluginInfo(BaseModel):
    """
    Plugin metadata record owning an ordered collection of releases.

    At most one release may be preferred at a time; the service enforces
    this eagerly on every release mutation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(..., min_length=1, description="Globally unique plugin identifier")
    service: Optional[str] = Field(None, description="Consuming service tag")
    description: Optional[str] = None
    provider: Optional[str] = None
    releases: List[Release] = Field(default_factory=list)
    create_ts: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    def versions(self) -> List[str]:
        return [release.version for release in self.releases]

    def get_release_by_version(self, version: str) -> Optional[Release]:
        for release in self.releases:
            if release.version == version:
                return release
        return None

    def set_release_by_version(self, version: str, release: Release) -> None:
        """Replace the release with the given version in place, or append it."""
        for index, existing in enumerate(self.releases):
            if existing.version == version:
                self.releases[index] = release
                return
        self.releases.append(release)
