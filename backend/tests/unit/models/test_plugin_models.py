"""
Tests for PluginInfo and Release models.
"""

import pytest
from pydantic import ValidationError

from plugininfo.models import PluginInfo, Release, ServiceRequirement


@pytest.mark.unit
class TestRelease:
    """Test Release model"""

    def test_defaults(self):
        release = Release(version="1.0.0")
        assert release.preferred is False
        assert release.last_modified is None
        assert release.last_modified_by is None

    def test_version_is_stripped(self):
        assert Release(version=" 1.2.0 ").version == "1.2.0"

    def test_accepts_camel_case_and_snake_case(self):
        camel = Release.model_validate({"version": "1.0.0", "releaseNotes": "n", "lastModifiedBy": "u"})
        snake = Release(version="1.0.0", release_notes="n", last_modified_by="u")
        assert camel == snake

    def test_dumps_camel_case_aliases(self):
        data = Release(version="1.0.0", release_notes="n").model_dump(by_alias=True)
        assert data["releaseNotes"] == "n"
        assert "lastModifiedBy" in data

    def test_requirement_entries(self):
        release = Release(version="1.0.0", requires=" orca>=7.0.0 ,, deck<3.0.0 ")
        assert release.requirement_entries() == ["orca>=7.0.0", "deck<3.0.0"]
        assert Release(version="1.0.0").requirement_entries() == []

    def test_parsed_requires_skips_malformed(self):
        release = Release(version="1.0.0", requires="orca>=7.0.0,deck~1")
        assert release.parsed_requires == [
            ServiceRequirement(service="orca", operator=">=", version="7.0.0")
        ]

    def test_service_requirement_parse(self):
        assert ServiceRequirement.parse(" gate = 1.2.3 ") == ServiceRequirement(
            service="gate", operator="=", version="1.2.3"
        )
        assert ServiceRequirement.parse("gate==1.2.3") is None

    def test_keeps_undeclared_keys(self):
        release = Release.model_validate({"version": "1.0.0", "remoteExtensions": [{"type": "stage"}]})
        assert release.model_dump(by_alias=True)["remoteExtensions"] == [{"type": "stage"}]


@pytest.mark.unit
class TestPluginInfo:
    """Test PluginInfo model"""

    def test_id_required(self):
        with pytest.raises(ValidationError):
            PluginInfo(id="")

    def test_versions_preserve_order(self):
        plugin_info = PluginInfo(
            id="a.b", releases=[Release(version="2.0.0"), Release(version="1.0.0")]
        )
        assert plugin_info.versions() == ["2.0.0", "1.0.0"]

    def test_get_release_by_version(self):
        plugin_info = PluginInfo(id="a.b", releases=[Release(version="1.0.0", url="u")])
        assert plugin_info.get_release_by_version("1.0.0").url == "u"
        assert plugin_info.get_release_by_version("9.0.0") is None

    def test_set_release_by_version_replaces_in_place(self):
        plugin_info = PluginInfo(
            id="a.b",
            releases=[Release(version="1.0.0"), Release(version="2.0.0"), Release(version="3.0.0")],
        )

        plugin_info.set_release_by_version("2.0.0", Release(version="2.0.0", url="new"))

        assert plugin_info.versions() == ["1.0.0", "2.0.0", "3.0.0"]
        assert plugin_info.releases[1].url == "new"

    def test_set_release_by_version_appends_unknown(self):
        plugin_info = PluginInfo(id="a.b", releases=[Release(version="1.0.0")])

        plugin_info.set_release_by_version("2.0.0", Release(version="2.0.0"))

        assert plugin_info.versions() == ["1.0.0", "2.0.0"]

    def test_loads_camel_case_document(self):
        plugin_info = PluginInfo.model_validate(
            {
                "id": "netflix.canary",
                "service": "orca",
                "releases": [{"version": "1.0.0", "requires": "orca>=7.0.0", "preferred": True}],
            }
        )
        assert plugin_info.releases[0].preferred is True
        assert plugin_info.create_ts is None
