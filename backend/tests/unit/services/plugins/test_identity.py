"""
Tests for the request-scoped acting user.
"""

import pytest

from plugininfo.services.plugins import authenticated_user, get_current_user


@pytest.mark.unit
class TestAuthenticatedUser:
    def test_no_user_outside_block(self):
        assert get_current_user() is None

    def test_binds_user_within_block(self):
        with authenticated_user("jdoe"):
            assert get_current_user() == "jdoe"
        assert get_current_user() is None

    def test_nested_blocks_restore_outer_user(self):
        with authenticated_user("outer"):
            with authenticated_user("inner"):
                assert get_current_user() == "inner"
            assert get_current_user() == "outer"

    def test_resets_after_exception(self):
        with pytest.raises(RuntimeError):
            with authenticated_user("jdoe"):
                raise RuntimeError("boom")
        assert get_current_user() is None
