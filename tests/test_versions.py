"""
Tests for semantic version ordering and inclusive range checks.
"""

import pytest

from meshhub.core.services.render.domain.versions import (
    check_version_range,
    compare_versions,
    parse_version,
)


class TestParseVersion:
    def test_leading_v_ignored(self):
        assert parse_version("v1.2.3") == parse_version("1.2.3")

    def test_missing_parts_are_zero(self):
        assert parse_version("1.2") == parse_version("1.2.0")
        assert parse_version("1") == parse_version("1.0.0")

    def test_build_metadata_ignored(self):
        assert compare_versions("1.2.3+build.7", "1.2.3") == 0

    @pytest.mark.parametrize("bad", ["", "latest", "1.2.x", "1..2"])
    def test_invalid(self, bad):
        with pytest.raises(ValueError):
            parse_version(bad)


class TestCompareVersions:
    def test_numeric_not_lexical(self):
        assert compare_versions("1.10.0", "1.9.0") == 1

    def test_prerelease_before_release(self):
        assert compare_versions("1.5.0-rc.1", "1.5.0") == -1

    def test_prerelease_ordering(self):
        assert compare_versions("1.5.0-alpha", "1.5.0-beta") == -1
        assert compare_versions("1.5.0-rc.2", "1.5.0-rc.10") == -1
        # numeric identifiers sort before alphanumeric ones
        assert compare_versions("1.5.0-1", "1.5.0-alpha") == -1

    def test_equal(self):
        assert compare_versions("v2.0", "2.0.0") == 0


class TestCheckVersionRange:
    def test_inside(self):
        assert check_version_range("1.3.2", "1.0.0", "1.5.0") == {"valid": True}

    def test_bounds_inclusive(self):
        assert check_version_range("1.0.0", "1.0.0", "1.5.0")["valid"]
        assert check_version_range("1.5.0", "1.0.0", "1.5.0")["valid"]

    def test_above_max(self):
        result = check_version_range("1.6.0", "1.0.0", "1.5.0")
        assert result["valid"] is False
        assert "Maximum allowed: 1.5.0" in result["message"]

    def test_below_min(self):
        result = check_version_range("0.9.9", "1.0.0", "")
        assert result["valid"] is False
        assert "Minimum allowed: 1.0.0" in result["message"]

    def test_open_bounds(self):
        assert check_version_range("99.0.0", "", "")["valid"]
        assert check_version_range("0.0.1", "", "1.0.0")["valid"]

    def test_prerelease_of_min_is_below(self):
        assert not check_version_range("1.0.0-rc.1", "1.0.0", "")["valid"]

    def test_unparseable_reported(self):
        result = check_version_range("nightly", "1.0.0", "")
        assert result["valid"] is False
        assert result["parse_error"] is True
