"""Tests for pipeline_models.version — parsing and numeric ordering."""

import pytest

from pipeline_models.errors import VersionError
from pipeline_models.version import (
    MAX_COMPONENT,
    SemVer,
    parse_requested_version,
    parse_version_prefix,
)


class TestParseVersionPrefix:
    def test_bare_int(self):
        assert parse_version_prefix(1) == (1,)

    def test_bare_string(self):
        assert parse_version_prefix("1") == (1,)

    def test_major_minor(self):
        assert parse_version_prefix("1.3") == (1, 3)

    def test_full(self):
        assert parse_version_prefix("1.3.7") == (1, 3, 7)

    def test_whitespace_stripped(self):
        assert parse_version_prefix(" 2.0 ") == (2, 0)

    @pytest.mark.parametrize(
        "value",
        ["", "1.", ".1", "1..2", "1.2.3.4", "a", "1.x", "-1", "1.-2", "v1.0", "1.0-beta"],
    )
    def test_malformed_strings(self, value):
        with pytest.raises(VersionError):
            parse_version_prefix(value)

    @pytest.mark.parametrize("value", [True, False, 1.0, 1.5, None, [1, 0]])
    def test_wrong_types(self, value):
        with pytest.raises(VersionError):
            parse_version_prefix(value)

    def test_negative_int(self):
        with pytest.raises(VersionError, match="out of range"):
            parse_version_prefix(-1)

    def test_oversized(self):
        assert parse_version_prefix(MAX_COMPONENT) == (MAX_COMPONENT,)
        with pytest.raises(VersionError, match="out of range"):
            parse_version_prefix(MAX_COMPONENT + 1)
        with pytest.raises(VersionError, match="out of range"):
            parse_version_prefix(f"1.{MAX_COMPONENT + 1}")

    def test_version_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_version_prefix("nope")


class TestParseRequestedVersion:
    def test_bare_major_defaults_minor(self):
        assert parse_requested_version(1) == (1, 0)
        assert parse_requested_version("4") == (4, 0)

    def test_major_minor(self):
        assert parse_requested_version("1.3") == (1, 3)

    def test_patch_dropped(self):
        assert parse_requested_version("1.3.9") == (1, 3)


class TestSemVer:
    def test_parse_and_str(self):
        v = SemVer.parse("1.2.3")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert str(v) == "1.2.3"

    def test_parse_requires_three_components(self):
        with pytest.raises(VersionError, match="major.minor.patch"):
            SemVer.parse("1.2")

    def test_numeric_ordering(self):
        assert SemVer.parse("1.10.0") > SemVer.parse("1.9.9")
        assert SemVer.parse("2.0.0") > SemVer.parse("1.99.99")
        assert SemVer.parse("1.0.10") > SemVer.parse("1.0.2")

    def test_max(self):
        versions = [SemVer.parse(v) for v in ["1.0.1", "1.0.3", "1.0.2", "0.9.12"]]
        assert str(max(versions)) == "1.0.3"

    def test_matches_prefix(self):
        v = SemVer(1, 3, 2)
        assert v.matches((1,))
        assert v.matches((1, 3))
        assert v.matches((1, 3, 2))
        assert not v.matches((1, 2))
        assert not v.matches((2,))

    def test_rejects_negative_component(self):
        with pytest.raises(VersionError):
            SemVer(1, -1, 0)

    def test_frozen(self):
        v = SemVer(1, 0, 0)
        with pytest.raises(AttributeError):
            v.major = 2  # type: ignore[misc]
