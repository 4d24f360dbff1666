# SPDX-License-Identifier: MIT
"""Unit tests for semantic version parsing."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from modindex_version import (
    MAX_COMPONENT,
    InvalidVersionError,
    Version,
    is_valid_semver,
    parse_version,
)


class TestParseVersion:
    """Tests for parse_version function."""

    def test_basic_version(self):
        """Test parsing basic MAJOR.MINOR.PATCH version."""
        v = parse_version("1.2.3")
        assert v.major == 1
        assert v.minor == 2
        assert v.patch == 3
        assert v.prerelease is None
        assert v.build is None

    def test_prerelease_and_build(self):
        v = parse_version("1.0.0-alpha.1+build.456")
        assert v.prerelease == "alpha.1"
        assert v.build == "build.456"
        assert v.is_prerelease is True

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_version("  2.3.4\n") == Version(2, 3, 4)

    @pytest.mark.parametrize(
        "invalid",
        ["", "1", "1.2", "1.2.3.4", "01.2.3", "1.02.3", "v1.2.3", "1.2.3-", "1.2.3+", "a.b.c"],
    )
    def test_invalid_versions(self, invalid):
        """Test that malformed strings are rejected."""
        with pytest.raises(InvalidVersionError) as exc_info:
            parse_version(invalid)
        assert exc_info.value.version == invalid.strip()

    def test_non_string_rejected(self):
        with pytest.raises(InvalidVersionError, match="must be a string"):
            parse_version(123)  # type: ignore[arg-type]

    def test_negative_components_rejected(self):
        with pytest.raises(InvalidVersionError):
            Version(1, -1, 0)

    def test_components_limited_to_64_bits(self):
        assert parse_version(f"{MAX_COMPONENT}.0.0").major == MAX_COMPONENT
        with pytest.raises(InvalidVersionError):
            parse_version(f"{MAX_COMPONENT + 1}.0.0")
        with pytest.raises(InvalidVersionError):
            Version(0, 0, 2**63)

    @pytest.mark.parametrize("invalid", ["\u0661.\u0662.\u0663", "1.2.\uff13", "1.0.0-\u0661"])
    def test_non_ascii_digits_rejected(self, invalid):
        with pytest.raises(InvalidVersionError):
            parse_version(invalid)
        assert not is_valid_semver(invalid)


class TestVersionFormatting:
    """Tests for string conversion and derived keys."""

    def test_str_round_trips_all_parts(self):
        assert str(parse_version("2.0.0-rc.1+build.7")) == "2.0.0-rc.1+build.7"

    def test_catalog_key_ignores_prerelease_and_build(self):
        assert parse_version("1.2.3-beta+exp").catalog_key == (1, 2, 3)

    def test_release_strips_metadata(self):
        assert parse_version("1.2.3-beta+exp").release() == Version(1, 2, 3)

    def test_is_valid_semver(self):
        assert is_valid_semver("1.0.0")
        assert not is_valid_semver("1.0")
        assert not is_valid_semver(None)  # type: ignore[arg-type]


class TestPrecedence:
    """SemVer 2.0.0 precedence via precedence_key."""

    def test_documented_ordering(self):
        ordered = [
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
            "1.0.0-beta",
            "1.0.0-beta.2",
            "1.0.0-beta.11",
            "1.0.0-rc.1",
            "1.0.0",
        ]
        keys = [parse_version(v).precedence_key for v in ordered]
        assert keys == sorted(keys)

    def test_build_metadata_does_not_affect_precedence(self):
        assert parse_version("1.0.0+a").precedence_key == parse_version("1.0.0+b").precedence_key

    @given(
        st.tuples(st.integers(0, 50), st.integers(0, 50), st.integers(0, 50)),
        st.tuples(st.integers(0, 50), st.integers(0, 50), st.integers(0, 50)),
    )
    def test_release_precedence_is_numeric(self, a, b):
        """Releases compare exactly like their numeric triples."""
        va, vb = Version(*a), Version(*b)
        assert (va.precedence_key < vb.precedence_key) == (a < b)
