"""Tests for version parsing and ranges."""

import pytest

from vbablocks.versioning import Range, Version, parse_version


class TestParseVersion:
    """Tests for parse_version."""

    def test_accepts_leading_v(self):
        """A leading "v" is ignored."""
        assert parse_version("v1.4.1") == Version("1.4.1")

    def test_prerelease_orders_before_release(self):
        """Pre-releases sort before the release they precede."""
        assert parse_version("1.0.0-rc.1") < parse_version("1.0.0")
        assert parse_version("1.0.0-alpha") < parse_version("1.0.0-beta")

    def test_invalid_version_raises(self):
        """Non-semver text raises ValueError."""
        with pytest.raises(ValueError):
            parse_version("not-a-version")


class TestRange:
    """Tests for Range."""

    def test_bare_version_is_caret(self):
        """A bare version behaves like a caret range."""
        version_range = Range.parse("1.4.1")
        assert version_range.specs == ("^1.4.1",)
        assert version_range.match(Version("1.9.0"))
        assert not version_range.match(Version("2.0.0"))
        assert not version_range.match(Version("1.4.0"))

    def test_v_prefixed_bare_version(self):
        """"v1.4.1" is the same range as "1.4.1"."""
        assert Range.parse("v1.4.1") == Range.parse("1.4.1")

    def test_operators_pass_through(self):
        """Explicit operators are kept as written."""
        assert Range.parse("~1.1.0").match(Version("1.1.9"))
        assert not Range.parse("~1.1.0").match(Version("1.2.0"))
        assert Range.parse(">=1.0.0 <1.5.0").match(Version("1.4.9"))

    def test_any(self):
        """Empty and "*" ranges match everything."""
        assert Range.parse("*").is_any
        assert Range.parse("").is_any
        assert Range.parse(None).match(Version("9.9.9"))
        assert str(Range.any()) == "*"

    def test_exact(self):
        """Exact ranges pin one version."""
        pinned = Range.exact(Version("1.2.3"))
        assert pinned.match(Version("1.2.3"))
        assert not pinned.match(Version("1.2.4"))

    def test_intersection_narrows(self):
        """Intersection keeps only versions satisfying both ranges."""
        combined = Range.parse("^1.0.0").intersect(Range.parse("~1.1.0"))
        versions = [Version(v) for v in ["1.0.0", "1.1.0", "1.1.5", "1.2.0"]]
        assert combined.filter(versions) == [Version("1.1.0"), Version("1.1.5")]
        assert combined.highest(versions) == Version("1.1.5")
        assert str(combined) == "^1.0.0, ~1.1.0"

    def test_disjoint_intersection_is_empty(self):
        """Disjoint ranges intersect to a range matching no candidate."""
        combined = Range.parse("^1.0.0").intersect(Range.parse("^2.0.0"))
        versions = [Version(v) for v in ["1.0.0", "1.5.0", "2.0.0", "2.1.0"]]
        assert combined.filter(versions) == []
        assert combined.highest(versions) is None

    def test_intersection_with_any_is_identity(self):
        """Intersecting with any leaves a range unchanged."""
        assert Range.parse("^1.0.0").intersect(Range.any()) == Range.parse("^1.0.0")

    def test_invalid_range_raises(self):
        """Unparseable specs raise ValueError."""
        with pytest.raises(ValueError):
            Range.parse("^^not a range")
