"""Tests for shared text and logging helpers."""

from vbablocks.common.logging_utils import extra_context, safe_url
from vbablocks.common.text import join_commas, sanitize_filename
from vbablocks.errors import BuildInvalid, Conflict, UnresolvableConflict


class TestText:
    """Tests for text helpers."""

    def test_join_commas(self):
        """English list joining."""
        assert join_commas([]) == ""
        assert join_commas(["a"]) == "a"
        assert join_commas(["a", "b"]) == "a and b"
        assert join_commas(["a", "b", "c"]) == "a, b, and c"
        assert join_commas(["a", "b"], separator="or") == "a or b"

    def test_sanitize_filename(self):
        """Reserved characters are replaced."""
        assert sanitize_filename("my/project") == "my-project"
        assert sanitize_filename('a:b*c?"d"') == "a-b-c--d-"
        assert sanitize_filename("plain") == "plain"


class TestLoggingUtils:
    """Tests for logging helpers."""

    def test_safe_url(self):
        """Credentials and secret query values are masked."""
        assert safe_url("https://user:pw@example.com/a?token=abc&x=1") == \
            "https://[REDACTED]@example.com/a?token=[REDACTED]&x=1"
        assert safe_url("https://example.com/index") == "https://example.com/index"

    def test_extra_context(self):
        """None values are dropped."""
        assert extra_context(event="x", status_code=None) == {"event": "x"}


class TestErrors:
    """Tests for error message rendering."""

    def test_conflict_message(self):
        """Every conflict is rendered with its requirers."""
        error = UnresolvableConflict([
            Conflict(name="x", requirers=(("a", "x@^1", ("root", "a")), ("b", "x@^2", ("root", "a", "b")))),
            Conflict(name="y", requirers=(("root", "y@^1", ("root",)),)),
        ])
        message = str(error)
        assert message.startswith("Failed to resolve dependencies:")
        assert '  - root > a > "b" requires x@^2' in message
        assert '  - "root" requires y@^1' in message
        assert 'Unable to resolve "y"' in message
        assert error.name == "x"

    def test_build_invalid_message(self):
        """Violations are listed one per line."""
        error = BuildInvalid(["first", "second"])
        assert str(error) == "Invalid build:\n\nfirst\nsecond"
