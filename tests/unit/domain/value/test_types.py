"""Unit tests for domain value types."""

import pytest
from pydantic import ValidationError

from forum.domain.value import AccessLevel, ForumName, Username


class TestAccessLevel:
    """Tests for AccessLevel ordering."""

    @pytest.mark.parametrize(
        "held,required,expected",
        [
            (AccessLevel.ADMIN, AccessLevel.ADMIN, True),
            (AccessLevel.ADMIN, AccessLevel.WRITE, True),
            (AccessLevel.ADMIN, AccessLevel.READ, True),
            (AccessLevel.WRITE, AccessLevel.ADMIN, False),
            (AccessLevel.WRITE, AccessLevel.WRITE, True),
            (AccessLevel.WRITE, AccessLevel.READ, True),
            (AccessLevel.READ, AccessLevel.ADMIN, False),
            (AccessLevel.READ, AccessLevel.WRITE, False),
            (AccessLevel.READ, AccessLevel.READ, True),
        ],
    )
    def test_satisfies(self, held, required, expected):
        """Higher levels imply lower ones, never the reverse."""
        assert held.satisfies(required) is expected


class TestForumName:
    """Tests for ForumName."""

    def test_whitespace_is_stripped(self):
        """Surrounding whitespace is not part of the name."""
        assert ForumName("  Tech  ").root == "Tech"

    @pytest.mark.parametrize("value", ["", "   ", "x" * 101])
    def test_invalid_names(self, value):
        """Blank and over-long names are rejected."""
        with pytest.raises(ValidationError):
            ForumName(value)

    def test_matches_ignores_case(self):
        """Matching is case-insensitive."""
        name = ForumName("Gadgets")

        assert name.matches("GADGETS")
        assert name.matches(ForumName("gadgets"))
        assert not name.matches("Gadget")
        assert name.key == "gadgets"

    def test_key_uses_plain_lowercasing(self):
        """No full case folding: the sharp s stays distinct from ss."""
        name = ForumName("Straße")

        assert name.key == "straße"
        assert not name.matches("STRASSE")


class TestUsername:
    """Tests for Username."""

    def test_valid_username(self):
        assert Username("alice").root == "alice"

    @pytest.mark.parametrize("value", ["ab", "x" * 51, "two words", "tab\there"])
    def test_invalid_usernames(self, value):
        """Length and whitespace rules are enforced."""
        with pytest.raises(ValidationError):
            Username(value)
