"""Unit tests for path containment helpers."""

import pytest
from chrootctl.utils.paths import is_within, normalize


class TestNormalize:
    """Tests for normalize function."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/chroots/bar/", "/chroots/bar"),
            ("/chroots//bar/./proc", "/chroots/bar/proc"),
            ("//chroots/bar", "/chroots/bar"),
            ("/", "/"),
        ],
    )
    def test_normalize(self, path: str, expected: str) -> None:
        assert normalize(path) == expected


class TestIsWithin:
    """Tests for is_within function."""

    def test_root_itself(self) -> None:
        assert is_within("/chroots/bar", "/chroots/bar") is True

    def test_descendant(self) -> None:
        assert is_within("/chroots/bar/home/user", "/chroots/bar") is True

    def test_sibling_prefix_is_not_contained(self) -> None:
        """'/chroots/barbecue' shares a prefix with '/chroots/bar' but is outside it."""
        assert is_within("/chroots/barbecue", "/chroots/bar") is False

    def test_trailing_slash_ignored(self) -> None:
        assert is_within("/chroots/bar/proc", "/chroots/bar/") is True

    def test_everything_within_slash(self) -> None:
        assert is_within("/chroots/bar", "/") is True

    def test_parent_not_within(self) -> None:
        assert is_within("/chroots", "/chroots/bar") is False
