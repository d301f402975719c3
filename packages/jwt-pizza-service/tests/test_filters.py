"""Name-filter and paging helper tests."""

from __future__ import annotations

import pytest

from jwt_pizza_service.db.filters import like_pattern, split_page


@pytest.mark.parametrize("name", [None, "", "*", "**"])
def test_wildcard_only_means_no_filter(name):
    assert like_pattern(name) is None


def test_plain_name_is_substring():
    assert like_pattern("pizza") == "%pizza%"


def test_star_becomes_percent():
    assert like_pattern("pi*") == "pi%"
    assert like_pattern("*za") == "%za"


def test_like_metacharacters_are_literal():
    assert like_pattern("50%_off") == "%50\\%\\_off%"
    assert like_pattern("a\\b*") == "a\\\\b%"


def test_split_page():
    assert split_page([1, 2, 3], 2) == ([1, 2], True)
    assert split_page([1, 2], 2) == ([1, 2], False)
    assert split_page([], 2) == ([], False)
