"""Tests for link extraction order and coverage."""

from __future__ import annotations

import pytest

from dagproof.core.hasher import default_identifier_codec
from dagproof.core.links import extract_links, iter_links


def _link(name: str):
    return default_identifier_codec.identifier_of(name.encode(), "sha256", "dag-json")


class TestExtractLinks:
    def test_scalars_have_no_links(self):
        """Scalars carry no links."""
        for value in (None, True, 3, 2.5, "text", b"bytes", [], {}):
            assert extract_links(value) == []

    def test_bare_link(self):
        """A link on its own is its only link."""
        assert extract_links(_link("a")) == [_link("a")]

    def test_list_order(self):
        """List links come out by index."""
        a, b, c = _link("a"), _link("b"), _link("c")
        assert extract_links([a, b, c]) == [a, b, c]

    def test_depth_first_document_order(self):
        """Nested links come out before later siblings."""
        a, b, c, d = (_link(n) for n in "abcd")
        value = [a, {"x": [b, c], "y": 1}, d]
        assert extract_links(value) == [a, b, c, d]

    def test_map_follows_iteration_order(self):
        """Map links follow the map's iteration order."""
        a, b = _link("a"), _link("b")
        assert extract_links({"z": a, "m": b}) == [a, b]
        assert extract_links({"m": b, "z": a}) == [b, a]

    def test_duplicates_preserved(self):
        """Repeated links are yielded every time."""
        a, b = _link("a"), _link("b")
        assert extract_links([a, b, a, {"k": a}]) == [a, b, a, a]

    def test_lazy_iteration(self):
        """iter_links yields before walking the whole value."""
        a, b = _link("a"), _link("b")
        links = iter_links([a, b])
        assert next(links) == a

    def test_deeply_nested(self):
        """Deep nesting does not hit the recursion limit."""
        a = _link("a")
        value: object = a
        for _ in range(5000):
            value = [value]
        assert extract_links(value) == [a]

    def test_non_value_raises_type_error(self):
        """Foreign objects in a Value raise TypeError."""
        with pytest.raises(TypeError, match="set"):
            extract_links([{1, 2}])
