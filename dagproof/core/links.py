"""Link extraction from decoded Values.

Links are yielded in a stable document order: list elements by index,
map entries in decoded iteration order, each recursing before moving to
the next sibling. No deduplication: a value that links to the same
identifier twice yields it twice.
"""

from __future__ import annotations

from collections.abc import Iterator

from dagproof.core.codecs import Value
from dagproof.models.identifier import ContentIdentifier

_SCALARS = (type(None), bool, int, float, str, bytes)
_EXHAUSTED = object()


def iter_links(value: Value) -> Iterator[ContentIdentifier]:
    """Lazily yield every link inside ``value`` in document order.

    Uses an explicit stack so deeply nested values do not exhaust the
    interpreter recursion limit.
    """
    stack: list[Iterator[Value]] = [iter((value,))]
    while stack:
        item = next(stack[-1], _EXHAUSTED)
        if item is _EXHAUSTED:
            stack.pop()
        elif isinstance(item, ContentIdentifier):
            yield item
        elif isinstance(item, (list, tuple)):
            stack.append(iter(item))
        elif isinstance(item, dict):
            stack.append(iter(item.values()))
        elif not isinstance(item, _SCALARS):
            raise TypeError(f"{type(item).__name__} is not a Value")


def extract_links(value: Value) -> list[ContentIdentifier]:
    """Return every link inside ``value`` in document order."""
    return list(iter_links(value))
