"""Depth-first search from a root identifier to a target block.

The first successful path in document order wins, even when a shorter
path exists elsewhere. Document order depends on how the codec iterates
maps, so two correct implementations may return different, equally
valid paths for the same query. Sorting sibling links before descending
would make the result canonical; the walker deliberately does not.

Shared nodes reachable through more than one parent are visited once.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Iterator
from typing import Any

from dagproof.core.block_store import BlockStore
from dagproof.core.codecs import CodecRegistry, default_codecs
from dagproof.core.errors import DecodeError, TargetNotFoundError
from dagproof.core.links import iter_links
from dagproof.models.identifier import ContentIdentifier

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


class Target(abc.ABC):
    """Something the walker can recognise a block by."""

    @abc.abstractmethod
    def matches(self, cid: ContentIdentifier, data: bytes) -> bool:
        """Whether the block ``cid`` with bytes ``data`` is the target."""
        ...

    @staticmethod
    def by_identifier(cid: ContentIdentifier) -> IdentifierTarget:
        return IdentifierTarget(cid)

    @staticmethod
    def by_bytes(data: bytes) -> BytesTarget:
        return BytesTarget(data)

    @staticmethod
    def by_value(value: Any, codecs: CodecRegistry | None = None) -> ValueTarget:
        return ValueTarget(value, codecs)


class IdentifierTarget(Target):
    """Matches the block whose identifier equals ``cid``."""

    def __init__(self, cid: ContentIdentifier) -> None:
        self.cid = cid

    def matches(self, cid: ContentIdentifier, data: bytes) -> bool:
        return cid == self.cid

    def __repr__(self) -> str:
        return f"IdentifierTarget({self.cid})"


class BytesTarget(Target):
    """Matches a block whose raw bytes equal ``data``."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def matches(self, cid: ContentIdentifier, data: bytes) -> bool:
        return data == self.data

    def __repr__(self) -> str:
        return f"BytesTarget({len(self.data)} bytes)"


class ValueTarget(Target):
    """Matches a block whose bytes equal ``value`` re-encoded in the block's codec.

    Encodings are cached per codec tag. A value the codec cannot encode
    never matches a block of that codec.
    """

    def __init__(self, value: Any, codecs: CodecRegistry | None = None) -> None:
        self.value = value
        self._codecs = codecs or default_codecs
        self._encoded: dict[str, bytes | None] = {}

    def encoded(self, codec: str) -> bytes | None:
        if codec not in self._encoded:
            try:
                self._encoded[codec] = self._codecs.encode(self.value, codec)
            except DecodeError:
                self._encoded[codec] = None
        return self._encoded[codec]

    def matches(self, cid: ContentIdentifier, data: bytes) -> bool:
        return self.encoded(cid.codec) == data

    def __repr__(self) -> str:
        return f"ValueTarget({self.value!r})"


def as_target(obj: Any, codecs: CodecRegistry | None = None) -> Target:
    """Coerce ``obj`` into a Target.

    A bare ContentIdentifier is matched by identity; anything else is
    matched by value.
    """
    if isinstance(obj, Target):
        return obj
    if isinstance(obj, ContentIdentifier):
        return IdentifierTarget(obj)
    return ValueTarget(obj, codecs)


# ---------------------------------------------------------------------------
# Walker
# ---------------------------------------------------------------------------


class DagWalker:
    """Finds one path from a root to a target by depth-first search.

    Parameters
    ----------
    store:
        Block store to read from. Never written to.
    codecs:
        Codec registry used to decode visited blocks.
    max_visits:
        Optional cap on distinct blocks visited; exceeding it raises
        ``TargetNotFoundError``. ``None`` means unbounded.
    """

    def __init__(
        self,
        store: BlockStore,
        codecs: CodecRegistry | None = None,
        *,
        max_visits: int | None = None,
    ) -> None:
        self._store = store
        self._codecs = codecs or default_codecs
        self._max_visits = max_visits

    def find(
        self, root: ContentIdentifier, target: Any
    ) -> list[tuple[ContentIdentifier, bytes]]:
        """Return the ``(identifier, bytes)`` path from ``root`` to ``target``.

        Raises
        ------
        BlockNotFoundError
            If any visited identifier is missing from the store.
        DecodeError
            If any visited block fails to decode.
        TargetNotFoundError
            If the reachable closure of ``root`` has no matching block.
        """
        target = as_target(target, self._codecs)
        visited: set[ContentIdentifier] = set()
        stack: list[tuple[ContentIdentifier, bytes, Iterator[ContentIdentifier]]] = []
        pending: ContentIdentifier | None = root

        while True:
            if pending is not None:
                cid, pending = pending, None
                visited.add(cid)
                if self._max_visits is not None and len(visited) > self._max_visits:
                    raise TargetNotFoundError(
                        f"Gave up searching from {root} after {self._max_visits} blocks"
                    )

                logger.debug("Visiting %s at depth %d", cid.short, len(stack))
                data = self._store.get(cid)
                value = self._codecs.decode(data, cid.codec)
                if target.matches(cid, data):
                    path = [(c, d) for c, d, _ in stack]
                    path.append((cid, data))
                    logger.debug(
                        "Found %r after %d blocks, path length %d",
                        target, len(visited), len(path),
                    )
                    return path
                stack.append((cid, data, iter_links(value)))

            if not stack:
                raise TargetNotFoundError(
                    f"{target!r} is not reachable from {root} "
                    f"({len(visited)} blocks searched)"
                )

            for link in stack[-1][2]:
                if link not in visited:
                    pending = link
                    break
            else:
                stack.pop()
