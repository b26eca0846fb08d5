"""Content-addressed block stores.

The proof engine only ever calls ``get``; ``put`` belongs to whoever
builds the DAG. Both reference stores are write-once: storing the same
bytes twice is a no-op and there is no update or delete.

On-disk layout: {base_path}/{hex[0:2]}/{hex[2:4]}/{codec}.{algorithm}.{hex}.blk
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from dagproof.config import config
from dagproof.core.codecs import CodecRegistry, default_codecs
from dagproof.core.errors import BlockIntegrityError, BlockNotFoundError
from dagproof.core.hasher import IdentifierCodec, default_identifier_codec
from dagproof.models.identifier import ContentIdentifier

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@runtime_checkable
class BlockStore(Protocol):
    """Protocol for raw block persistence keyed by content identifier."""

    def get(self, cid: ContentIdentifier) -> bytes:
        """Return the bytes stored under ``cid``; raise ``BlockNotFoundError``."""
        ...

    def put(
        self,
        data: bytes,
        hash_algorithm: str | None = None,
        codec: str | None = None,
    ) -> ContentIdentifier:
        """Store ``data`` and return its identifier."""
        ...

    def has(self, cid: ContentIdentifier) -> bool:
        """Whether ``cid`` is present."""
        ...


def _resolve_tags(hash_algorithm: str | None, codec: str | None) -> tuple[str, str]:
    return (
        hash_algorithm or config.default_hash_algorithm,
        codec or config.default_codec,
    )


class MemoryBlockStore:
    """Dict-backed block store, mostly for tests and short-lived DAGs."""

    def __init__(self, identifiers: IdentifierCodec | None = None) -> None:
        self._identifiers = identifiers or default_identifier_codec
        self._blocks: dict[ContentIdentifier, bytes] = {}

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, cid: object) -> bool:
        return cid in self._blocks

    def get(self, cid: ContentIdentifier) -> bytes:
        try:
            return self._blocks[cid]
        except KeyError:
            raise BlockNotFoundError(cid) from None

    def put(
        self,
        data: bytes,
        hash_algorithm: str | None = None,
        codec: str | None = None,
    ) -> ContentIdentifier:
        hash_algorithm, codec = _resolve_tags(hash_algorithm, codec)
        data = bytes(data)
        cid = self._identifiers.identifier_of(data, hash_algorithm, codec)
        self._blocks.setdefault(cid, data)
        return cid

    def has(self, cid: ContentIdentifier) -> bool:
        return cid in self._blocks


class FileBlockStore:
    """Immutable on-disk block store sharded by digest prefix.

    Parameters
    ----------
    base_path:
        Root directory for block storage. Created if missing.
    verify_on_read:
        Re-hash every block on ``get`` and raise ``BlockIntegrityError``
        when the bytes no longer match their identifier.
    """

    def __init__(
        self,
        base_path: Path,
        *,
        verify_on_read: bool | None = None,
        identifiers: IdentifierCodec | None = None,
    ) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)
        self._verify_on_read = (
            config.verify_on_read if verify_on_read is None else verify_on_read
        )
        self._identifiers = identifiers or default_identifier_codec

    @property
    def base_path(self) -> Path:
        return self._base

    def _block_path(self, cid: ContentIdentifier) -> Path | None:
        """Storage path for ``cid``, or None if its tags are not path-safe."""
        if not (_TAG_RE.match(cid.codec) and _TAG_RE.match(cid.hash_algorithm)):
            return None
        digest = cid.digest.hex()
        return (
            self._base
            / digest[:2]
            / digest[2:4]
            / f"{cid.codec}.{cid.hash_algorithm}.{digest}.blk"
        )

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def put(
        self,
        data: bytes,
        hash_algorithm: str | None = None,
        codec: str | None = None,
    ) -> ContentIdentifier:
        """Store data and return its identifier.

        If the block already exists, verifies integrity and returns the
        identifier without overwriting.
        """
        hash_algorithm, codec = _resolve_tags(hash_algorithm, codec)
        data = bytes(data)
        cid = self._identifiers.identifier_of(data, hash_algorithm, codec)
        path = self._block_path(cid)
        if path is None:
            raise ValueError(f"Tags of {cid} are not safe for on-disk storage")

        if path.exists():
            if not self.verify(cid):
                raise BlockIntegrityError(f"Existing block at {cid} failed integrity check")
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            logger.debug("Stored block %s (%d bytes)", cid.short, len(data))
        return cid

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def get(self, cid: ContentIdentifier) -> bytes:
        path = self._block_path(cid)
        if path is None or not path.exists():
            raise BlockNotFoundError(cid)
        data = path.read_bytes()
        if self._verify_on_read and self._identifiers.supports(cid.hash_algorithm):
            if not self._identifiers.matches(data, cid):
                logger.warning("Block %s failed integrity check on read", cid)
                raise BlockIntegrityError(f"Stored block {cid} does not match its digest")
        return data

    # ------------------------------------------------------------------
    # Check and verify
    # ------------------------------------------------------------------

    def has(self, cid: ContentIdentifier) -> bool:
        path = self._block_path(cid)
        return path is not None and path.exists()

    def verify(self, cid: ContentIdentifier) -> bool:
        """Re-hash stored data and compare against the identifier."""
        path = self._block_path(cid)
        if path is None or not path.exists():
            return False
        return self._identifiers.matches(path.read_bytes(), cid)


def put_value(
    store: BlockStore,
    value: Any,
    codec: str | None = None,
    hash_algorithm: str | None = None,
    codecs: CodecRegistry | None = None,
) -> ContentIdentifier:
    """Encode ``value`` with ``codec`` and store it, returning its identifier."""
    hash_algorithm, codec = _resolve_tags(hash_algorithm, codec)
    data = (codecs or default_codecs).encode(value, codec)
    return store.put(data, hash_algorithm=hash_algorithm, codec=codec)
