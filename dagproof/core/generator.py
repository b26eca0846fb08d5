"""Proof generation against an injected, read-only block store.

The generator holds a non-owning reference to its store and never writes
to it, so any number of generators may share one store across threads.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from dagproof.config import config
from dagproof.core.block_store import BlockStore
from dagproof.core.codecs import CodecRegistry, Value, default_codecs
from dagproof.core.errors import DecodeError
from dagproof.core.hasher import IdentifierCodec, default_identifier_codec
from dagproof.core.proof import Proof
from dagproof.core.walker import BytesTarget, DagWalker, as_target
from dagproof.models.identifier import ContentIdentifier

logger = logging.getLogger(__name__)


class NoDefaultRootError(ValueError):
    """Raised by ``generate_proof()`` when no default root was configured."""


class ProofGenerator:
    """Builds inclusion proofs by walking a DAG from a root.

    Parameters
    ----------
    store:
        The block store to read from.
    default_root:
        Root used by ``generate_proof()``; ``generate_proof_to_cid()``
        always takes an explicit root.
    max_visits:
        Traversal budget passed to the walker. Defaults to
        ``config.max_visits``.
    """

    def __init__(
        self,
        store: BlockStore,
        *,
        default_root: ContentIdentifier | None = None,
        codecs: CodecRegistry | None = None,
        identifiers: IdentifierCodec | None = None,
        max_visits: int | None = None,
    ) -> None:
        self._store = store
        self._default_root = default_root
        self._codecs = codecs or default_codecs
        self._identifiers = identifiers or default_identifier_codec
        self._walker = DagWalker(
            store,
            self._codecs,
            max_visits=config.max_visits if max_visits is None else max_visits,
        )

    @property
    def default_root(self) -> ContentIdentifier | None:
        return self._default_root

    def get(self, cid: ContentIdentifier, as_type: Any = None) -> Any:
        """Fetch and decode a block, optionally coercing it into ``as_type``.

        ``as_type`` is anything pydantic's ``TypeAdapter`` accepts: a model
        class, ``list[int]``, a ``TypedDict`` and so on.

        Raises
        ------
        BlockNotFoundError
            If ``cid`` is absent from the store.
        DecodeError
            If the block does not decode, or does not fit ``as_type``.
        """
        value: Value = self._codecs.decode(self._store.get(cid), cid.codec)
        if as_type is None:
            return value
        try:
            return TypeAdapter(as_type).validate_python(value)
        except ValidationError as exc:
            raise DecodeError(f"Block {cid} does not fit {as_type!r}: {exc}") from exc

    def generate_proof_to_cid(self, target: Any, root: ContentIdentifier) -> Proof:
        """Prove that ``target`` is reachable from ``root``.

        ``target`` may be a ContentIdentifier (matched by identity), a
        :class:`~dagproof.core.walker.Target`, or any Value (matched by
        re-encoding it in each visited block's codec).

        Raises
        ------
        BlockNotFoundError, DecodeError, TargetNotFoundError
        """
        path = self._walker.find(root, as_target(target, self._codecs))
        proof = Proof(
            root,
            [data for _, data in path],
            identifiers=self._identifiers,
            codecs=self._codecs,
        )
        logger.info(
            "Generated proof from %s to %s (%d nodes)",
            root.short, path[-1][0].short, len(proof),
        )
        return proof

    def generate_proof(self, target: Any) -> Proof:
        """``generate_proof_to_cid`` against the configured default root."""
        if self._default_root is None:
            raise NoDefaultRootError(
                "No default root configured; pass default_root= or use "
                "generate_proof_to_cid()"
            )
        return self.generate_proof_to_cid(target, self._default_root)

    def generate_proof_raw(
        self, data: bytes, root: ContentIdentifier | None = None
    ) -> Proof:
        """Prove that a block with exactly these bytes is reachable.

        Uses the default root when ``root`` is omitted.
        """
        target = BytesTarget(data)
        if root is None:
            return self.generate_proof(target)
        return self.generate_proof_to_cid(target, root)
