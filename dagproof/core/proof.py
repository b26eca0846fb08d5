"""Self-contained inclusion proofs and their store-free validation.

A proof is a claimed root identifier plus the raw bytes of every block
on one path from that root to a target block. No node identifiers are
carried: validation recomputes each one from the bytes, so any altered
byte breaks the chain.

Successful validation means every hop from the claimed root to the final
block is backed by a link that re-derives from the bytes. It does NOT
say what the final block contains; callers decode ``nodes()[-1]`` (or use
``decode_target()``) and compare it with the value they intend to trust.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from dagproof.core.codecs import CodecRegistry, Value, default_codecs
from dagproof.core.errors import ChainBrokenError, DecodeError, InvalidProofError
from dagproof.core.hasher import IdentifierCodec, default_identifier_codec
from dagproof.core.links import extract_links
from dagproof.models.identifier import ContentIdentifier
from dagproof.models.proof import PROOF_FORMAT_VERSION, ProofEnvelope

logger = logging.getLogger(__name__)


class Proof:
    """Immutable root claim plus ordered, root-first block bytes.

    Parameters
    ----------
    root:
        The claimed root identifier.
    nodes:
        Raw block bytes ordered from the root block to the target block.
    identifiers, codecs:
        Hash and codec registries used by ``validate()``. Default to the
        library-wide registries.
    """

    def __init__(
        self,
        root: ContentIdentifier,
        nodes: list[bytes] | tuple[bytes, ...],
        *,
        identifiers: IdentifierCodec | None = None,
        codecs: CodecRegistry | None = None,
    ) -> None:
        if not isinstance(root, ContentIdentifier):
            raise TypeError(f"root must be a ContentIdentifier, got {type(root).__name__}")
        nodes = tuple(nodes)
        if not all(isinstance(node, (bytes, bytearray)) for node in nodes):
            raise TypeError("proof nodes must be bytes")
        self._root = root
        self._nodes = tuple(bytes(node) for node in nodes)
        self._identifiers = identifiers or default_identifier_codec
        self._codecs = codecs or default_codecs

    def root(self) -> ContentIdentifier:
        """Return the claimed root identifier."""
        return self._root

    def nodes(self) -> tuple[bytes, ...]:
        """Return the raw block bytes, root first, target last."""
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Proof):
            return NotImplemented
        return self._root == other._root and self._nodes == other._nodes

    def __hash__(self) -> int:
        return hash((self._root, self._nodes))

    def __repr__(self) -> str:
        return f"Proof(root={self._root.short}, nodes={len(self._nodes)})"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> ContentIdentifier:
        """Check the chain from the claimed root to the final block.

        Returns the recomputed identifier of the final block.

        Raises
        ------
        InvalidProofError
            If the proof has no nodes.
        ChainBrokenError
            If the first block does not hash to the root claim, or some
            block has no link to the next block's recomputed identifier.
        """
        return self.verified_identifiers()[-1]

    def verified_identifiers(self) -> list[ContentIdentifier]:
        """Validate and return the recomputed identifier of every node, in order.

        A parent may link the next block's bytes under more than one
        identifier (the same digest tagged with two codecs, say). Every
        such link is followed; the chain breaks only when none of them
        decodes and links onward. Among identifiers that all reach the
        final block, the first in document order under which it decodes
        is returned.

        Raises the same errors as ``validate()``.
        """
        if not self._nodes:
            raise InvalidProofError("Proof has no nodes")
        if not self._hashes_to(self._nodes[0], self._root):
            raise ChainBrokenError(0, f"first block does not hash to root {self._root}")

        # Each layer holds (identifier, position of its parent in the previous layer)
        layers: list[list[tuple[ContentIdentifier, int]]] = [[(self._root, -1)]]
        for index in range(len(self._nodes) - 1):
            decoded, error = self._decode_under(self._nodes[index], layers[-1])
            if not decoded:
                raise ChainBrokenError(index, f"block does not decode: {error}")

            following = self._nodes[index + 1]
            reached: dict[ContentIdentifier, int] = {}
            for position, value in decoded:
                for link in extract_links(value):
                    if link not in reached and self._hashes_to(following, link):
                        reached[link] = position
            if not reached:
                raise ChainBrokenError(
                    index, f"no link to the recomputed identifier of node {index + 1}"
                )
            layers.append(list(reached.items()))

        decoded, _ = self._decode_under(self._nodes[-1], layers[-1])
        position = decoded[0][0] if decoded else 0

        resolved: list[ContentIdentifier] = []
        for layer in reversed(layers):
            cid, parent = layer[position]
            resolved.append(cid)
            position = parent
        resolved.reverse()

        logger.debug("Validated proof %r ending at %s", self, resolved[-1].short)
        return resolved

    def _decode_under(
        self, data: bytes, candidates: list[tuple[ContentIdentifier, int]]
    ) -> tuple[list[tuple[int, Value]], DecodeError | None]:
        decoded: list[tuple[int, Value]] = []
        first_error = None
        for position, (cid, _) in enumerate(candidates):
            try:
                decoded.append((position, self._codecs.decode(data, cid.codec)))
            except DecodeError as exc:
                first_error = first_error or exc
        return decoded, first_error

    def is_valid(self) -> bool:
        """Boolean form of ``validate()``."""
        try:
            self.validate()
        except (ChainBrokenError, InvalidProofError):
            return False
        return True

    def decode_target(self) -> Value:
        """Validate, then decode the final block with its verified codec."""
        target = self.validate()
        try:
            return self._codecs.decode(self._nodes[-1], target.codec)
        except DecodeError as exc:
            raise ChainBrokenError(
                len(self._nodes) - 1, f"target block does not decode: {exc}"
            ) from exc

    def _hashes_to(self, data: bytes, cid: ContentIdentifier) -> bool:
        return self._identifiers.matches(data, cid)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_envelope(self) -> ProofEnvelope:
        return ProofEnvelope(root=str(self._root), nodes=list(self._nodes))

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to the JSON proof envelope."""
        return self.to_envelope().model_dump_json(indent=indent)

    @classmethod
    def from_envelope(
        cls,
        envelope: ProofEnvelope,
        *,
        identifiers: IdentifierCodec | None = None,
        codecs: CodecRegistry | None = None,
    ) -> Proof:
        if envelope.version != PROOF_FORMAT_VERSION:
            raise InvalidProofError(f"Unsupported proof format version {envelope.version}")
        try:
            root = ContentIdentifier.parse(envelope.root)
        except ValueError as exc:
            raise InvalidProofError(f"Malformed root claim: {exc}") from exc
        return cls(root, envelope.nodes, identifiers=identifiers, codecs=codecs)

    @classmethod
    def from_json(
        cls,
        text: str | bytes,
        *,
        identifiers: IdentifierCodec | None = None,
        codecs: CodecRegistry | None = None,
    ) -> Proof:
        """Load a proof envelope. Does not validate the chain."""
        try:
            envelope = ProofEnvelope.model_validate_json(text)
        except ValidationError as exc:
            raise InvalidProofError(f"Malformed proof envelope: {exc}") from exc
        return cls.from_envelope(envelope, identifiers=identifiers, codecs=codecs)
