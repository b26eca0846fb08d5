"""Error taxonomy shared by the store, codecs, walker and proof.

Every failure reachable from external bytes raises one of these. Errors
are never swallowed inside the engine; store failures surface verbatim
so the host can retry as it sees fit.
"""

from __future__ import annotations


class DagProofError(RuntimeError):
    """Base class for every dagproof failure."""


class BlockNotFoundError(DagProofError):
    """Raised when an identifier is absent from the block store."""

    def __init__(self, cid: object) -> None:
        super().__init__(f"Block not found: {cid}")
        self.cid = cid


class BlockIntegrityError(DagProofError):
    """Raised when stored bytes no longer hash to their identifier."""


class DecodeError(DagProofError):
    """Raised when bytes fail to parse under the declared codec."""


class EncodeError(DecodeError):
    """Raised when a Python object cannot be encoded as a Value."""


class TargetNotFoundError(DagProofError):
    """Raised when the reachable closure of a root has no matching block."""


class ChainBrokenError(DagProofError):
    """Raised when a proof chain has a missing or mismatched link.

    ``index`` is the position of the node whose outgoing hop failed
    (``0`` for a root mismatch).
    """

    def __init__(self, index: int, message: str) -> None:
        super().__init__(f"Chain broken at node {index}: {message}")
        self.index = index


class InvalidProofError(DagProofError):
    """Raised for a structurally invalid proof (empty, or unparseable)."""
