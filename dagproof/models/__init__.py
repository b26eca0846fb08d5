"""dagproof data models: all Pydantic v2, all frozen (immutable)."""

from dagproof.models.identifier import ContentIdentifier
from dagproof.models.proof import PROOF_FORMAT_VERSION, ProofEnvelope

__all__ = [
    "ContentIdentifier",
    "ProofEnvelope",
    "PROOF_FORMAT_VERSION",
]
