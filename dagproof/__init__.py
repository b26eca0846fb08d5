"""dagproof: inclusion proofs for content-addressed DAGs.

Proves that a value is present, and reachable, under a known root
identifier by shipping only the raw blocks on one root-to-target path.
Verifiers re-derive every identifier from those bytes; no store needed.
"""

__version__ = "0.1.0"
__description__ = "Inclusion proofs for content-addressed DAGs"

from dagproof.core.block_store import FileBlockStore, MemoryBlockStore, put_value
from dagproof.core.errors import (
    BlockNotFoundError,
    ChainBrokenError,
    DagProofError,
    DecodeError,
    InvalidProofError,
    TargetNotFoundError,
)
from dagproof.core.generator import ProofGenerator
from dagproof.core.proof import Proof
from dagproof.core.walker import Target
from dagproof.models.identifier import ContentIdentifier
from dagproof.cli.app import app as cli

__all__ = [
    "ContentIdentifier",
    "Proof",
    "ProofGenerator",
    "Target",
    "MemoryBlockStore",
    "FileBlockStore",
    "put_value",
    "DagProofError",
    "BlockNotFoundError",
    "DecodeError",
    "TargetNotFoundError",
    "ChainBrokenError",
    "InvalidProofError",
    "cli",
    "__version__",
]
