"""Wire model for a transmissible proof."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

PROOF_FORMAT_VERSION = 1


class ProofEnvelope(BaseModel):
    """JSON envelope for a proof: root claim plus base64 node bytes.

    The envelope carries no identifiers for the nodes themselves; the
    verifier always recomputes them from the bytes.
    """

    model_config = ConfigDict(
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    version: int = PROOF_FORMAT_VERSION
    root: str  # ContentIdentifier text form
    nodes: list[bytes] = Field(min_length=1)
