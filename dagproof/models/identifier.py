"""Content identifier model."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

_HEX_RE = re.compile(r"^(?:[0-9a-f]{2})+$")


class ContentIdentifier(BaseModel):
    """Identity of a block: (hash algorithm, codec, digest).

    The digest is a deterministic function of the block's canonical bytes,
    so two identifiers compare equal exactly when they name the same bytes
    under the same algorithm and codec.

    Text form is ``"<codec>:<hash_algorithm>:<hex digest>"``, for example
    ``dag-json:sha256:9f86d0...``.
    """

    model_config = ConfigDict(frozen=True)

    hash_algorithm: str
    codec: str
    digest: bytes

    def __str__(self) -> str:
        return f"{self.codec}:{self.hash_algorithm}:{self.digest.hex()}"

    @property
    def short(self) -> str:
        """Abbreviated text form for logs and tables."""
        return f"{self.codec}:{self.hash_algorithm}:{self.digest.hex()[:12]}"

    @classmethod
    def parse(cls, text: str) -> ContentIdentifier:
        """Parse the text form produced by ``str(cid)``.

        Raises
        ------
        ValueError
            If the text is not ``codec:algorithm:hex``.
        """
        if not isinstance(text, str):
            raise ValueError(f"Identifier text must be str, got {type(text).__name__}")
        parts = text.split(":")
        if len(parts) != 3 or not parts[0] or not parts[1]:
            raise ValueError(f"Malformed content identifier: {text!r}")
        codec, hash_algorithm, hex_digest = parts
        if not _HEX_RE.match(hex_digest):
            raise ValueError(f"Malformed digest in content identifier: {text!r}")
        return cls(
            hash_algorithm=hash_algorithm,
            codec=codec,
            digest=bytes.fromhex(hex_digest),
        )
