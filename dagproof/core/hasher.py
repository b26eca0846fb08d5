"""Canonical hashing helpers and the content identifier codec.

The identifier codec turns raw block bytes into a ContentIdentifier under
a selected hash algorithm and codec tag. Hash functions live in an
injected lookup table so new algorithms can be registered without
touching the walker or the proof logic.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable, Mapping
from typing import Any

import blake3

from dagproof.models.identifier import ContentIdentifier

HashFunction = Callable[[bytes], bytes]


class UnsupportedHashError(ValueError):
    """Raised when an identifier names a hash algorithm with no registered function."""


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce deterministic canonical JSON bytes.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - NaN and Infinity rejected
    - UTF-8 encoding
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        allow_nan=False,
    ).encode("utf-8")


def _blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


DEFAULT_HASH_FUNCTIONS: dict[str, HashFunction] = {
    "sha256": lambda data: hashlib.sha256(data).digest(),
    "sha512": lambda data: hashlib.sha512(data).digest(),
    "blake2b-256": _blake2b_256,
    "blake3": lambda data: blake3.blake3(data).digest(),
}


class IdentifierCodec:
    """Computes content identifiers from raw bytes.

    Parameters
    ----------
    hash_functions:
        Mapping of algorithm tag to a ``bytes -> digest`` function.
        Defaults to :data:`DEFAULT_HASH_FUNCTIONS`.
    """

    def __init__(self, hash_functions: Mapping[str, HashFunction] | None = None) -> None:
        self._hash_functions = dict(
            DEFAULT_HASH_FUNCTIONS if hash_functions is None else hash_functions
        )

    @property
    def algorithms(self) -> list[str]:
        """Registered hash algorithm tags, sorted."""
        return sorted(self._hash_functions)

    def supports(self, hash_algorithm: str) -> bool:
        return hash_algorithm in self._hash_functions

    def identifier_of(
        self, data: bytes, hash_algorithm: str, codec: str
    ) -> ContentIdentifier:
        """Return the identifier of ``data`` under ``hash_algorithm`` and ``codec``.

        Raises
        ------
        UnsupportedHashError
            If ``hash_algorithm`` has no registered function.
        """
        try:
            hash_function = self._hash_functions[hash_algorithm]
        except KeyError:
            raise UnsupportedHashError(
                f"Unsupported hash algorithm {hash_algorithm!r}; "
                f"registered: {', '.join(self.algorithms)}"
            ) from None
        return ContentIdentifier(
            hash_algorithm=hash_algorithm,
            codec=codec,
            digest=hash_function(bytes(data)),
        )

    def matches(self, data: bytes, cid: ContentIdentifier) -> bool:
        """Whether ``data`` hashes to ``cid`` under ``cid``'s own algorithm and codec.

        An unregistered algorithm never matches.
        """
        if not self.supports(cid.hash_algorithm):
            return False
        return self.identifier_of(data, cid.hash_algorithm, cid.codec) == cid


default_identifier_codec = IdentifierCodec()
