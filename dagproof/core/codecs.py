"""Value codecs: raw block bytes to and from the generic Value model.

A Value is one of: ``None``, ``bool``, ``int``, ``float``, ``str``,
``bytes``, ``list[Value]``, ``dict[str, Value]`` or a
:class:`ContentIdentifier` (a link). Nothing else decodes from a block,
and nothing else encodes into one.

Three codecs ship by default:

- ``dag-json``: canonical JSON (sorted keys, compact, ASCII). Links are
  written ``{"/": "<cid>"}`` and byte strings ``{"/": {"bytes": "<b64>"}}``.
- ``dag-cbor``: canonical CBOR via ``cbor2``, links as CBOR tag 42.
- ``raw``: the block bytes themselves, decoded as a single ``bytes`` Value.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
from collections.abc import Mapping
from typing import Any, Protocol, Union, runtime_checkable

import cbor2
from pydantic import BaseModel

from dagproof.core.errors import DecodeError, EncodeError
from dagproof.core.hasher import canonical_json_bytes
from dagproof.models.identifier import ContentIdentifier

Value = Union[
    None,
    bool,
    int,
    float,
    str,
    bytes,
    list["Value"],
    dict[str, "Value"],
    ContentIdentifier,
]

DAG_JSON = "dag-json"
DAG_CBOR = "dag-cbor"
RAW = "raw"


@runtime_checkable
class ValueCodec(Protocol):
    """Protocol every block codec must satisfy.

    ``encode`` must be canonical and deterministic: re-encoding a decoded
    value yields the same bytes, so recomputed identifiers are stable.
    """

    tag: str

    def encode(self, value: Any) -> bytes:
        """Encode a Value into canonical bytes, raising ``EncodeError``."""
        ...

    def decode(self, data: bytes) -> Value:
        """Decode bytes into a Value, raising ``DecodeError``."""
        ...


# ---------------------------------------------------------------------------
# dag-json
# ---------------------------------------------------------------------------


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.b64decode(text + "=" * (-len(text) % 4), validate=True)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not allowed")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} overflows to a non-finite float")
    return value


class DagJsonCodec:
    """Canonical JSON codec with reserved ``"/"`` maps for links and bytes."""

    tag = DAG_JSON

    def encode(self, value: Any) -> bytes:
        try:
            return canonical_json_bytes(self._to_json(value))
        except RecursionError:
            raise EncodeError("Value is nested too deeply to encode") from None
        except ValueError as exc:
            # e.g. ints past the interpreter's str conversion limit
            raise EncodeError(f"Cannot encode value: {exc}") from exc

    def decode(self, data: bytes) -> Value:
        try:
            parsed = json.loads(
                bytes(data).decode("utf-8"),
                parse_constant=_reject_constant,
                parse_float=_finite_float,
            )
            return self._from_json(parsed)
        except (UnicodeDecodeError, ValueError) as exc:
            raise DecodeError(f"Malformed dag-json block: {exc}") from exc
        except RecursionError:
            raise DecodeError("dag-json block is nested too deeply") from None

    def _to_json(self, value: Any) -> Any:
        if isinstance(value, ContentIdentifier):
            return {"/": str(value)}
        if isinstance(value, BaseModel):
            return self._to_json(dict(value))
        if value is None or isinstance(value, (bool, str, int)):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                raise EncodeError(f"Cannot encode non-finite float {value!r}")
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return {"/": {"bytes": _b64encode(bytes(value))}}
        if isinstance(value, (list, tuple)):
            return [self._to_json(item) for item in value]
        if isinstance(value, Mapping):
            if list(value.keys()) == ["/"]:
                raise EncodeError('Map with the single key "/" is reserved for links')
            out = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise EncodeError(
                        f"Map keys must be str, got {type(key).__name__}"
                    )
                out[key] = self._to_json(item)
            return out
        raise EncodeError(f"Cannot encode {type(value).__name__} as a Value")

    def _from_json(self, obj: Any) -> Value:
        if isinstance(obj, dict):
            if len(obj) == 1 and "/" in obj:
                return self._reserved(obj["/"])
            return {key: self._from_json(item) for key, item in obj.items()}
        if isinstance(obj, list):
            return [self._from_json(item) for item in obj]
        return obj

    @staticmethod
    def _reserved(inner: Any) -> Value:
        if isinstance(inner, str):
            try:
                return ContentIdentifier.parse(inner)
            except ValueError as exc:
                raise DecodeError(f"Malformed link: {exc}") from exc
        if isinstance(inner, dict) and list(inner.keys()) == ["bytes"]:
            encoded = inner["bytes"]
            if isinstance(encoded, str):
                try:
                    return _b64decode(encoded)
                except (binascii.Error, ValueError) as exc:
                    raise DecodeError(f"Malformed bytes: {exc}") from exc
        raise DecodeError('Unrecognised reserved "/" map')


# ---------------------------------------------------------------------------
# dag-cbor
# ---------------------------------------------------------------------------

_CBOR_LINK_TAG = 42


class DagCborCodec:
    """Canonical CBOR codec with tag-42 links.

    Maps are written with RFC 7049 canonical key order and integers and
    floats in their shortest form. A link is tag 42 wrapping a byte string
    of ``0x00`` followed by the identifier's ASCII text form. Only blocks
    that re-encode to exactly their own bytes decode, so every accepted
    block is canonical.
    """

    tag = DAG_CBOR

    def encode(self, value: Any) -> bytes:
        try:
            return cbor2.dumps(self._to_cbor(value), canonical=True)
        except RecursionError:
            raise EncodeError("Value is nested too deeply to encode") from None
        except (cbor2.CBOREncodeError, UnicodeEncodeError) as exc:
            raise EncodeError(f"Cannot encode value: {exc}") from exc

    def decode(self, data: bytes) -> Value:
        data = bytes(data)
        try:
            value = self._from_cbor(cbor2.loads(data))
        except (cbor2.CBORDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"Malformed dag-cbor block: {exc}") from exc
        except RecursionError:
            raise DecodeError("dag-cbor block is nested too deeply") from None
        if self.encode(value) != data:
            raise DecodeError("dag-cbor block is not in canonical form")
        return value

    def _to_cbor(self, value: Any) -> Any:
        if isinstance(value, ContentIdentifier):
            return cbor2.CBORTag(_CBOR_LINK_TAG, b"\x00" + str(value).encode("ascii"))
        if isinstance(value, BaseModel):
            return self._to_cbor(dict(value))
        if value is None or isinstance(value, (bool, str, int)):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                raise EncodeError(f"Cannot encode non-finite float {value!r}")
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if isinstance(value, (list, tuple)):
            return [self._to_cbor(item) for item in value]
        if isinstance(value, Mapping):
            out = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise EncodeError(f"Map keys must be str, got {type(key).__name__}")
                out[key] = self._to_cbor(item)
            return out
        raise EncodeError(f"Cannot encode {type(value).__name__} as a Value")

    def _from_cbor(self, obj: Any) -> Value:
        if isinstance(obj, cbor2.CBORTag):
            return self._link(obj)
        if obj is None or isinstance(obj, (bool, str, int, bytes)):
            return obj
        if isinstance(obj, float):
            if not math.isfinite(obj):
                raise DecodeError(f"Non-finite float {obj!r} in dag-cbor block")
            return obj
        if isinstance(obj, list):
            return [self._from_cbor(item) for item in obj]
        if isinstance(obj, dict):
            out = {}
            for key, item in obj.items():
                if not isinstance(key, str):
                    raise DecodeError(f"Map keys must be str, got {type(key).__name__}")
                out[key] = self._from_cbor(item)
            return out
        raise DecodeError(f"{type(obj).__name__} is not a Value")

    @staticmethod
    def _link(tagged: cbor2.CBORTag) -> ContentIdentifier:
        if tagged.tag != _CBOR_LINK_TAG:
            raise DecodeError(f"Unsupported CBOR tag {tagged.tag}")
        payload = tagged.value
        if not isinstance(payload, bytes) or payload[:1] != b"\x00":
            raise DecodeError("Link tag must wrap 0x00-prefixed bytes")
        try:
            return ContentIdentifier.parse(payload[1:].decode("ascii"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise DecodeError(f"Malformed link: {exc}") from exc


# ---------------------------------------------------------------------------
# raw
# ---------------------------------------------------------------------------


class RawCodec:
    """Identity codec: a block is one opaque byte string with no links."""

    tag = RAW

    def encode(self, value: Any) -> bytes:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise EncodeError(f"raw codec encodes bytes only, got {type(value).__name__}")
        return bytes(value)

    def decode(self, data: bytes) -> Value:
        return bytes(data)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class CodecRegistry:
    """Lookup table of codecs keyed by tag."""

    def __init__(self, codecs: list[ValueCodec] | None = None) -> None:
        self._codecs: dict[str, ValueCodec] = {}
        if codecs is None:
            codecs = [DagJsonCodec(), DagCborCodec(), RawCodec()]
        for codec in codecs:
            self.register(codec)

    def register(self, codec: ValueCodec) -> None:
        if not isinstance(codec, ValueCodec):
            raise TypeError(f"{codec!r} does not implement ValueCodec")
        self._codecs[codec.tag] = codec

    @property
    def tags(self) -> list[str]:
        return sorted(self._codecs)

    def get(self, tag: str) -> ValueCodec:
        """Return the codec for ``tag``, raising ``DecodeError`` if unknown."""
        try:
            return self._codecs[tag]
        except KeyError:
            raise DecodeError(f"No codec registered for {tag!r}") from None

    def decode(self, data: bytes, tag: str) -> Value:
        return self.get(tag).decode(data)

    def encode(self, value: Any, tag: str) -> bytes:
        return self.get(tag).encode(value)


default_codecs = CodecRegistry()
