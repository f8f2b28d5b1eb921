"""
Order-preserving key codecs.

A codec turns a logical key into bytes whose lexicographic order equals the
logical order of the keys, and back. The store only ever sees those bytes,
so range scans over raw keys are range scans over logical keys.

Composite keys are `(prefix, suffix)` tuples. The prefix is written with a
2-byte big-endian length header so that every key sharing a prefix shares the
same leading bytes, which turns a prefix restriction into a contiguous range.
"""

from typing import Generic, Protocol, TypeVar

from .exceptions import DecodeError, EncodeError

K = TypeVar("K")
P = TypeVar("P")
S = TypeVar("S")

_MAX_SEGMENT = 0xFFFF


class KeyCodec(Protocol[K]):
    """Total, invertible, order-preserving conversion between keys and bytes."""

    def encode(self, key: K) -> bytes: ...

    def decode(self, raw: bytes) -> K: ...


def length_prefixed(segment: bytes) -> bytes:
    """Prepends the 2-byte big-endian length header used for non-final segments."""
    if len(segment) > _MAX_SEGMENT:
        raise EncodeError(
            f"Key segment of {len(segment)} bytes exceeds the {_MAX_SEGMENT} byte limit"
        )
    return len(segment).to_bytes(2, "big") + segment


def prefix_upper_bound(prefix: bytes) -> bytes | None:
    """
    Returns the smallest byte string greater than every string starting with `prefix`.
    Returns None when no such string exists (empty prefix or all 0xFF bytes).
    """
    trimmed = prefix.rstrip(b"\xff")
    if not trimmed:
        return None
    return trimmed[:-1] + bytes([trimmed[-1] + 1])


class Uint:
    """Unsigned integer key, fixed-width big-endian."""

    def __init__(self, bits: int = 32) -> None:
        if bits not in (8, 16, 32, 64, 128):
            raise ValueError(f"Unsupported integer width: {bits}")
        self.bits = bits
        self.width = bits // 8

    def encode(self, key: int) -> bytes:
        if not isinstance(key, int) or isinstance(key, bool) or not 0 <= key < (1 << self.bits):
            raise EncodeError(f"{key!r} is not a valid u{self.bits} key", value=key)
        return key.to_bytes(self.width, "big")

    def decode(self, raw: bytes) -> int:
        if len(raw) != self.width:
            raise DecodeError(
                f"Expected {self.width} bytes for a u{self.bits} key, got {len(raw)}", raw=raw
            )
        return int.from_bytes(raw, "big")

    def __repr__(self) -> str:
        return f"Uint({self.bits})"


class Int:
    """
    Signed integer key, fixed-width big-endian with the sign bit flipped.
    Flipping the sign bit makes negative numbers sort before positive ones.
    """

    def __init__(self, bits: int = 32) -> None:
        if bits not in (8, 16, 32, 64, 128):
            raise ValueError(f"Unsupported integer width: {bits}")
        self.bits = bits
        self.width = bits // 8
        self._offset = 1 << (bits - 1)

    def encode(self, key: int) -> bytes:
        if (
            not isinstance(key, int)
            or isinstance(key, bool)
            or not -self._offset <= key < self._offset
        ):
            raise EncodeError(f"{key!r} is not a valid i{self.bits} key", value=key)
        return (key + self._offset).to_bytes(self.width, "big")

    def decode(self, raw: bytes) -> int:
        if len(raw) != self.width:
            raise DecodeError(
                f"Expected {self.width} bytes for an i{self.bits} key, got {len(raw)}", raw=raw
            )
        return int.from_bytes(raw, "big") - self._offset

    def __repr__(self) -> str:
        return f"Int({self.bits})"


class Str:
    """UTF-8 string key."""

    def encode(self, key: str) -> bytes:
        if not isinstance(key, str):
            raise EncodeError(f"{key!r} is not a valid string key", value=key)
        return key.encode("utf-8")

    def decode(self, raw: bytes) -> str:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Stored key is not valid UTF-8", raw=raw, original_error=e) from e

    def __repr__(self) -> str:
        return "Str()"


class Bytes:
    """Raw bytes key, stored as-is."""

    def encode(self, key: bytes) -> bytes:
        if not isinstance(key, (bytes, bytearray)):
            raise EncodeError(f"{key!r} is not a valid bytes key", value=key)
        return bytes(key)

    def decode(self, raw: bytes) -> bytes:
        return bytes(raw)

    def __repr__(self) -> str:
        return "Bytes()"


class Composite(Generic[P, S]):
    """
    A `(prefix, suffix)` key.

    The suffix may itself be a Composite, which gives keys of three or more
    parts: `Composite(Uint(8), Composite(Str(), Uint(64)))` encodes
    `(1, ("alice", 7))`.

    Usage:
        codec = Composite(Uint(8), Str())
        raw = codec.encode((1, "alice"))
        codec.decode(raw)  # (1, "alice")
    """

    def __init__(self, prefix: KeyCodec[P], suffix: KeyCodec[S]) -> None:
        self.prefix = prefix
        self.suffix = suffix

    def prefix_bytes(self, prefix: P) -> bytes:
        """Leading bytes shared by every key with this prefix."""
        return length_prefixed(self.prefix.encode(prefix))

    def encode(self, key: tuple[P, S]) -> bytes:
        # JSON turns tuples into lists
        if not isinstance(key, (tuple, list)) or len(key) != 2:
            raise EncodeError(f"{key!r} is not a (prefix, suffix) pair", value=key)
        return self.prefix_bytes(key[0]) + self.suffix.encode(key[1])

    def split(self, raw: bytes) -> tuple[bytes, bytes]:
        """Splits raw key bytes into the encoded prefix and suffix."""
        if len(raw) < 2:
            raise DecodeError("Composite key is missing its length header", raw=raw)
        size = int.from_bytes(raw[:2], "big")
        if len(raw) < 2 + size:
            raise DecodeError(
                f"Composite key header announces {size} bytes, only {len(raw) - 2} present",
                raw=raw,
            )
        return raw[2 : 2 + size], raw[2 + size :]

    def decode(self, raw: bytes) -> tuple[P, S]:
        head, tail = self.split(raw)
        return self.prefix.decode(head), self.suffix.decode(tail)

    def __repr__(self) -> str:
        return f"Composite({self.prefix!r}, {self.suffix!r})"
