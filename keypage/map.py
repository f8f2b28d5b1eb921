"""
Typed maps over raw storage and the ordered views pagination scans.

A `Map` owns a namespace, a key codec and a value type. Its entries live in
the store under `length_prefixed(namespace) + encoded_key`, so the whole map
is one contiguous range. `Map.prefix(p)` narrows that range further to the
entries of a composite-keyed map whose key starts with `p`.
"""

from collections.abc import Iterator
from typing import Any, Generic, TypeVar

from ._logging import logger, redact_key
from .bound import Bound, RawBound
from .exceptions import DecodeError, EntryNotFoundError
from .keys import Composite, KeyCodec, length_prefixed, prefix_upper_bound
from .serializer import ValueSerializer
from .storage import Storage

K = TypeVar("K")
V = TypeVar("V")
S = TypeVar("S")


class KeyspaceView(Generic[K, V]):
    """
    An ascending, lazily scanned range of a map.

    Every raw key of the view starts with `root`; the remainder is decoded with
    `key_codec`. Each call to `range` or `keys` opens a fresh scan that borrows
    the storage for as long as the iterator is consumed.
    """

    def __init__(
        self,
        namespace: str,
        root: bytes,
        key_codec: KeyCodec[K],
        values: ValueSerializer[V],
    ) -> None:
        self.namespace = namespace
        self.root = root
        self.key_codec = key_codec
        self.values = values

    def raw_key(self, key: K) -> bytes:
        """Full store key of `key` within this view."""
        return self.root + self.key_codec.encode(key)

    def _low(self, min: Bound[K] | None) -> RawBound:
        if min is None:
            return RawBound(key=self.root, inclusive=True)
        return min.to_raw(self.raw_key)

    def _high(self, max: Bound[K] | None) -> RawBound | None:
        if max is not None:
            return max.to_raw(self.raw_key)
        upper = prefix_upper_bound(self.root)
        return RawBound(key=upper, inclusive=False) if upper is not None else None

    def _decode_key(self, raw_key: bytes) -> K:
        if not raw_key.startswith(self.root):
            raise DecodeError(
                f"Stored key is outside of '{self.namespace}' range", raw=raw_key
            )
        return self.key_codec.decode(raw_key[len(self.root) :])

    def range(
        self,
        storage: Storage,
        min: Bound[K] | None = None,
        max: Bound[K] | None = None,
    ) -> Iterator[tuple[K, V]]:
        """
        Yields decoded `(key, value)` pairs in ascending key order.

        Args:
            storage: Store to read from
            min: Optional lower bound (inclusive or exclusive)
            max: Optional upper bound (inclusive or exclusive)

        Raises:
            EncodeError: If a bound key cannot be encoded (raised on call)
            DecodeError: If a stored key or value cannot be decoded (raised while iterating)
            StoreAccessError: If the store fails (raised while iterating)
        """
        records = storage.range(self._low(min), self._high(max))
        logger.debug(
            "Opening range scan",
            extra={
                "namespace": self.namespace,
                "root_hash": redact_key(self.root),
                "has_min": min is not None,
                "has_max": max is not None,
            },
        )
        return ((self._decode_key(k), self.values.loads(v)) for k, v in records)

    def keys(
        self,
        storage: Storage,
        min: Bound[K] | None = None,
        max: Bound[K] | None = None,
    ) -> Iterator[K]:
        """Yields decoded keys in ascending order without decoding the values."""
        records = storage.range(self._low(min), self._high(max))
        return (self._decode_key(k) for k, _ in records)


class Prefix(KeyspaceView[S, V]):
    """
    The entries of a composite-keyed map sharing one prefix.
    Keys are yielded as their suffix only, since the prefix is fixed.
    """

    def __init__(self, map_: "Map[Any, V]", prefix: Any, codec: Composite[Any, S]) -> None:
        super().__init__(
            namespace=map_.namespace,
            root=map_.root + codec.prefix_bytes(prefix),
            key_codec=codec.suffix,
            values=map_.values,
        )
        self.prefix_value = prefix


class Map(KeyspaceView[K, V]):
    """
    A typed, ordered map stored under a namespace.

    Usage:
        BALANCES = Map("balances", Str(), int)
        BALANCES.save(storage, "alice", 10)
        BALANCES.load(storage, "alice")  # 10

        POSITIONS = Map("positions", Composite(Uint(8), Str()), int)
        for suffix, value in POSITIONS.prefix(1).range(storage):
            ...
    """

    def __init__(self, namespace: str, key_codec: KeyCodec[K], value_type: Any) -> None:
        super().__init__(
            namespace=namespace,
            root=length_prefixed(namespace.encode("utf-8")),
            key_codec=key_codec,
            values=ValueSerializer(value_type),
        )

    def save(self, storage: Storage, key: K, value: V) -> None:
        storage.set(self.raw_key(key), self.values.dumps(value))

    def may_load(self, storage: Storage, key: K) -> V | None:
        raw = storage.get(self.raw_key(key))
        if raw is None:
            return None
        return self.values.loads(raw)

    def load(self, storage: Storage, key: K) -> V:
        """
        Loads the value stored under `key`.

        Raises:
            EntryNotFoundError: If nothing is stored under `key`
        """
        raw = storage.get(self.raw_key(key))
        if raw is None:
            raise EntryNotFoundError(self.namespace, key)
        return self.values.loads(raw)

    def has(self, storage: Storage, key: K) -> bool:
        return storage.get(self.raw_key(key)) is not None

    def remove(self, storage: Storage, key: K) -> None:
        storage.remove(self.raw_key(key))

    def prefix(self, prefix: Any) -> Prefix[Any, V]:
        """
        Returns the view of the entries whose composite key starts with `prefix`.

        Raises:
            TypeError: If the map's keys are not composite
        """
        if not isinstance(self.key_codec, Composite):
            raise TypeError(
                f"Map '{self.namespace}' has {self.key_codec!r} keys, prefix views need Composite"
            )
        return Prefix(self, prefix, self.key_codec)
