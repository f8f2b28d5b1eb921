"""
Range bounds over logical keys and over raw store keys.

A pagination cursor always becomes an exclusive lower bound: resubmitting the
`next` key of a page starts strictly after it, so the last item of a page is
never emitted twice.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K")


@dataclass(frozen=True)
class RawBound:
    """A bound over encoded keys as seen by the store."""

    key: bytes
    inclusive: bool

    def admits_low(self, key: bytes) -> bool:
        """True if `key` lies at or above this lower bound."""
        return key >= self.key if self.inclusive else key > self.key

    def admits_high(self, key: bytes) -> bool:
        """True if `key` lies at or below this upper bound."""
        return key <= self.key if self.inclusive else key < self.key


@dataclass(frozen=True)
class Bound(Generic[K]):
    """A bound over logical keys, encoded lazily when a scan opens."""

    key: K
    inclusive: bool

    @classmethod
    def including(cls, key: K) -> "Bound[K]":
        return cls(key=key, inclusive=True)

    @classmethod
    def excluding(cls, key: K) -> "Bound[K]":
        return cls(key=key, inclusive=False)

    def to_raw(self, encode: Callable[[K], bytes]) -> RawBound:
        return RawBound(key=encode(self.key), inclusive=self.inclusive)


def resolve_start(start: K | None) -> Bound[K] | None:
    """
    Converts an optional pagination start key into a scan lower bound.

    None means "from the beginning of the keyspace". Any other value becomes an
    exclusive bound. A malformed key is not detected here: it fails later in
    the key codec with an EncodeError.
    """
    if start is None:
        return None
    return Bound.excluding(start)
