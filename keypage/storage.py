"""
Raw ordered key-value storage.

The pagination engine only needs point lookups and ascending range scans over
encoded keys. `Storage` is the protocol a backend implements; `MemoryStorage`
is the in-process backend used by tests and local tooling. The DynamoDB
backend lives in `keypage.dynamo`.
"""

from bisect import bisect_left, bisect_right, insort
from collections.abc import Iterator
from typing import Protocol

from ._logging import logger
from .bound import RawBound

Record = tuple[bytes, bytes]


class Storage(Protocol):
    """Ordered byte-keyed storage. Range scans are ascending only."""

    def get(self, key: bytes) -> bytes | None: ...

    def set(self, key: bytes, value: bytes) -> None: ...

    def remove(self, key: bytes) -> None: ...

    def range(self, start: RawBound | None, end: RawBound | None) -> Iterator[Record]: ...


class MemoryStorage:
    """
    In-memory ordered storage.

    Keys are kept in a sorted list next to a dict of values, so point reads are
    O(1) and range scans start with a binary search.
    """

    def __init__(self) -> None:
        self._keys: list[bytes] = []
        self._data: dict[bytes, bytes] = {}

    def __len__(self) -> int:
        return len(self._keys)

    def get(self, key: bytes) -> bytes | None:
        return self._data.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        if key not in self._data:
            insort(self._keys, key)
        self._data[key] = value

    def remove(self, key: bytes) -> None:
        if self._data.pop(key, None) is None:
            return
        del self._keys[bisect_left(self._keys, key)]

    def range(self, start: RawBound | None, end: RawBound | None) -> Iterator[Record]:
        logger.debug(
            "Opening memory range scan",
            extra={"bounded_start": start is not None, "bounded_end": end is not None},
        )
        return self._iter_range(start, end)

    def _iter_range(self, start: RawBound | None, end: RawBound | None) -> Iterator[Record]:
        if start is None:
            pos = 0
        elif start.inclusive:
            pos = bisect_left(self._keys, start.key)
        else:
            pos = bisect_right(self._keys, start.key)

        while pos < len(self._keys):
            key = self._keys[pos]
            if end is not None and not end.admits_high(key):
                return
            yield key, self._data[key]
            # Re-seek past the last yielded key; the list may change between steps
            pos = bisect_right(self._keys, key)
