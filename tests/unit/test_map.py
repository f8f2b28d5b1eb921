"""
Unit tests for typed maps and their keyspace views.
"""

import pytest
from pydantic import BaseModel

from keypage import Bound, Composite, Map, MemoryStorage, Str, Uint
from keypage.exceptions import DecodeError, EncodeError, EntryNotFoundError


class Position(BaseModel):
    owner: str
    amount: int


@pytest.mark.unit
class TestMapPointOperations:
    """Test save/load/remove on a Map."""

    def test_save_and_load(self, storage, flat_map) -> None:
        flat_map.save(storage, 2, "string-2")
        assert flat_map.load(storage, 2) == "string-2"

    def test_load_missing_raises(self, storage, flat_map) -> None:
        with pytest.raises(EntryNotFoundError) as exc_info:
            flat_map.load(storage, 9)
        assert exc_info.value.namespace == "test_map"
        assert exc_info.value.key == 9

    def test_may_load_and_has(self, storage, flat_map) -> None:
        assert flat_map.may_load(storage, 1) is None
        assert flat_map.has(storage, 1) is False
        flat_map.save(storage, 1, "one")
        assert flat_map.may_load(storage, 1) == "one"
        assert flat_map.has(storage, 1) is True

    def test_remove(self, storage, flat_map) -> None:
        flat_map.save(storage, 1, "one")
        flat_map.remove(storage, 1)
        assert flat_map.may_load(storage, 1) is None

    def test_pydantic_model_values(self, storage) -> None:
        positions = Map("positions", Str(), Position)
        positions.save(storage, "p1", Position(owner="alice", amount=3))
        assert positions.load(storage, "p1") == Position(owner="alice", amount=3)

    def test_value_type_mismatch_is_decode_error(self, storage) -> None:
        Map("shared", Str(), str).save(storage, "k", "not a number")
        with pytest.raises(DecodeError, match="does not match"):
            Map("shared", Str(), int).load(storage, "k")

    def test_wrong_value_type_fails_on_save(self, storage) -> None:
        counters = Map("counters", Str(), int)
        with pytest.raises(EncodeError):
            counters.save(storage, "k", "not a number")
        assert not counters.has(storage, "k")

    def test_key_out_of_range(self, storage, flat_map) -> None:
        with pytest.raises(EncodeError):
            flat_map.save(storage, 300, "too big")

    def test_namespaces_are_isolated(self, storage) -> None:
        first = Map("first", Uint(8), str)
        second = Map("second", Uint(8), str)
        first.save(storage, 1, "a")
        second.save(storage, 1, "b")
        assert [k for k, _ in first.range(storage)] == [1]
        assert first.load(storage, 1) == "a"
        assert second.load(storage, 1) == "b"


@pytest.mark.unit
class TestMapRange:
    """Test full-map range scans."""

    def test_range_ascending(self, seeded_flat, flat_map) -> None:
        entries = list(flat_map.range(seeded_flat))
        assert [k for k, _ in entries] == list(range(100))
        assert entries[42] == (42, "string-42")

    def test_range_with_bounds(self, seeded_flat, flat_map) -> None:
        keys = list(flat_map.keys(seeded_flat, min=Bound.excluding(5), max=Bound.including(8)))
        assert keys == [6, 7, 8]

    def test_keys_do_not_decode_values(self, storage) -> None:
        loose = Map("shared", Uint(8), str)
        strict = Map("shared", Uint(8), int)
        loose.save(storage, 1, "not a number")
        assert list(strict.keys(storage)) == [1]
        with pytest.raises(DecodeError):
            list(strict.range(storage))

    def test_range_is_lazy(self, seeded_flat, flat_map) -> None:
        scan = flat_map.range(seeded_flat)
        assert next(scan) == (0, "string-0")
        assert next(scan) == (1, "string-1")

    def test_empty_map(self, storage, flat_map) -> None:
        assert list(flat_map.range(storage)) == []


@pytest.mark.unit
class TestPrefixView:
    """Test prefix-restricted views of composite-keyed maps."""

    def test_prefix_yields_suffixes_only(self, seeded_prefixed, prefixed_map) -> None:
        keys = list(prefixed_map.prefix(1).keys(seeded_prefixed))
        assert keys == list(range(100))

    def test_prefix_isolation(self, seeded_prefixed, prefixed_map) -> None:
        values = [v for _, v in prefixed_map.prefix(1).range(seeded_prefixed)]
        assert all(v.startswith("string-") for v in values)
        assert [v for _, v in prefixed_map.prefix(2).range(seeded_prefixed)] == [
            f"after-{i}" for i in range(5)
        ]

    def test_missing_prefix_is_empty(self, seeded_prefixed, prefixed_map) -> None:
        assert list(prefixed_map.prefix(7).range(seeded_prefixed)) == []

    def test_prefix_with_bound(self, seeded_prefixed, prefixed_map) -> None:
        keys = list(prefixed_map.prefix(1).keys(seeded_prefixed, min=Bound.excluding(97)))
        assert keys == [98, 99]

    def test_full_range_of_composite_map(self, seeded_prefixed, prefixed_map) -> None:
        keys = list(prefixed_map.keys(seeded_prefixed))
        assert keys[:5] == [(0, i) for i in range(5)]
        assert keys[5] == (1, 0)
        assert keys[-1] == (2, 4)
        assert len(keys) == 110

    def test_string_prefixes_do_not_overlap(self) -> None:
        storage = MemoryStorage()
        rooms = Map("rooms", Composite(Str(), Uint(8)), str)
        rooms.save(storage, ("ab", 1), "short")
        rooms.save(storage, ("abc", 1), "long")
        assert list(rooms.prefix("ab").range(storage)) == [(1, "short")]

    def test_prefix_requires_composite_keys(self, flat_map) -> None:
        with pytest.raises(TypeError, match="prefix views need Composite"):
            flat_map.prefix(1)
