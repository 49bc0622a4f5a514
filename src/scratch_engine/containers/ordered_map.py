"""Insertion-ordered key/value container with positional access."""

from __future__ import annotations

from typing import (
    Dict,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
    overload,
)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
D = TypeVar("D")

_MISSING = object()


class OrderedMap(Generic[K, V]):
    """Ordered mapping backed by a pair list plus a key -> slot index.

    Iteration always follows positional order: insertion order, or the order
    left behind by explicit positional mutations (``replace_at``,
    ``pop_at``). Key lookups stay O(1) on average.
    """

    __slots__ = ("_pairs", "_slots")

    def __init__(self, pairs: Iterable[Tuple[K, V]] = ()) -> None:
        self._pairs: List[Tuple[K, V]] = []
        self._slots: Dict[K, int] = {}
        for key, value in pairs:
            self[key] = value

    # -- mapping protocol -------------------------------------------------

    def __len__(self) -> int:
        return len(self._pairs)

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    def __iter__(self) -> Iterator[K]:
        return (key for key, _ in self._pairs)

    def __reversed__(self) -> Iterator[K]:
        return (key for key, _ in reversed(self._pairs))

    def __getitem__(self, key: K) -> V:
        return self._pairs[self._slots[key]][1]

    def __setitem__(self, key: K, value: V) -> None:
        slot = self._slots.get(key)
        if slot is None:
            self._slots[key] = len(self._pairs)
            self._pairs.append((key, value))
        else:
            self._pairs[slot] = (key, value)

    def __delitem__(self, key: K) -> None:
        slot = self._slots[key]
        self.pop_at(slot)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedMap):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        body = ", ".join(f"{key!r}: {value!r}" for key, value in self._pairs)
        return f"OrderedMap({{{body}}})"

    @overload
    def get(self, key: K) -> Optional[V]: ...

    @overload
    def get(self, key: K, default: D) -> V | D: ...

    def get(self, key, default=None):
        slot = self._slots.get(key)
        if slot is None:
            return default
        return self._pairs[slot][1]

    def keys(self) -> List[K]:
        return [key for key, _ in self._pairs]

    def values(self) -> List[V]:
        return [value for _, value in self._pairs]

    def items(self) -> List[Tuple[K, V]]:
        return list(self._pairs)

    def set(self, key: K, value: V) -> None:
        self[key] = value

    def remove(self, key: K) -> Optional[V]:
        """Drop ``key`` if present and return its value."""

        slot = self._slots.get(key)
        if slot is None:
            return None
        return self.pop_at(slot)[1]

    def pop(self, key: K, default: object = _MISSING) -> V:
        slot = self._slots.get(key)
        if slot is None:
            if default is _MISSING:
                raise KeyError(key)
            return default  # type: ignore[return-value]
        return self.pop_at(slot)[1]

    def clear(self) -> None:
        self._pairs.clear()
        self._slots.clear()

    # -- positional access ------------------------------------------------

    def index_of(self, key: K) -> Optional[int]:
        return self._slots.get(key)

    def entry_at(self, index: int) -> Optional[Tuple[K, V]]:
        if 0 <= index < len(self._pairs):
            return self._pairs[index]
        return None

    def key_at(self, index: int) -> Optional[K]:
        entry = self.entry_at(index)
        return entry[0] if entry else None

    def value_at(self, index: int) -> Optional[V]:
        entry = self.entry_at(index)
        return entry[1] if entry else None

    def replace_at(self, index: int, key: K, value: V) -> None:
        """Overwrite the slot at ``index``, re-keying it when ``key`` changes."""

        if not 0 <= index < len(self._pairs):
            raise IndexError(f"index {index} out of range for {len(self._pairs)} entries")
        old_key = self._pairs[index][0]
        if key != old_key:
            existing = self._slots.get(key)
            if existing is not None:
                raise KeyError(f"key {key!r} already stored at index {existing}")
            del self._slots[old_key]
            self._slots[key] = index
        self._pairs[index] = (key, value)

    def pop_at(self, index: int) -> Tuple[K, V]:
        if not 0 <= index < len(self._pairs):
            raise IndexError(f"index {index} out of range for {len(self._pairs)} entries")
        key, value = self._pairs.pop(index)
        del self._slots[key]
        for later in range(index, len(self._pairs)):
            self._slots[self._pairs[later][0]] = later
        return key, value

    def first(self) -> Optional[Tuple[K, V]]:
        return self.entry_at(0)

    def last(self) -> Optional[Tuple[K, V]]:
        return self.entry_at(len(self._pairs) - 1)


__all__ = ["OrderedMap"]
