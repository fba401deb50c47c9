"""
Separate chaining hash table

Each bucket holds a singly linked chain of entries. New keys are prepended to the chain of their bucket,
so within a bucket the most recently inserted key comes first. The table doubles its capacity when the
number of keys divided by the capacity exceeds the load factor after inserting a new key.

Iteration (keys, values, entries, for_each) walks the buckets in index order and each chain from head to
tail. This is NOT insertion order, and it changes when the table is resized.

The table is not thread safe. Callers sharing a table between threads should guard every call with a lock.
"""

from typing import Callable, Generic, Iterator, Optional, TypeVar

from metacache.errors import InvalidKeyError
from metacache.hashing import (
    EqualsFunction,
    HashFunction,
    KeySerializer,
    bucket_index,
    canonical_json,
    default_equals,
)

K = TypeVar("K")
V = TypeVar("V")

DEFAULT_CAPACITY = 16
DEFAULT_LOAD_FACTOR = 0.75
MIN_CAPACITY = 1
RESIZE_MULTIPLIER = 2


class _Entry(Generic[K, V]):
    __slots__ = ("key", "value", "next")

    def __init__(self, key: K, value: V, next: "Optional[_Entry[K, V]]" = None):
        self.key = key
        self.value = value
        self.next = next

    def __repr__(self) -> str:
        return f"_Entry(key={self.key!r}, value={self.value!r})"


class HashTable(Generic[K, V]):
    """
    Key-value table with separate chaining.

    Note that by default keys only match if they have exactly the same type: unlike a dict,
    1, 1.0 and True are three different keys. Pass equals_function (and a matching hash_function)
    to get plain == semantics.
    """

    def __init__(
        self,
        initial_capacity: int = DEFAULT_CAPACITY,
        load_factor: float = DEFAULT_LOAD_FACTOR,
        hash_function: Optional[HashFunction] = None,
        equals_function: Optional[EqualsFunction] = None,
        key_serializer: Optional[KeySerializer] = None,
    ):
        """
        :param initial_capacity: number of buckets to start with (at least 1)
        :param load_factor: grow when size / capacity exceeds this ratio
        :param hash_function: custom key -> int function, the default hashes by key kind (see metacache.hashing)
        :param equals_function: custom key equality, the default is identity or same-type equality
        :param key_serializer: turns structured keys (not bool, int, float or str) into text for default hashing
        """
        if not load_factor > 0:
            raise ValueError(f"Load factor should be positive, got {load_factor}")
        self._capacity = max(MIN_CAPACITY, int(initial_capacity))
        self._load_factor = load_factor
        self._hash_function = hash_function
        self._equals = equals_function or default_equals
        self._key_serializer = key_serializer or canonical_json
        self._buckets: list[Optional[_Entry[K, V]]] = [None] * self._capacity
        self._size = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def load_factor(self) -> float:
        return self._load_factor

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"HashTable(size={self._size}, capacity={self._capacity})"

    def set(self, key: K, value: V) -> None:
        """
        Store value under key, overwriting the value of an equal key if present
        :raises InvalidKeyError: if key is None
        """
        if key is None:
            raise InvalidKeyError("Key cannot be None")
        index = self._index(key)
        entry = self._find_in_bucket(index, key)
        if entry is not None:
            entry.value = value
            return
        self._buckets[index] = _Entry(key, value, self._buckets[index])
        self._size += 1
        if self._size / self._capacity > self._load_factor:
            self._resize(self._capacity * RESIZE_MULTIPLIER)

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        entry = self._find(key)
        return default if entry is None else entry.value

    def has(self, key: K) -> bool:
        return self._find(key) is not None

    def delete(self, key: K) -> bool:
        """Remove key from the table, returning whether it was present"""
        index = self._index(key)
        previous = None
        entry = self._buckets[index]
        while entry is not None:
            if self._equals(entry.key, key):
                if previous is None:
                    self._buckets[index] = entry.next
                else:
                    previous.next = entry.next
                self._size -= 1
                return True
            previous, entry = entry, entry.next
        return False

    def clear(self) -> None:
        """Remove all entries. The current capacity is kept."""
        self._buckets = [None] * self._capacity
        self._size = 0

    def keys(self) -> list[K]:
        return [entry.key for entry in self._walk()]

    def values(self) -> list[V]:
        return [entry.value for entry in self._walk()]

    def entries(self) -> list[tuple[K, V]]:
        return [(entry.key, entry.value) for entry in self._walk()]

    def for_each(self, visitor: Callable[[V, K], object]) -> None:
        for entry in self._walk():
            visitor(entry.value, entry.key)

    def _index(self, key: K) -> int:
        return bucket_index(key, self._capacity, self._hash_function, self._key_serializer)

    def _find(self, key: K) -> Optional[_Entry[K, V]]:
        return self._find_in_bucket(self._index(key), key)

    def _find_in_bucket(self, index: int, key: K) -> Optional[_Entry[K, V]]:
        entry = self._buckets[index]
        while entry is not None:
            if self._equals(entry.key, key):
                return entry
            entry = entry.next
        return None

    def _walk(self) -> Iterator[_Entry[K, V]]:
        for head in self._buckets:
            entry = head
            while entry is not None:
                yield entry
                entry = entry.next

    def _resize(self, new_capacity: int) -> None:
        # Rehash into a new bucket array and only swap it in when all entries are placed,
        # so a failing hash function leaves the table as it was
        capacity = max(MIN_CAPACITY, new_capacity)
        buckets: list[Optional[_Entry[K, V]]] = [None] * capacity
        for entry in self._walk():
            index = bucket_index(entry.key, capacity, self._hash_function, self._key_serializer)
            buckets[index] = _Entry(entry.key, entry.value, buckets[index])
        self._buckets = buckets
        self._capacity = capacity
