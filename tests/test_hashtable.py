import pytest

from metacache.errors import InvalidKeyError
from metacache.hashtable import HashTable


def test_set_get():
    table = HashTable()
    table.set("key1", 100)
    table.set("key2", 200)
    assert table.get("key1") == 100
    assert table.get("key2") == 200
    assert table.size == 2


def test_absent_keys():
    table = HashTable()
    assert table.get("nonexistent") is None
    assert table.get("nonexistent", -1) == -1
    assert not table.has("nonexistent")
    assert "nonexistent" not in table


def test_none_values_are_present():
    table = HashTable()
    table.set("k", None)
    assert table.has("k")
    assert table.get("k", "default") is None


def test_overwrite_keeps_size():
    table = HashTable()
    table.set("a", 1)
    table.set("b", 2)
    table.set("a", 3)
    assert dict(table.entries()) == {"a": 3, "b": 2}
    assert len(table.entries()) == 2
    assert table.size == 2


def test_none_key_is_invalid():
    table = HashTable()
    with pytest.raises(InvalidKeyError):
        table.set(None, 1)
    assert table.size == 0


def test_delete():
    table = HashTable()
    table.set("key1", 100)
    table.set("key2", 200)
    assert table.delete("key1")
    assert not table.delete("nonexistent")
    assert not table.delete("key1")
    assert not table.has("key1")
    assert table.has("key2")
    assert table.size == 1


def test_clear_keeps_capacity():
    table = HashTable(initial_capacity=2)
    for i in range(10):
        table.set(f"key{i}", i)
    capacity = table.capacity
    assert capacity > 2
    table.clear()
    assert table.size == 0
    assert table.capacity == capacity
    assert not any(table.has(f"key{i}") for i in range(10))
    assert table.keys() == []


def test_collections():
    table = HashTable()
    for k, v in {"a": 1, "b": 2, "c": 3}.items():
        table.set(k, v)
    assert sorted(table.keys()) == ["a", "b", "c"]
    assert sorted(table.values()) == [1, 2, 3]
    assert sorted(table.entries()) == [("a", 1), ("b", 2), ("c", 3)]
    assert sorted(table) == ["a", "b", "c"]
    assert len(table) == 3
    visited = []
    table.for_each(lambda value, key: visited.append((key, value)))
    assert visited == table.entries()


def test_snapshots_are_independent():
    table = HashTable()
    table.set("a", 1)
    keys = table.keys()
    table.set("b", 2)
    assert keys == ["a"]


def test_chain_is_most_recent_first():
    table = HashTable(initial_capacity=1, load_factor=10, hash_function=lambda k: 0)
    for key in "abc":
        table.set(key, key.upper())
    assert table.keys() == ["c", "b", "a"]
    assert table.values() == ["C", "B", "A"]


def test_iteration_in_bucket_order():
    table = HashTable(initial_capacity=4, load_factor=10, hash_function=lambda k: k)
    for key in [3, 1, 2, 0, 5]:
        table.set(key, str(key))
    assert table.keys() == [0, 5, 1, 2, 3]


def test_capacity_floor():
    assert HashTable(initial_capacity=0).capacity == 1
    assert HashTable(initial_capacity=-5).capacity == 1
    table = HashTable(initial_capacity=0)
    table.set("a", 1)
    table.set("b", 2)
    assert table.get("a") == 1
    assert table.get("b") == 2


def test_invalid_load_factor():
    with pytest.raises(ValueError):
        HashTable(load_factor=0)


def test_resize_when_load_factor_exceeded():
    table = HashTable(initial_capacity=4, load_factor=0.75)
    for i in range(3):
        table.set(i, i)
    # 3 / 4 is not more than 0.75
    assert table.capacity == 4
    table.set(3, 3)
    assert table.capacity == 8
    assert all(table.get(i) == i for i in range(4))


def test_overwrite_does_not_resize():
    table = HashTable(initial_capacity=2, load_factor=1.0)
    table.set("a", 1)
    table.set("b", 2)
    assert table.capacity == 2
    table.set("a", 3)
    table.set("b", 4)
    assert table.capacity == 2
    assert table.size == 2


def test_resize_preserves_mappings():
    table = HashTable(initial_capacity=1)
    expected = {f"uploads/file{i}.txt": i * 10 for i in range(200)}
    for k, v in expected.items():
        table.set(k, v)
    assert table.capacity >= 200 / 0.75
    assert table.size == 200
    assert all(table.get(k) == v for k, v in expected.items())
    assert dict(table.entries()) == expected


def test_collisions():
    table = HashTable(initial_capacity=2)
    keys = ["alpha", "beta", "gamma", "delta", "epsilon"]
    for i, key in enumerate(keys):
        table.set(key, i)
    assert [table.get(k) for k in keys] == list(range(5))


@pytest.mark.parametrize("victim", ["a", "b", "c", "d"])
def test_delete_from_chain(victim):
    # every key hashes to the same bucket, so they form one chain d -> c -> b -> a
    table = HashTable(initial_capacity=2, load_factor=100, hash_function=lambda k: 1)
    for i, key in enumerate("abcd"):
        table.set(key, i)
    assert table.delete(victim)
    assert table.size == 3
    assert not table.has(victim)
    for i, key in enumerate("abcd"):
        if key != victim:
            assert table.get(key) == i


def test_delete_middle_after_resizes():
    table = HashTable(initial_capacity=2, hash_function=lambda k: 0)
    for i, key in enumerate(["k1", "k2", "k3", "k4"]):
        table.set(key, i)
    assert table.delete("k2")
    assert table.get("k1") == 0
    assert table.get("k3") == 2
    assert table.get("k4") == 3
    assert table.size == 3


def test_size_counts_distinct_keys():
    table = HashTable(initial_capacity=2)
    for key in ["a", "b", "a", "c", "b", "d"]:
        table.set(key, key)
    assert table.size == 4
    table.delete("a")
    table.delete("a")
    table.delete("x")
    assert table.size == 3
    assert table.size == len(table.keys())


def test_mixed_key_kinds():
    table = HashTable()
    table.set(1, "int")
    table.set(1.0, "float")
    table.set(True, "bool")
    table.set("1", "str")
    assert table.size == 4
    assert table.get(1) == "int"
    assert table.get(1.0) == "float"
    assert table.get(True) == "bool"
    assert table.get("1") == "str"


def test_structured_keys():
    table = HashTable()
    table.set(("uploads", "a.txt"), 1)
    table.set({"folder": "docs", "name": "b.txt"}, 2)
    assert table.get(("uploads", "a.txt")) == 1
    assert table.get({"name": "b.txt", "folder": "docs"}) == 2
    assert table.get(("uploads", "b.txt")) is None


def test_custom_hash_and_equals():
    table = HashTable(hash_function=lambda k: len(k), equals_function=lambda a, b: a.lower() == b.lower())
    table.set("Readme.MD", 1)
    assert table.get("README.md") == 1
    table.set("readme.md", 2)
    assert table.size == 1
    assert table.get("Readme.MD") == 2


def test_custom_key_serializer():
    calls = []

    def serializer(key):
        calls.append(key)
        return "/".join(key)

    table = HashTable(key_serializer=serializer)
    table.set(("uploads", "a.txt"), 1)
    assert table.get(("uploads", "a.txt")) == 1
    assert calls == [("uploads", "a.txt"), ("uploads", "a.txt")]


def test_failing_hash_does_not_change_table():
    def hash_function(key):
        if key == "bad":
            raise ValueError("cannot hash")
        return len(key)

    table = HashTable(hash_function=hash_function)
    table.set("good", 1)
    with pytest.raises(ValueError):
        table.set("bad", 2)
    assert table.size == 1
    assert table.keys() == ["good"]


def test_failing_hash_during_resize():
    broken = False

    def hash_function(key):
        if broken and key == "a":
            raise ValueError("cannot hash")
        return len(key)

    table = HashTable(initial_capacity=2, load_factor=1.0, hash_function=hash_function)
    table.set("a", 1)
    table.set("bb", 2)
    broken = True
    with pytest.raises(ValueError):
        table.set("ccc", 3)
    broken = False
    assert table.capacity == 2
    assert table.size == 3
    assert {k: table.get(k) for k in ["a", "bb", "ccc"]} == {"a": 1, "bb": 2, "ccc": 3}


def test_integral_float_keys_are_distinct():
    table = HashTable()
    table.set(2, "int")
    assert table.get(2.0) is None
    assert not table.has(2.0)

    # == semantics can be opted into
    table = HashTable(hash_function=lambda k: int(k), equals_function=lambda a, b: a == b)
    table.set(2, "int")
    assert table.get(2.0) == "int"
