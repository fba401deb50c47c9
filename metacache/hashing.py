"""
Hash and equality functions for the metacache hash table

Keys fall into a closed set of kinds, and every kind has its own hash:
- integer keys (int and float, but not bool) are truncated to a signed 32 bit integer and bit-mixed
- text keys use a multiplicative rolling hash (seed 5381, multiplier 33) over their UTF-16 code units
- boolean keys map to two fixed constants
- all other keys are structured: they are turned into text by a key serializer and then hashed as text

All default hashes are unsigned 32 bit integers.
"""

import json
import math
from enum import Enum
from typing import Any, Callable, Optional

HashFunction = Callable[[Any], int]
EqualsFunction = Callable[[Any, Any], bool]
KeySerializer = Callable[[Any], str]

UINT32_MASK = 0xFFFFFFFF
HASH_SEED = 5381
HASH_MULTIPLIER = 33
TRUE_HASH = 1231
FALSE_HASH = 1237


class KeyKind(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    TEXT = "text"
    STRUCTURED = "structured"


def key_kind(key: Any) -> KeyKind:
    # bool is a subclass of int, so it has to be checked first
    if isinstance(key, bool):
        return KeyKind.BOOLEAN
    if isinstance(key, (int, float)):
        return KeyKind.INTEGER
    if isinstance(key, str):
        return KeyKind.TEXT
    return KeyKind.STRUCTURED


def to_int32(value: int) -> int:
    """Wrap an arbitrary integer to the signed 32 bit range"""
    value &= UINT32_MASK
    return value - (1 << 32) if value >= (1 << 31) else value


def hash_number(num: int | float) -> int:
    if isinstance(num, float):
        num = int(num) if math.isfinite(num) else 0
    n = num & UINT32_MASK
    return (n ^ (n >> 16)) & UINT32_MASK


def hash_string(text: str) -> int:
    """Rolling hash over the UTF-16 code units of text, so characters outside the BMP count as two units"""
    data = text.encode("utf-16-le", errors="surrogatepass")
    h = HASH_SEED
    for i in range(0, len(data), 2):
        h = (h * HASH_MULTIPLIER + int.from_bytes(data[i:i + 2], "little")) & UINT32_MASK
    return h


def hash_boolean(flag: bool) -> int:
    return TRUE_HASH if flag else FALSE_HASH


def canonical_json(key: Any) -> str:
    """
    Default key serializer for structured keys: compact JSON with sorted keys,
    or the textual form of the key if it cannot be represented as JSON
    """
    try:
        return json.dumps(key, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return str(key)


def default_hash(key: Any, key_serializer: KeySerializer = canonical_json) -> int:
    kind = key_kind(key)
    if kind == KeyKind.BOOLEAN:
        return hash_boolean(key)
    if kind == KeyKind.INTEGER:
        return hash_number(key)
    if kind == KeyKind.TEXT:
        return hash_string(key)
    return hash_string(key_serializer(key))


def default_equals(a: Any, b: Any) -> bool:
    """Identity, or equal values of exactly the same type (so 1, 1.0 and True are different keys)"""
    return a is b or (type(a) is type(b) and a == b)


def bucket_index(
    key: Any,
    capacity: int,
    hash_function: Optional[HashFunction] = None,
    key_serializer: KeySerializer = canonical_json,
) -> int:
    """
    Compute the bucket for this key in a table with the given capacity.
    Custom hash functions can return any integer, it is wrapped to 32 bits and made non-negative.
    """
    if hash_function is not None:
        h = abs(to_int32(hash_function(key)))
    else:
        h = default_hash(key, key_serializer)
    return h % capacity
