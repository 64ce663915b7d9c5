"""
Test data generators for jtree benchmarks.

Builds plain Python documents of different shapes and renders them with
jtree's minimized serializer:
- Different sizes (small/large)
- Different shapes (flat/nested/matrix)
- String-heavy content with escape sequences and non-ASCII text
"""

import random
import string
from collections.abc import Callable
from typing import Any

import jtree

# Fixed seed so every run benchmarks the same documents
_SEED = 8259
_ESCAPE_PROBABILITY = 0.3
_ESCAPES = ['"', "\\", "/", "\b", "\f", "\n", "\r", "\t", "\x01"]
_NON_ASCII = "éßøπжक中😀"


def generate_test_value(data_type: str) -> Any:
    """Returns the plain Python document for ``data_type``."""
    generators: dict[str, Callable[[random.Random], Any]] = {
        "small_object": _small_object,
        "large_object": _large_object,
        "mixed_array": _mixed_array,
        "nested_structure": _nested_structure,
        "number_matrix": _number_matrix,
        "string_heavy": _string_heavy,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type](random.Random(_SEED))


def generate_test_data(data_type: str) -> str:
    """Returns ``data_type`` as minimized JSON text."""
    return jtree.serialize(
        generate_test_value(data_type), jtree.Format.MINIMIZED
    )


def _small_object(rng: random.Random) -> dict[str, Any]:
    """A small object (< 1KB) with basic key-value pairs."""
    return {
        "id": 12345,
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }


def _timestamp(rng: random.Random) -> str:
    return (
        f"2024-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}"
        f"T{rng.randint(0, 23):02d}:{rng.randint(0, 59):02d}:00Z"
    )


def _large_object(rng: random.Random) -> dict[str, Any]:
    """A large object (> 10KB) shaped like an account export."""
    return {
        "user_id": rng.randint(1000000, 9999999),
        "profile": {
            "first_name": _random_string(rng, 10),
            "last_name": _random_string(rng, 12),
            "email": f"{_random_string(rng, 8)}@example.com",
            "address": {
                "street": f"{rng.randint(1, 9999)} Main St",
                "city": _random_string(rng, 12),
                "zip": f"{rng.randint(10000, 99999)}",
                "country": "US",
            },
            "notifications": {
                "email": rng.choice([True, False]),
                "push": rng.choice([True, False]),
            },
        },
        "transactions": [
            {
                "id": f"txn_{i:06d}",
                "amount": round(rng.uniform(1.0, 1000.0), 2),
                "currency": rng.choice(["USD", "EUR", "GBP", "JPY"]),
                "timestamp": _timestamp(rng),
                "description": f"Payment for {_random_string(rng, 20)}",
                "status": rng.choice(["completed", "pending", "failed"]),
            }
            for i in range(50)
        ],
        "activity_log": [
            {
                "timestamp": _timestamp(rng),
                "action": rng.choice(["login", "logout", "purchase"]),
                "user_agent": f"Mozilla/5.0 ({_random_string(rng, 20)})",
            }
            for _ in range(30)
        ],
    }


def _mixed_array(rng: random.Random) -> list[Any]:
    """An array mixing every scalar kind with small objects."""
    makers: list[Callable[[int], Any]] = [
        lambda i: rng.randint(-1000, 1000),
        lambda i: round(rng.uniform(-100.0, 100.0), 3),
        lambda i: _random_string(rng, rng.randint(5, 30)),
        lambda i: rng.choice([True, False]),
        lambda i: None,
        lambda i: {"index": i, "score": round(rng.uniform(0, 100), 2)},
    ]
    return [rng.choice(makers)(i) for i in range(200)]


def _nested_structure(rng: random.Random) -> dict[str, Any]:
    """An object tree eight levels deep."""

    def create(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(rng, 10)}
        return {
            "level": depth,
            "items": [create(depth - 1) for _ in range(3)],
            "nested": create(depth - 1) if depth > 4 else None,
        }

    return create(8)


def _number_matrix(rng: random.Random) -> dict[str, Any]:
    """A 3-dimensional array of doubles."""
    return {
        "array_3D": [
            [[rng.uniform(-1e6, 1e6) for _ in range(10)] for _ in range(10)]
            for _ in range(10)
        ]
    }


def _string_heavy(rng: random.Random) -> dict[str, Any]:
    """Strings that need escaping, plus non-ASCII text."""

    def create_escaped_string() -> str:
        chars = []
        for _ in range(50):
            if rng.random() < _ESCAPE_PROBABILITY:
                chars.append(rng.choice(_ESCAPES))
            else:
                chars.append(rng.choice(string.ascii_letters + " "))
        return "".join(chars)

    return {
        "strings": [create_escaped_string() for _ in range(100)],
        "unicode": ["".join(rng.choices(_NON_ASCII, k=20)) for _ in range(50)],
        "paths": {
            f"key_{i}": f"C:\\Users\\{_random_string(rng, 8)}\\file_{i}.txt"
            for i in range(20)
        },
    }


def _random_string(rng: random.Random, length: int) -> str:
    return "".join(rng.choices(string.ascii_letters, k=length))
