"""
The JSON value model.

A ``Node`` holds exactly one of six variants (null, bool, number, string,
array, object). Containers own their children exclusively: every value stored
into a tree is converted into a fresh subtree, so trees never alias or cycle.
"""

import math
import numbers
import operator
import os
import re
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any
from typing import TypeVar

from ._config import Format
from ._errors import IndexOutOfRangeError
from ._errors import KeyNotFoundError
from ._errors import TypeMismatchError

T = TypeVar("T")

# Lone surrogates have no UTF-8 encoding, so no JSON text can carry them
SURROGATE = re.compile(r"[\ud800-\udfff]")


class Kind(Enum):
    """Variant tag of a node."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def _check_text(text: str) -> str:
    match = SURROGATE.search(text)
    if match is not None:
        msg = (
            f"lone surrogate {ord(match.group()):#06x} at index "
            f"{match.start()} cannot be stored in JSON text"
        )
        raise ValueError(msg)
    return text


def _to_float(value: numbers.Real | Decimal) -> float:
    try:
        return float(value)
    except OverflowError:
        # Integers beyond the double range saturate like Decimal does
        return math.inf if value > 0 else -math.inf


def _convert(value: Any) -> tuple[Kind, Any]:
    """Maps a native value onto a (kind, payload) pair, copying containers."""
    if isinstance(value, Node):
        return value._kind, _copy_payload(value._kind, value._value)
    if value is None:
        return Kind.NULL, None
    if isinstance(value, bool):
        return Kind.BOOL, value
    if isinstance(value, str):
        return Kind.STRING, _check_text(value)
    if isinstance(value, numbers.Real | Decimal):
        return Kind.NUMBER, _to_float(value)
    if isinstance(value, Mapping):
        members: dict[str, Node] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                msg = f"keys must be str, not {type(key).__name__}"
                raise TypeError(msg)
            members[_check_text(key)] = Node._make(*_convert(item))
        return Kind.OBJECT, members
    if isinstance(value, Iterable) and not isinstance(
        value, bytes | bytearray | memoryview
    ):
        return Kind.ARRAY, [Node._make(*_convert(item)) for item in value]

    msg = f"Object of type {type(value).__name__} is not JSON convertible"
    raise TypeError(msg)


def _copy_payload(kind: Kind, payload: Any) -> Any:
    if kind is Kind.ARRAY:
        return [
            Node._make(item._kind, _copy_payload(item._kind, item._value))
            for item in payload
        ]
    if kind is Kind.OBJECT:
        return {
            key: Node._make(item._kind, _copy_payload(item._kind, item._value))
            for key, item in payload.items()
        }
    return payload


class Node:
    """
    A single JSON value with typed accessors and auto-vivifying mutation.

    ``Node()`` is null. ``Node(value)`` converts booleans, numbers, strings,
    mappings (to objects) and other iterables (to arrays), recursively, so
    ``Node([[1, 2], [3, 4]])`` is a two-level array. All numbers are stored
    as ``float``; integers past the double range become infinities. Strings
    and keys holding lone surrogates raise ``ValueError``.

    String-keyed assignment turns a null node into an empty object first;
    any other non-object receiver raises ``TypeMismatchError``.
    """

    __slots__ = ("_kind", "_value")

    def __init__(self, value: Any = None) -> None:
        try:
            self._kind, self._value = _convert(value)
        except RecursionError as exc:
            msg = "Exceeded maximum recursion depth while converting value"
            raise ValueError(msg) from exc

    @classmethod
    def _make(cls, kind: Kind, payload: Any) -> "Node":
        """Wraps an already-owned payload without converting or copying."""
        node = object.__new__(cls)
        node._kind = kind
        node._value = payload
        return node

    @property
    def kind(self) -> Kind:
        return self._kind

    def _require(self, kind: Kind, action: str = "") -> None:
        if self._kind is not kind:
            raise TypeMismatchError(kind.value, self._kind.value, action)

    def _vivify(self, action: str) -> dict[str, "Node"]:
        """Returns the member dict, turning a null node into an object."""
        if self._kind is Kind.NULL:
            self._kind = Kind.OBJECT
            self._value = {}
        elif self._kind is not Kind.OBJECT:
            raise TypeMismatchError(
                Kind.OBJECT.value, self._kind.value, action
            )
        return self._value

    def _check_index(self, key: Any) -> int:
        self._require(Kind.ARRAY, "index")
        index = operator.index(key)
        if not 0 <= index < len(self._value):
            raise IndexOutOfRangeError(index, len(self._value))
        return index

    # -- Predicates --

    def is_null(self) -> bool:
        return self._kind is Kind.NULL

    def is_bool(self) -> bool:
        return self._kind is Kind.BOOL

    def is_number(self) -> bool:
        return self._kind is Kind.NUMBER

    def is_string(self) -> bool:
        return self._kind is Kind.STRING

    def is_array(self) -> bool:
        return self._kind is Kind.ARRAY

    def is_object(self) -> bool:
        return self._kind is Kind.OBJECT

    # -- Typed getters --

    def get_null(self) -> None:
        self._require(Kind.NULL)

    def get_bool(self) -> bool:
        self._require(Kind.BOOL)
        return self._value

    def get_number(self) -> float:
        self._require(Kind.NUMBER)
        return self._value

    def get_string(self) -> str:
        self._require(Kind.STRING)
        return self._value

    def get_array(self) -> list["Node"]:
        """Returns the live element list."""
        self._require(Kind.ARRAY)
        return self._value

    def get_object(self) -> dict[str, "Node"]:
        """Returns the live member dict, in insertion order."""
        self._require(Kind.OBJECT)
        return self._value

    # -- Lookup --

    def at(self, key: str | int) -> "Node":
        """
        Returns the child at ``key`` (object) or ``index`` (array).

        Never creates anything. Raises ``KeyNotFoundError`` or
        ``IndexOutOfRangeError`` when the child is absent.
        """
        if isinstance(key, str):
            self._require(Kind.OBJECT, "look up a key")
            try:
                return self._value[key]
            except KeyError:
                raise KeyNotFoundError(key) from None
        return self._value[self._check_index(key)]

    def __getitem__(self, key: str | int) -> "Node":
        if isinstance(key, str):
            child = self._value.get(key) if self.is_object() else None
            if child is None:
                _check_text(key)
                child = self._vivify("look up a key")[key] = Node()
            return child
        return self._value[self._check_index(key)]

    def __setitem__(self, key: str | int, value: Any) -> None:
        if isinstance(key, str):
            if self._kind not in (Kind.NULL, Kind.OBJECT):
                raise TypeMismatchError(
                    Kind.OBJECT.value, self._kind.value, "assign a key"
                )
            _check_text(key)
            child = Node(value)
            self._vivify("assign a key")[key] = child
        else:
            index = self._check_index(key)
            self._value[index] = Node(value)

    def contains(self, key: Any) -> bool:
        """Key presence for objects, element membership for arrays."""
        if self._kind is Kind.OBJECT:
            return isinstance(key, str) and key in self._value
        if self._kind is Kind.ARRAY:
            try:
                needle = Node(key)
            except (TypeError, ValueError):
                # Nothing stored can equal a value with no JSON form
                return False
            return needle in self._value
        raise TypeMismatchError("array or object", self._kind.value)

    __contains__ = contains

    def value_or(self, key: str, default: Any) -> Any:
        """
        Returns ``default`` if ``key`` is absent, else the stored value.

        The stored value is read with the accessor matching the type of
        ``default``; a present value of another variant raises
        ``TypeMismatchError``.
        """
        self._require(Kind.OBJECT, "look up a key")
        child = self._value.get(key)
        if child is None:
            return default
        if isinstance(default, Node):
            return child
        if default is None:
            return child.get_null()
        if isinstance(default, bool):
            return child.get_bool()
        if isinstance(default, numbers.Real | Decimal):
            return child.get_number()
        if isinstance(default, str):
            return child.get_string()
        if isinstance(default, list):
            return child.get_array()
        if isinstance(default, dict):
            return child.get_object()
        msg = f"unsupported default type {type(default).__name__}"
        raise TypeError(msg)

    # -- Containers --

    def size(self) -> int:
        if self._kind is Kind.ARRAY or self._kind is Kind.OBJECT:
            return len(self._value)
        raise TypeMismatchError("array or object", self._kind.value)

    __len__ = size

    def empty(self) -> bool:
        return self.size() == 0

    def __bool__(self) -> bool:
        # Every node is a value, even an empty container; use empty().
        return True

    def __iter__(self) -> Iterator[Any]:
        if self._kind is Kind.ARRAY or self._kind is Kind.OBJECT:
            return iter(self._value)
        raise TypeMismatchError("array or object", self._kind.value)

    def items(self) -> Iterable[tuple[str, "Node"]]:
        self._require(Kind.OBJECT)
        return self._value.items()

    # -- Fluent mutators --

    def set(self, key: str | int, value: Any) -> "Node":
        """Assigns like ``node[key] = value`` and returns the receiver."""
        self[key] = value
        return self

    def append(self, value: Any) -> "Node":
        """Appends to an array node and returns the receiver."""
        self._require(Kind.ARRAY, "append")
        self._value.append(Node(value))
        return self

    # -- Copying and comparison --

    def copy(self) -> "Node":
        """Returns a deep copy of the subtree."""
        try:
            payload = _copy_payload(self._kind, self._value)
        except RecursionError as exc:
            msg = "Exceeded maximum recursion depth while copying tree"
            raise ValueError(msg) from exc
        return Node._make(self._kind, payload)

    def __copy__(self) -> "Node":
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> "Node":
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._kind is other._kind and self._value == other._value

    __hash__ = None  # type: ignore[assignment]

    def to_python(self) -> Any:
        """Returns the tree as plain Python containers and scalars."""
        if self._kind is Kind.ARRAY:
            return [item.to_python() for item in self._value]
        if self._kind is Kind.OBJECT:
            return {key: item.to_python() for key, item in self._value.items()}
        return self._value

    # -- Serialization and mapping shortcuts --

    def to_string(self, format: Format = Format.PRETTY, **kwargs: Any) -> str:
        from ._serializer import serialize

        return serialize(self, format, **kwargs)

    def to_file(
        self,
        path: str | os.PathLike[str],
        format: Format = Format.PRETTY,
        **kwargs: Any,
    ) -> None:
        """Writes the serialized tree to ``path`` as UTF-8."""
        data = self.to_string(format, **kwargs).encode("utf-8")
        with open(path, "wb") as fp:
            fp.write(data)

    def to_struct(self, cls: type[T]) -> T:
        from ._reflect import to_struct

        return to_struct(cls, self)

    def __repr__(self) -> str:
        return f"Node({self.to_string(Format.MINIMIZED, allow_nan=True)})"
