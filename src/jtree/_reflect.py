"""
Mapping between node trees and declared aggregate types.

A type declares an ordered list of fields either by being a dataclass or by
being registered with ``@reflect``. Each field becomes a ``FieldDescriptor``
(name, annotation, getter, setter); conversion in both directions walks those
descriptors and recurses through containers and nested reflected types.
"""

import collections.abc
import dataclasses
import numbers
import types
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from decimal import Decimal
from typing import Any
from typing import ClassVar
from typing import TypeVar
from typing import Union
from typing import get_args
from typing import get_origin
from typing import get_type_hints

from ._errors import FieldTypeMismatchError
from ._errors import MissingFieldError
from ._errors import TypeMismatchError
from ._node import Node

T = TypeVar("T")

_SEQUENCE_ORIGINS = frozenset(
    {
        list,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Iterable,
    }
)
_SET_ORIGINS = frozenset(
    {set, frozenset, collections.abc.Set, collections.abc.MutableSet}
)
_MAPPING_ORIGINS = frozenset(
    {dict, collections.abc.Mapping, collections.abc.MutableMapping}
)


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    """One declared field of a reflected type."""

    name: str
    annotation: Any
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None]


_registry: dict[type, tuple[FieldDescriptor, ...]] = {}


def _make_getter(name: str) -> Callable[[Any], Any]:
    def getter(instance: Any) -> Any:
        return getattr(instance, name)

    return getter


def _make_setter(name: str) -> Callable[[Any, Any], None]:
    def setter(instance: Any, value: Any) -> None:
        # object.__setattr__ also reaches frozen dataclass fields
        object.__setattr__(instance, name, value)

    return setter


def _build_descriptors(
    cls: type, names: Sequence[str] | None
) -> tuple[FieldDescriptor, ...]:
    hints = get_type_hints(cls)

    if names is None:
        if dataclasses.is_dataclass(cls):
            names = [f.name for f in dataclasses.fields(cls) if f.init]
        else:
            names = [
                name
                for name, hint in hints.items()
                if hint is not ClassVar and get_origin(hint) is not ClassVar
            ]

    descriptors = []
    for name in names:
        if name not in hints:
            msg = f"{cls.__name__}.{name} has no type annotation"
            raise TypeError(msg)
        descriptors.append(
            FieldDescriptor(
                name, hints[name], _make_getter(name), _make_setter(name)
            )
        )
    return tuple(descriptors)


def reflect(
    cls: type[T] | None = None, *, fields: Sequence[str] | None = None
) -> Any:
    """
    Registers a class for struct mapping.

    Usable bare (``@reflect``) or with an explicit, ordered field list
    (``@reflect(fields=["x", "y"])``). Without one, the fields are the
    dataclass init fields or, for plain classes, the annotated attributes in
    declaration order. Dataclasses work without registration.
    """

    def register(target: type[T]) -> type[T]:
        _registry[target] = _build_descriptors(target, fields)
        return target

    if cls is None:
        return register
    return register(cls)


def is_reflected(tp: Any) -> bool:
    return isinstance(tp, type) and (
        tp in _registry or dataclasses.is_dataclass(tp)
    )


def fields_of(cls: type) -> tuple[FieldDescriptor, ...]:
    """Returns the ordered field descriptors declared by ``cls``."""
    descriptors = _registry.get(cls)
    if descriptors is None:
        if not is_reflected(cls):
            msg = (
                f"{getattr(cls, '__name__', cls)!s} declares no JSON fields; "
                "make it a dataclass or decorate it with @reflect"
            )
            raise TypeError(msg)
        descriptors = _registry[cls] = _build_descriptors(cls, None)
    return descriptors


# -- struct -> node --


def _to_node(value: Any) -> Node:
    if isinstance(value, Node):
        return value.copy()
    if is_reflected(type(value)):
        return from_struct(value)
    if value is None or isinstance(
        value, str | bool | numbers.Real | Decimal | bytes | bytearray
    ):
        return Node(value)

    if isinstance(value, Mapping):
        node = Node({})
        members = node.get_object()
        for key, item in value.items():
            if not isinstance(key, str):
                msg = f"keys must be str, not {type(key).__name__}"
                raise TypeError(msg)
            members[key] = _to_node(item)
        return node

    if isinstance(value, Iterable):
        node = Node([])
        node.get_array().extend(_to_node(item) for item in value)
        return node

    return Node(value)


def from_struct(value: Any) -> Node:
    """
    Builds an object node with one member per declared field of ``value``.

    Nested reflected values, mappings and iterables of them are converted
    recursively to any depth.
    """
    node = Node({})
    members = node.get_object()
    for descriptor in fields_of(type(value)):
        members[descriptor.name] = _to_node(descriptor.getter(value))
    return node


# -- node -> struct --


def _type_name(tp: Any) -> str:
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__name__
    return str(tp).replace("typing.", "")


def _mismatch(path: str, tp: Any, node: Node) -> FieldTypeMismatchError:
    return FieldTypeMismatchError(path, _type_name(tp), node.kind.value)


def _union_from_node(
    tp: Any, args: tuple[Any, ...], node: Node, path: str
) -> Any:
    if node.is_null() and type(None) in args:
        return None
    for arg in args:
        if arg is type(None):
            continue
        try:
            return _value_from_node(arg, node, path)
        except (FieldTypeMismatchError, MissingFieldError):
            continue
    raise _mismatch(path, tp, node)


def _tuple_from_node(
    tp: Any, args: tuple[Any, ...], node: Node, path: str
) -> tuple[Any, ...]:
    if not node.is_array():
        raise _mismatch(path, tp, node)
    items = node.get_array()

    if not args or (len(args) == 2 and args[1] is Ellipsis):
        item_tp = args[0] if args else Any
        return tuple(
            _value_from_node(item_tp, item, f"{path}[{i}]")
            for i, item in enumerate(items)
        )

    if len(items) != len(args):
        raise FieldTypeMismatchError(
            path, _type_name(tp), f"{len(items)}-element array"
        )
    return tuple(
        _value_from_node(item_tp, item, f"{path}[{i}]")
        for i, (item_tp, item) in enumerate(zip(args, items, strict=True))
    )


def _value_from_node(  # noqa: PLR0911, PLR0912
    tp: Any, node: Node, path: str
) -> Any:
    """Converts ``node`` to the declared type of the field at ``path``."""
    if tp is Any or tp is object:
        return node.to_python()
    if tp is Node:
        return node.copy()
    if tp is None or tp is type(None):
        if node.is_null():
            return None
        raise _mismatch(path, None, node)

    origin = get_origin(tp)
    args = get_args(tp)
    if origin is None and tp in (list, tuple, set, frozenset, dict):
        origin = tp

    if origin is Union or origin is types.UnionType:
        return _union_from_node(tp, args, node, path)

    if tp is bool:
        if node.is_bool():
            return node.get_bool()
        raise _mismatch(path, tp, node)
    if tp is int:
        if node.is_number() and node.get_number().is_integer():
            return int(node.get_number())
        raise _mismatch(path, tp, node)
    if tp is float:
        if node.is_number():
            return node.get_number()
        raise _mismatch(path, tp, node)
    if tp is str:
        if node.is_string():
            return node.get_string()
        raise _mismatch(path, tp, node)

    if origin is tuple:
        return _tuple_from_node(tp, args, node, path)

    if origin in _SEQUENCE_ORIGINS or origin in _SET_ORIGINS:
        if not node.is_array():
            raise _mismatch(path, tp, node)
        item_tp = args[0] if args else Any
        items = [
            _value_from_node(item_tp, item, f"{path}[{i}]")
            for i, item in enumerate(node.get_array())
        ]
        if origin is frozenset:
            return frozenset(items)
        if origin in _SET_ORIGINS:
            return set(items)
        return items

    if origin in _MAPPING_ORIGINS:
        if not node.is_object():
            raise _mismatch(path, tp, node)
        if args and args[0] not in (str, Any):
            msg = (
                f"field {path!r}: object keys must map to str, "
                f"not {args[0]!r}"
            )
            raise TypeError(msg)
        value_tp = args[1] if args else Any
        return {
            key: _value_from_node(value_tp, item, f"{path}[{key!r}]")
            for key, item in node.get_object().items()
        }

    if is_reflected(tp):
        return _struct_from_node(tp, node, path)

    msg = f"field {path!r}: unsupported field type {tp!r}"
    raise TypeError(msg)


def _struct_from_node(cls: type[T], node: Node, path: str) -> T:
    descriptors = fields_of(cls)
    if not node.is_object():
        if path:
            raise _mismatch(path, cls, node)
        raise TypeMismatchError(
            "object", node.kind.value, f"convert to {cls.__name__}"
        )

    members = node.get_object()
    values: dict[str, Any] = {}
    for descriptor in descriptors:
        field_path = f"{path}.{descriptor.name}" if path else descriptor.name
        child = members.get(descriptor.name)
        if child is None:
            raise MissingFieldError(field_path, cls.__name__)
        values[descriptor.name] = _value_from_node(
            descriptor.annotation, child, field_path
        )

    if dataclasses.is_dataclass(cls):
        return cls(**values)

    instance = cls.__new__(cls)
    for descriptor in descriptors:
        descriptor.setter(instance, values[descriptor.name])
    return instance


def to_struct(cls: type[T], node: Node) -> T:
    """
    Builds an instance of ``cls`` from an object node.

    Raises ``MissingFieldError`` when a declared key is absent and
    ``FieldTypeMismatchError`` (naming the field path, e.g.
    ``groups['a'][1].name``) when a stored value has the wrong shape.
    """
    return _struct_from_node(cls, node, "")
