"""
JSON document trees: strict RFC 8259 parsing, a mutable node model,
deterministic serialization, and mapping to declared aggregate types.

Parse text into a ``Node``, navigate or mutate it, write it back out with
``serialize``, or convert it to and from dataclasses with ``to_struct`` and
``from_struct``.
"""

import io
import os
from typing import IO
from typing import Any

from ._config import DEFAULT_MAX_DEPTH
from ._config import EncodeConfig
from ._config import Format
from ._config import ParseConfig
from ._errors import FieldTypeMismatchError
from ._errors import IndexOutOfRangeError
from ._errors import JSONError
from ._errors import KeyNotFoundError
from ._errors import MissingFieldError
from ._errors import ParseError
from ._errors import SerializeError
from ._errors import TypeMismatchError
from ._node import Kind
from ._node import Node
from ._parser import JsonLexer
from ._parser import JsonParser
from ._parser import JsonToken
from ._parser import TokenType
from ._parser import parse
from ._profile import HotPathStats
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats
from ._reflect import FieldDescriptor
from ._reflect import fields_of
from ._reflect import from_struct
from ._reflect import reflect
from ._reflect import to_struct
from ._serializer import serialize

__version__ = "0.1.0"

# Names used by the mapping-layer contract
to_node = from_struct
from_node = to_struct


def load(fp: IO[str] | IO[bytes], **kwargs: Any) -> Node:
    """
    Parses JSON from a text or binary file-like object.

    The whole stream is read into memory before parsing starts.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return parse(fp.read(), **kwargs)


def parse_file(path: str | os.PathLike[str], **kwargs: Any) -> Node:
    """
    Reads an entire file and parses it.

    I/O failures surface as ``OSError`` (``FileNotFoundError``,
    ``PermissionError``...), never as ``ParseError``.
    """
    with open(path, "rb") as fp:
        data = fp.read()
    return parse(data, **kwargs)


def dump(
    node: Node | Any,
    fp: IO[str] | IO[bytes],
    format: Format = Format.PRETTY,
    **kwargs: Any,
) -> None:
    """
    Serializes a node tree to a file-like object.

    Binary streams receive UTF-8 bytes, text streams receive ``str``.
    """
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    text = serialize(node, format, **kwargs)
    if isinstance(fp, io.RawIOBase | io.BufferedIOBase):
        fp.write(text.encode("utf-8"))
    else:
        fp.write(text)  # type: ignore[arg-type]


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "EncodeConfig",
    "FieldDescriptor",
    "FieldTypeMismatchError",
    "Format",
    "HotPathStats",
    "IndexOutOfRangeError",
    "JSONError",
    "JsonLexer",
    "JsonParser",
    "JsonToken",
    "KeyNotFoundError",
    "Kind",
    "MissingFieldError",
    "Node",
    "ParseConfig",
    "ParseError",
    "SerializeError",
    "TokenType",
    "TypeMismatchError",
    "clear_hot_path_stats",
    "dump",
    "fields_of",
    "from_node",
    "from_struct",
    "get_hot_path_stats",
    "load",
    "parse",
    "parse_file",
    "reflect",
    "serialize",
    "to_node",
    "to_struct",
]
