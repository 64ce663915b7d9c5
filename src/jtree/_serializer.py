"""Node tree to JSON text, minimized or pretty-printed."""

import math
import re
from typing import Any

from ._config import EncodeConfig
from ._config import Format
from ._errors import SerializeError
from ._node import Kind
from ._node import Node
from ._profile import ProfileContext

# Surrogates are matched only to be refused; they have no UTF-8 form.
_ESCAPE = re.compile(r'[\x00-\x1f\\"\ud800-\udfff]')
_ESCAPE_ASCII = re.compile(r'[\x00-\x1f\\"]|[^\x00-\x7f]')

_ESCAPE_DICT = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _replace_escape(match: re.Match[str]) -> str:
    char = match.group(0)
    short = _ESCAPE_DICT.get(char)
    if short is not None:
        return short

    code = ord(char)
    if 0xD800 <= code <= 0xDFFF:
        msg = f"Lone surrogate {code:#06x} cannot be encoded as JSON text"
        raise SerializeError(msg)
    if code < 0x10000:
        return f"\\u{code:04x}"
    code -= 0x10000
    high = 0xD800 | (code >> 10)
    low = 0xDC00 | (code & 0x3FF)
    return f"\\u{high:04x}\\u{low:04x}"


def _encode_string(s: str, ensure_ascii: bool) -> str:
    """Encode string with proper escape sequences."""
    pattern = _ESCAPE_ASCII if ensure_ascii else _ESCAPE
    return '"' + pattern.sub(_replace_escape, s) + '"'


def _encode_number(n: float, config: EncodeConfig) -> str:
    """
    Encode a number with the shortest text that reads back to the same double.

    Integral values drop the trailing ``.0`` so ``17.0`` prints as ``17``.
    """
    if math.isfinite(n):
        text = repr(n)
        return text[:-2] if text.endswith(".0") else text

    if not config.allow_nan:
        msg = f"Out of range float values are not JSON compliant: {n!r}"
        raise SerializeError(msg)
    return f'"{n!r}"'


def _get_indent_string(indent: int | str, level: int) -> str:
    """Generate indentation string for given level."""
    if isinstance(indent, int):
        return " " * (indent * level)
    return indent * level


def _encode_array(
    items: list[Node], config: EncodeConfig, level: int, chunks: list[str]
) -> None:
    if not items:
        chunks.append("[]")
        return

    if config.format is Format.MINIMIZED:
        chunks.append("[")
        for i, item in enumerate(items):
            if i:
                chunks.append(",")
            _encode_node(item, config, level + 1, chunks)
        chunks.append("]")
        return

    inner_indent = _get_indent_string(config.indent, level + 1)
    chunks.append("[\n")
    for i, item in enumerate(items):
        if i:
            chunks.append(",\n")
        chunks.append(inner_indent)
        _encode_node(item, config, level + 1, chunks)
    chunks.append("\n")
    chunks.append(_get_indent_string(config.indent, level))
    chunks.append("]")


def _encode_object(
    members: dict[str, Node],
    config: EncodeConfig,
    level: int,
    chunks: list[str],
) -> None:
    if not members:
        chunks.append("{}")
        return

    if config.format is Format.MINIMIZED:
        chunks.append("{")
        for i, (key, value) in enumerate(members.items()):
            if i:
                chunks.append(",")
            chunks.append(_encode_string(key, config.ensure_ascii))
            chunks.append(":")
            _encode_node(value, config, level + 1, chunks)
        chunks.append("}")
        return

    inner_indent = _get_indent_string(config.indent, level + 1)
    chunks.append("{\n")
    for i, (key, value) in enumerate(members.items()):
        if i:
            chunks.append(",\n")
        chunks.append(inner_indent)
        chunks.append(_encode_string(key, config.ensure_ascii))
        chunks.append(": ")
        _encode_node(value, config, level + 1, chunks)
    chunks.append("\n")
    chunks.append(_get_indent_string(config.indent, level))
    chunks.append("}")


def _encode_node(
    node: Node, config: EncodeConfig, level: int, chunks: list[str]
) -> None:
    """Append the encoding of any node to ``chunks``."""
    kind = node.kind
    container = kind is Kind.OBJECT or kind is Kind.ARRAY
    if container and level >= config.max_depth:
        msg = f"Exceeded maximum nesting depth of {config.max_depth}"
        raise SerializeError(msg)
    if kind is Kind.OBJECT:
        _encode_object(node.get_object(), config, level, chunks)
    elif kind is Kind.ARRAY:
        _encode_array(node.get_array(), config, level, chunks)
    elif kind is Kind.STRING:
        chunks.append(_encode_string(node.get_string(), config.ensure_ascii))
    elif kind is Kind.NUMBER:
        chunks.append(_encode_number(node.get_number(), config))
    elif kind is Kind.BOOL:
        chunks.append("true" if node.get_bool() else "false")
    else:
        chunks.append("null")


def serialize(
    node: Node | Any, format: Format = Format.PRETTY, **kwargs: Any
) -> str:
    """
    Serializes a node tree to JSON text.

    Object members keep their stored order. Keyword arguments build an
    ``EncodeConfig``; values that are not nodes yet are converted first.
    Trees nested deeper than ``max_depth`` raise ``SerializeError``, as do
    lone surrogates placed into a tree through its live containers.
    """
    config = EncodeConfig(format=format, **kwargs)
    if not isinstance(node, Node):
        node = Node(node)

    chunks: list[str] = []
    with ProfileContext("serialize"):
        try:
            _encode_node(node, config, 0, chunks)
        except RecursionError as exc:
            msg = "Exceeded maximum recursion depth"
            raise SerializeError(msg) from exc
    return "".join(chunks)
