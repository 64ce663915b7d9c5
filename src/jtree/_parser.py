"""
RFC 8259 lexer and recursive-descent parser producing ``Node`` trees.

The lexer decodes string escapes and numbers while scanning, so every token
carries its final value. The parser enforces the grammar, the nesting limit,
and whole-document semantics (one value, optional surrounding whitespace).
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ._config import ParseConfig
from ._errors import ParseError
from ._node import Kind
from ._node import SURROGATE
from ._node import Node
from ._profile import ProfileContext

WHITESPACE = frozenset(" \t\n\r")
_DIGITS = frozenset("0123456789")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# Run of string characters needing no special handling
_STRING_CHUNK = re.compile(r'[^"\\\x00-\x1f]*')

_LITERALS = (("true", True), ("false", False), ("null", None))


class TokenType(Enum):
    """Token categories produced by the lexer."""

    BEGIN_OBJECT = "{"
    END_OBJECT = "}"
    BEGIN_ARRAY = "["
    END_ARRAY = "]"
    COMMA = ","
    COLON = ":"
    STRING = "string"
    NUMBER = "number"
    LITERAL = "literal"
    INVALID = "invalid"


_STRUCTURAL = {
    "{": TokenType.BEGIN_OBJECT,
    "}": TokenType.END_OBJECT,
    "[": TokenType.BEGIN_ARRAY,
    "]": TokenType.END_ARRAY,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
}


@dataclass(frozen=True, slots=True)
class JsonToken:
    """
    Represents a JSON token with position information.

    ``value`` is the decoded payload: a ``str`` for strings, a ``float`` for
    numbers, ``True``/``False``/``None`` for literals, and the source
    character for everything else.
    """

    type: TokenType
    value: Any
    start: int
    end: int


class JsonLexer:
    """
    Tokenizes JSON text.

    Handles whitespace, strings, numbers, literals, and structural tokens.
    Characters that cannot start any token come back as ``INVALID`` so the
    parser can report what it expected at that point.
    """

    def __init__(self, text: str, config: ParseConfig) -> None:
        self.text = text
        self.config = config
        self.pos = 0
        self.length = len(text)

    def error(self, msg: str, pos: int) -> ParseError:
        return ParseError(msg, self.text, pos)

    def skip_whitespace(self) -> None:
        """Skips space, tab, CR and LF."""
        text = self.text
        pos = self.pos
        while pos < self.length and text[pos] in WHITESPACE:
            pos += 1
        self.pos = pos

    def _skip_digits(self, pos: int) -> int:
        while pos < self.length and self.text[pos] in _DIGITS:
            pos += 1
        return pos

    def _scan_hex_quad(self, pos: int) -> int:
        """Reads the hex digits of the ``\\uXXXX`` escape at ``pos``."""
        digits = self.text[pos + 2 : pos + 6]
        if len(digits) != 4 or not all(c in _HEX_DIGITS for c in digits):
            raise self.error("Invalid \\uXXXX escape", pos)
        return int(digits, 16)

    def _scan_escape(self, pos: int, start: int) -> tuple[str, int]:
        """Decodes the escape at ``pos``; returns it and the next position."""
        escaped = self.text[pos + 1 : pos + 2]
        if not escaped:
            raise self.error("Unterminated string starting at", start)
        if escaped in _ESCAPES:
            return _ESCAPES[escaped], pos + 2
        if escaped != "u":
            raise self.error("Invalid \\escape", pos)

        code = self._scan_hex_quad(pos)
        if 0xD800 <= code <= 0xDBFF:
            if self.text[pos + 6 : pos + 8] == "\\u":
                low = self._scan_hex_quad(pos + 6)
                if 0xDC00 <= low <= 0xDFFF:
                    code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                    return chr(code), pos + 12
            raise self.error("Invalid \\uXXXX escape: unpaired surrogate", pos)
        if 0xDC00 <= code <= 0xDFFF:
            raise self.error("Invalid \\uXXXX escape: unpaired surrogate", pos)
        return chr(code), pos + 6

    def scan_string(self) -> JsonToken:
        """Scans and decodes a JSON string token including quotes."""
        with ProfileContext("scan_string"):
            start = self.pos
            text = self.text
            pos = start + 1
            chunks: list[str] = []

            while True:
                chunk = _STRING_CHUNK.match(text, pos)
                end = chunk.end()  # type: ignore[union-attr]
                if end > pos:
                    chunks.append(text[pos:end])
                pos = end

                if pos >= self.length:
                    raise self.error("Unterminated string starting at", start)

                char = text[pos]
                if char == '"':
                    pos += 1
                    break
                if char != "\\":
                    raise self.error("Invalid control character at", pos)

                decoded, pos = self._scan_escape(pos, start)
                chunks.append(decoded)

            self.pos = pos
            return JsonToken(TokenType.STRING, "".join(chunks), start, pos)

    def scan_number(self) -> JsonToken:
        """
        Scans a JSON number token.

        Outside strict mode a few shapes that still denote a double are
        admitted: ``1.``, ``2.e3``, ``-01`` and ``-.5``.
        """
        with ProfileContext("scan_number"):
            start = self.pos
            text = self.text
            relaxed = not self.config.strict
            pos = start

            negative = text[pos] == "-"
            if negative:
                pos += 1

            int_end = self._skip_digits(pos)
            int_digits = int_end - pos
            if int_digits == 0:
                if not (relaxed and negative and text[pos : pos + 1] == "."):
                    raise self.error("Invalid number", start)
            elif (
                int_digits > 1
                and text[pos] == "0"
                and not (relaxed and negative)
            ):
                raise self.error("Leading zeros not allowed", start)
            pos = int_end

            if text[pos : pos + 1] == ".":
                frac_end = self._skip_digits(pos + 1)
                if frac_end == pos + 1 and (not relaxed or int_digits == 0):
                    raise self.error("Invalid number", start)
                pos = frac_end

            if text[pos : pos + 1] in ("e", "E"):
                pos += 1
                if text[pos : pos + 1] in ("+", "-"):
                    pos += 1
                exp_end = self._skip_digits(pos)
                if exp_end == pos:
                    raise self.error("Invalid exponent", start)
                pos = exp_end

            value = float(text[start:pos])
            if math.isinf(value):
                raise self.error("Number out of range", start)

            self.pos = pos
            return JsonToken(TokenType.NUMBER, value, start, pos)

    def scan_literal(self) -> JsonToken | None:
        """Scans literal tokens: true, false, null."""
        start = self.pos
        for word, value in _LITERALS:
            if self.text.startswith(word, start):
                self.pos = start + len(word)
                return JsonToken(TokenType.LITERAL, value, start, self.pos)
        return None

    def next_token(self) -> JsonToken | None:
        """Returns the next token or None if at end."""
        self.skip_whitespace()

        if self.pos >= self.length:
            return None

        char = self.text[self.pos]
        start = self.pos

        token_type = _STRUCTURAL.get(char)
        if token_type is not None:
            self.pos += 1
            return JsonToken(token_type, char, start, self.pos)

        if char == '"':
            return self.scan_string()

        if char in _DIGITS or char == "-":
            return self.scan_number()

        if char in "tfn":
            literal = self.scan_literal()
            if literal is not None:
                return literal

        return JsonToken(TokenType.INVALID, char, start, start)


class JsonParser:
    """
    Recursive-descent parser over the lexer's token stream.

    Tracks nesting depth so hostile inputs such as ``[[[[...`` fail with a
    ``ParseError`` instead of exhausting the interpreter stack.
    """

    def __init__(self, lexer: JsonLexer, config: ParseConfig) -> None:
        self.lexer = lexer
        self.config = config
        self.current_token: JsonToken | None = None
        self.depth = 0

    def error(self, msg: str, pos: int) -> ParseError:
        return ParseError(msg, self.lexer.text, pos)

    def _current_pos(self) -> int:
        if self.current_token is not None:
            return self.current_token.start
        return self.lexer.pos

    def advance_token(self) -> JsonToken | None:
        """Advances to next token and returns it."""
        self.current_token = self.lexer.next_token()
        return self.current_token

    def expect_token(self, token_type: TokenType) -> JsonToken:
        """Expects a specific structural token and advances past it."""
        token = self.current_token
        if token is None or token.type is not token_type:
            raise self.error(
                f"Expecting '{token_type.value}' delimiter",
                self._current_pos(),
            )
        self.advance_token()
        return token

    def parse_document(self) -> Node:
        """Parses exactly one value surrounded by optional whitespace."""
        if self.lexer.text.startswith("\ufeff"):
            raise self.error(
                "JSON input should not contain BOM (Byte Order Mark)", 0
            )

        self.advance_token()
        node = self.parse_value()

        if self.current_token is not None:
            raise self.error("Extra data", self.current_token.start)

        return node

    def parse_value(self) -> Node:
        """Parses any JSON value based on current token."""
        token = self.current_token
        if token is None:
            raise self.error("Expecting value", self.lexer.pos)

        token_type = token.type
        if token_type is TokenType.STRING:
            self.advance_token()
            return Node._make(Kind.STRING, token.value)
        if token_type is TokenType.NUMBER:
            self.advance_token()
            return Node._make(Kind.NUMBER, token.value)
        if token_type is TokenType.LITERAL:
            self.advance_token()
            kind = Kind.NULL if token.value is None else Kind.BOOL
            return Node._make(kind, token.value)
        if token_type is TokenType.BEGIN_OBJECT:
            return self.parse_object()
        if token_type is TokenType.BEGIN_ARRAY:
            return self.parse_array()

        raise self.error("Expecting value", token.start)

    def _enter_container(self) -> None:
        self.depth += 1
        if self.depth > self.config.max_depth:
            raise self.error(
                "Exceeded maximum nesting depth of "
                f"{self.config.max_depth}",
                self._current_pos(),
            )
        self.advance_token()

    def _parse_object_key(self) -> str:
        """Parses object key and validates it's a proper string token."""
        token = self.current_token
        if token is None or token.type is not TokenType.STRING:
            raise self.error(
                "Expecting property name enclosed in double quotes",
                self._current_pos(),
            )
        self.advance_token()
        return token.value

    def _continue_container(self, end_type: TokenType, name: str) -> bool:
        """Consumes ',' or the closing token; True if another item follows."""
        token = self.current_token
        if token is None:
            raise self.error("Expecting ',' delimiter", self.lexer.pos)

        if token.type is end_type:
            self.advance_token()
            return False

        if token.type is TokenType.COMMA:
            comma_pos = token.start
            self.advance_token()
            if (
                self.current_token is not None
                and self.current_token.type is end_type
            ):
                raise self.error(
                    f"Illegal trailing comma before end of {name}", comma_pos
                )
            return True

        raise self.error("Expecting ',' delimiter", token.start)

    def parse_object(self) -> Node:
        """
        Parses a JSON object.

        Duplicate keys keep the position of their first occurrence and the
        value of their last.
        """
        with ProfileContext("parse_object"):
            self._enter_container()
            members: dict[str, Node] = {}

            if (
                self.current_token is not None
                and self.current_token.type is TokenType.END_OBJECT
            ):
                self.advance_token()
            else:
                while True:
                    key = self._parse_object_key()
                    self.expect_token(TokenType.COLON)
                    members[key] = self.parse_value()

                    if not self._continue_container(
                        TokenType.END_OBJECT, "object"
                    ):
                        break

            self.depth -= 1
            return Node._make(Kind.OBJECT, members)

    def parse_array(self) -> Node:
        """Parses a JSON array."""
        with ProfileContext("parse_array"):
            self._enter_container()
            items: list[Node] = []

            if (
                self.current_token is not None
                and self.current_token.type is TokenType.END_ARRAY
            ):
                self.advance_token()
            else:
                while True:
                    items.append(self.parse_value())

                    if not self._continue_container(
                        TokenType.END_ARRAY, "array"
                    ):
                        break

            self.depth -= 1
            return Node._make(Kind.ARRAY, items)


def _decode(data: Any) -> str:
    """Returns the document text, decoding binary input as strict UTF-8."""
    if isinstance(data, str):
        match = SURROGATE.search(data)
        if match is not None:
            raise ParseError(
                "Invalid surrogate code point", data, match.start()
            )
        return data

    if isinstance(data, bytes | bytearray | memoryview):
        raw = bytes(data)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            prefix = raw[: exc.start].decode("utf-8")
            raise ParseError(
                "Invalid UTF-8 byte",
                raw.decode("utf-8", "replace"),
                len(prefix),
            ) from exc

    msg = (
        "the JSON object must be str, bytes or bytearray, "
        f"not {type(data).__name__}"
    )
    raise TypeError(msg)


def parse(data: str | bytes | bytearray | memoryview, **kwargs: Any) -> Node:
    """
    Parses one JSON document into a ``Node`` tree.

    Binary input is decoded as UTF-8; text holding lone surrogates is
    refused. Keyword arguments build a ``ParseConfig``. Any grammar
    violation raises ``ParseError`` with the position of the first failure;
    no partial tree is returned.
    """
    config = ParseConfig(**kwargs)
    text = _decode(data)

    with ProfileContext("parse", len(text)):
        lexer = JsonLexer(text, config)
        parser = JsonParser(lexer, config)
        try:
            return parser.parse_document()
        except RecursionError as exc:
            raise ParseError(
                "Exceeded maximum recursion depth", text, lexer.pos
            ) from exc
