"""Exception hierarchy shared by the parser, node model and mapping layer."""

from __future__ import annotations


class JSONError(Exception):
    """Base class for every error raised by jtree."""


class ParseError(JSONError, ValueError):
    """
    Handles JSON parsing failures with precise position information.

    ``pos`` is the character index into the decoded document, ``offset`` the
    matching UTF-8 byte offset. Line and column numbers are 1-based.
    """

    def __init__(self, msg: str, doc: str = "", pos: int = 0) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos

        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")

    @property
    def offset(self) -> int:
        """Byte offset of the failure in the UTF-8 encoding of the document."""
        return len(self.doc[: self.pos].encode("utf-8", "surrogatepass"))

    def __reduce__(self) -> tuple[type, tuple[str, str, int]]:
        return self.__class__, (self.msg, self.doc, self.pos)


class TypeMismatchError(JSONError, TypeError):
    """Raised when a node accessor is used against the wrong variant."""

    def __init__(self, expected: str, actual: str, action: str = "") -> None:
        self.expected = expected
        self.actual = actual
        message = f"expected {expected} node, got {actual}"
        if action:
            message = f"cannot {action} on {actual} node (requires {expected})"
        super().__init__(message)


class KeyNotFoundError(JSONError, KeyError):
    """Raised by non-creating lookups of a missing object key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"key {self.key!r} not found in JSON object"


class IndexOutOfRangeError(JSONError, IndexError):
    """Raised when an array index falls outside the array."""

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(
            f"index {index} out of range for array of size {size}"
        )


class MissingFieldError(JSONError, KeyError):
    """Raised when an object lacks a field declared by the target type."""

    def __init__(self, field: str, type_name: str) -> None:
        self.field = field
        self.type_name = type_name
        super().__init__(field)

    def __str__(self) -> str:
        return f"missing field {self.field!r} for {self.type_name}"


class FieldTypeMismatchError(JSONError, TypeError):
    """Raised when a stored node cannot satisfy a field's declared type."""

    def __init__(self, field: str, expected: str, actual: str) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"field {field!r}: expected {expected}, got {actual} node"
        )


class SerializeError(JSONError, ValueError):
    """Raised when a node tree cannot be written as JSON text."""
