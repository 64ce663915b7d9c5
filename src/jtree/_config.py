"""Immutable parse and encode settings."""

import os
from dataclasses import dataclass
from enum import Enum

# Each nesting level costs two interpreter frames in the recursive descent,
# so the default stays well inside the stock recursion limit.
DEFAULT_MAX_DEPTH = int(os.environ.get("JTREE_MAX_DEPTH", "256"))


def _check_max_depth(max_depth: int) -> None:
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise TypeError("max_depth must be an integer")
    if max_depth < 1:
        raise ValueError("max_depth must be at least 1")


class Format(Enum):
    """Serialization layouts."""

    MINIMIZED = "minimized"
    PRETTY = "pretty"


@dataclass(frozen=True)
class ParseConfig:
    """
    Configures JSON parsing behavior with immutable settings.

    ``strict=False`` admits the documented numeric relaxations (``1.``,
    ``2.e3``, ``-01``, ``-.5``); everything else stays RFC 8259.
    """

    strict: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise TypeError("strict must be a boolean")
        _check_max_depth(self.max_depth)


@dataclass(frozen=True)
class EncodeConfig:
    """
    Configures JSON encoding behavior with immutable settings.

    ``indent`` is either a number of spaces or a literal indent string and is
    only used by ``Format.PRETTY``. ``max_depth`` bounds container nesting
    the same way the parser does.
    """

    format: Format = Format.PRETTY
    indent: int | str = 4
    ensure_ascii: bool = False
    allow_nan: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if not isinstance(self.format, Format):
            raise TypeError("format must be a Format member")
        if isinstance(self.indent, bool) or not isinstance(
            self.indent, int | str
        ):
            raise TypeError("indent must be an int or a string")
        if isinstance(self.indent, int) and self.indent < 0:
            raise ValueError("indent must be non-negative")
        if not isinstance(self.ensure_ascii, bool):
            raise TypeError("ensure_ascii must be a boolean")
        if not isinstance(self.allow_nan, bool):
            raise TypeError("allow_nan must be a boolean")
        _check_max_depth(self.max_depth)
