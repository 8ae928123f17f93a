"""JSON paths: parts, addresses and the string syntax.

Grammar::

    path    := segment ('.' segment)*
    segment := identifier index*
    index   := '[' digits ']'

``"a.b[0].c"`` parses to ``[Key('a'), Key('b'), Index(0), Key('c')]``.
"""

from dataclasses import dataclass
from typing import Any, List, Union

from .address import Address
from .errors import PathParseError


_DIGITS = frozenset("0123456789")


@dataclass(frozen=True, order=True)
class Key:
    """Object member name."""

    name: str

    def to_key(self) -> str:
        return self.name

    def __str__(self) -> str:
        return f".{self.name}"


@dataclass(frozen=True, order=True)
class Index:
    """Array position."""

    index: int

    def __post_init__(self):
        if isinstance(self.index, bool) or not isinstance(self.index, int):
            raise TypeError(f"Index must be an int, got {self.index!r}")
        if self.index < 0:
            raise ValueError(f"Index must be non-negative, got {self.index}")

    def to_key(self) -> str:
        return str(self.index)

    def __str__(self) -> str:
        return f"[{self.index}]"


PathPart = Union[Key, Index]


def _parse_chunk(chunk: str, path: str) -> List[PathPart]:
    """Parse one dot-separated chunk, right to left."""
    chars = list(chunk)
    parts: List[PathPart] = []

    while chars and chars[-1] == "]":
        chars.pop()
        digits: List[str] = []
        while True:
            if not chars:
                raise PathParseError("Mismatched ']'", path, chunk)
            char = chars.pop()
            if char == "[":
                break
            digits.append(char)

        text = "".join(reversed(digits))
        if not text or not set(text) <= _DIGITS:
            raise PathParseError(f"Invalid index {text!r}", path, chunk)
        parts.append(Index(int(text)))

    if chars:
        key = "".join(chars)
        if "[" in key or "]" in key:
            raise PathParseError("Mismatched bracket", path, chunk)
        parts.append(Key(key))

    parts.reverse()
    return parts


def parse_path(path: str) -> List[PathPart]:
    """Parse a dotted/bracketed string into path parts.

    Empty chunks contribute nothing, so ``""`` is the root path.

    Raises:
        PathParseError: On an unmatched bracket or a non-numeric index
    """
    parts: List[PathPart] = []
    for chunk in path.split("."):
        parts.extend(_parse_chunk(chunk, path))
    return parts


class JsonPath(Address):
    """Address into a JSON value: a sequence of Key and Index parts."""

    __slots__ = ()

    @classmethod
    def _coerce_part(cls, part: Any) -> PathPart:
        if isinstance(part, (Key, Index)):
            return part
        if isinstance(part, str):
            return Key(part)
        if isinstance(part, int) and not isinstance(part, bool):
            return Index(part)
        raise TypeError(f"Not a JSON path part: {part!r}")

    @staticmethod
    def format_part(part: PathPart) -> str:
        return part.to_key()

    @classmethod
    def parse(cls, text: str) -> 'JsonPath':
        return cls(parse_path(text))

    def __str__(self) -> str:
        text = "".join(str(part) for part in self.parts)
        return text[1:] if text.startswith(".") else text
