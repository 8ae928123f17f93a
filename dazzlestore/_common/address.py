"""Address model for DazzleStore.

An Address is an immutable, structurally comparable sequence of parts that
names something inside a store. Every backend subclasses Address for its own
kind of part (JSON keys and indexes, filename components, remote ids), and
all of them compose through the single ``append`` operation.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import CapabilityNotSupportedError


class _AbsentType:
    """Type of the ``ABSENT`` marker. There is only ever one instance."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (_AbsentType, ())


ABSENT = _AbsentType()
"""Marks "nothing here".

Reads return it when nothing exists at an address, and writing it deletes.
``None`` is a real value (JSON null) and is never used for absence.
"""


def is_absent(value: Any) -> bool:
    """Check whether a read result means nothing exists."""
    return value is ABSENT


class Existence:
    """Value type to ask for when only the presence of a value matters.

    Reading an address as ``Existence`` yields an ``Existence()`` instance
    or ``ABSENT``.
    """

    __slots__ = ()

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Existence)

    def __hash__(self) -> int:
        return hash(Existence)

    def __repr__(self) -> str:
        return "Existence()"


class Address:
    """Immutable path identifier into a store.

    Two addresses are equal when they are of the same class and hold the
    same parts. Subclasses customize how parts are coerced, printed and
    parsed; composition always goes through ``append``.
    """

    __slots__ = ('_parts',)

    def __init__(self, parts: Iterable[Any] = ()):
        object.__setattr__(
            self, '_parts', tuple(self._coerce_part(part) for part in parts)
        )

    @classmethod
    def _from_parts(cls, parts: Tuple[Any, ...]) -> 'Address':
        address = cls.__new__(cls)
        object.__setattr__(address, '_parts', parts)
        return address

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __reduce__(self):
        return (self.__class__._from_parts, (self._parts,))

    # Part hooks

    @classmethod
    def _coerce_part(cls, part: Any) -> Any:
        """Normalize a single part before it is stored. Override to validate."""
        return part

    @staticmethod
    def format_part(part: Any) -> str:
        """String name of a single part."""
        return str(part)

    @classmethod
    def parse(cls, text: str) -> 'Address':
        """Parse a string into an address of this kind.

        Raises:
            CapabilityNotSupportedError: If this address kind has no string syntax
        """
        raise CapabilityNotSupportedError(
            f"{cls.__name__} addresses cannot be parsed from strings"
        )

    # Accessors

    @property
    def parts(self) -> Tuple[Any, ...]:
        return self._parts

    @property
    def is_root(self) -> bool:
        return not self._parts

    def own_name(self) -> str:
        """Name of the last part, or an empty string for the root."""
        if not self._parts:
            return ""
        return self.format_part(self._parts[-1])

    def as_parts(self) -> List[str]:
        """String names of every part, in order."""
        return [self.format_part(part) for part in self._parts]

    def last(self) -> Optional[Any]:
        return self._parts[-1] if self._parts else None

    def parent(self) -> Optional['Address']:
        """Address without its last part, or None for the root."""
        if not self._parts:
            return None
        return self._from_parts(self._parts[:-1])

    # Composition

    def append(self, part: Any) -> 'Address':
        """Return a new address one step (or one whole address) deeper.

        Args:
            part: A single part, or another address of the same kind whose
                parts are concatenated

        Returns:
            New address; ``self`` is unchanged
        """
        if isinstance(part, Address):
            if not isinstance(part, type(self)):
                raise TypeError(
                    f"Cannot append {type(part).__name__} to {type(self).__name__}"
                )
            return self._from_parts(self._parts + part.parts)
        return self._from_parts(self._parts + (self._coerce_part(part),))

    def extend(self, parts: Iterable[Any]) -> 'Address':
        address = self
        for part in parts:
            address = address.append(part)
        return address

    def path(self, text: str) -> 'Address':
        """Parse ``text`` with this kind's syntax and append the result."""
        return self.append(type(self).parse(text))

    def __truediv__(self, part: Any) -> 'Address':
        return self.append(part)

    # Value semantics

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._parts)

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._parts == other._parts

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._parts))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self._parts)!r})"

    def __str__(self) -> str:
        return "/".join(self.as_parts())


@dataclass(frozen=True)
class Branch:
    """An internal node: the address has children and can be listed."""

    address: Address

    is_branch = True
    is_leaf = False

    def __str__(self) -> str:
        return str(self.address)


@dataclass(frozen=True)
class Leaf:
    """A terminal node: the address holds a value."""

    address: Address

    is_branch = False
    is_leaf = True

    def __str__(self) -> str:
        return str(self.address)


BranchOrLeaf = Union[Branch, Leaf]
