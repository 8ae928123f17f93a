"""Traversal and mutation of JSON-like value trees.

Values are plain Python: ``None``, ``bool``, ``int``, ``float``, ``str``,
``list`` and ``dict``. Mutating functions work on a *holder*, a one-element
list wrapping the root, so that the root itself can be replaced (a ``null``
root becomes an object when a key is written below it).

Mutation is not transactional. Containers created on the way down stay in
place even if a later step fails.
"""

from typing import Any, List, Sequence, Tuple, Union

from .address import ABSENT, Branch, BranchOrLeaf, Leaf
from .errors import MissingAddressError, StructuralMismatchError
from .json_path import Index, JsonPath, Key, PathPart


Slot = Tuple[Union[list, dict], Union[int, str]]


def _render(parts: Sequence[PathPart]) -> str:
    return str(JsonPath(parts))


def _mismatch(message: str, parts: Sequence[PathPart], position: int, value: Any):
    return StructuralMismatchError(
        message, _render(parts), str(parts[position]), value
    )


def get_path_value(value: Any, path: Sequence[PathPart]) -> Any:
    """Read the value at ``path``.

    Returns:
        The value, or ABSENT if a step meets ``null``, a missing key or an
        out-of-range index

    Raises:
        StructuralMismatchError: If a Key meets a non-object or an Index
            meets a non-array
    """
    parts = tuple(path)
    current = value
    for position, part in enumerate(parts):
        if current is None:
            return ABSENT
        if isinstance(part, Key):
            if not isinstance(current, dict):
                raise _mismatch("Expected an object", parts, position, current)
            if part.name not in current:
                return ABSENT
            current = current[part.name]
        else:
            if not isinstance(current, list):
                raise _mismatch("Expected an array", parts, position, current)
            if part.index >= len(current):
                return ABSENT
            current = current[part.index]
    return current


def get_mutable_path_value(
    holder: List[Any],
    path: Sequence[PathPart],
    create_on_miss: bool
) -> Union[Slot, Any]:
    """Find the slot holding the value at ``path``.

    With ``create_on_miss``, ``null`` nodes on the way become ``{}`` or
    ``[]`` depending on the next part, missing keys are added as ``null``
    and arrays are padded with ``null`` up to the wanted index. Without it,
    any miss returns ABSENT and nothing is touched.

    Args:
        holder: One-element list wrapping the root value
        path: Parts to follow
        create_on_miss: Whether to build missing containers

    Returns:
        ``(container, key)`` so that ``container[key]`` is the value, or
        ABSENT on a miss

    Raises:
        StructuralMismatchError: If an existing node has the wrong kind
    """
    parts = tuple(path)
    container: Union[list, dict] = holder
    key: Union[int, str] = 0

    for position, part in enumerate(parts):
        current = container[key]
        if current is None:
            if not create_on_miss:
                return ABSENT
            current = {} if isinstance(part, Key) else []
            container[key] = current

        if isinstance(part, Key):
            if not isinstance(current, dict):
                raise _mismatch("Expected an object", parts, position, current)
            if part.name not in current:
                if not create_on_miss:
                    return ABSENT
                current[part.name] = None
            container, key = current, part.name
        else:
            if not isinstance(current, list):
                raise _mismatch("Expected an array", parts, position, current)
            if part.index >= len(current):
                if not create_on_miss:
                    return ABSENT
                current.extend([None] * (part.index + 1 - len(current)))
            container, key = current, part.index

    return container, key


def set_path_value(holder: List[Any], path: Sequence[PathPart], value: Any) -> None:
    """Upsert ``value`` at ``path``, creating intermediate containers."""
    container, key = get_mutable_path_value(holder, path, True)
    container[key] = value


def delete_path_value(holder: List[Any], path: Sequence[PathPart]) -> None:
    """Delete the value at ``path``.

    Deleting the root sets it to ``null``. A missing or ``null`` parent is a
    no-op. In arrays, an index past the end is a no-op, the last index is
    popped, and any other index is overwritten with ``null`` so later
    indexes keep their positions.
    """
    parts = tuple(path)
    if not parts:
        holder[0] = None
        return

    slot = get_mutable_path_value(holder, parts[:-1], False)
    if slot is ABSENT:
        return
    container, key = slot
    parent = container[key]
    if parent is None:
        return

    last = parts[-1]
    if isinstance(last, Key) and isinstance(parent, dict):
        parent.pop(last.name, None)
    elif isinstance(last, Index) and isinstance(parent, list):
        if last.index >= len(parent):
            return
        if last.index == len(parent) - 1:
            parent.pop()
        else:
            parent[last.index] = None
    else:
        raise _mismatch("Incompatible container", parts, len(parts) - 1, parent)


def insert_path_values(
    holder: List[Any],
    path: Sequence[PathPart],
    items: Sequence[Any]
) -> List[Index]:
    """Append ``items`` to the array at ``path``.

    A missing or ``null`` target becomes an empty array first.

    Returns:
        Index parts of the appended items, in order
    """
    parts = tuple(path)
    container, key = get_mutable_path_value(holder, parts, True)
    target = container[key]
    if target is None:
        target = []
        container[key] = target
    if not isinstance(target, list):
        raise StructuralMismatchError(
            "Cannot insert into non-array", _render(parts),
            str(parts[-1]) if parts else "", target
        )
    start = len(target)
    target.extend(items)
    return [Index(i) for i in range(start, len(target))]


def list_path_children(value: Any, path: Sequence[PathPart]) -> List[PathPart]:
    """Parts naming the direct children of the container at ``path``.

    Raises:
        MissingAddressError: If nothing exists at ``path``
        StructuralMismatchError: If the value there is a scalar
    """
    parts = tuple(path)
    node = get_path_value(value, parts)
    if node is ABSENT:
        raise MissingAddressError(f"Path doesn't exist: {_render(parts)!r}")
    if isinstance(node, dict):
        return [Key(name) for name in node]
    if isinstance(node, list):
        return [Index(i) for i in range(len(node))]
    raise StructuralMismatchError(
        "Cannot list a scalar", _render(parts),
        str(parts[-1]) if parts else "", node
    )


def classify_path(value: Any, path: JsonPath) -> BranchOrLeaf:
    """Objects and arrays are branches; every scalar, null included, is a leaf.

    Raises:
        MissingAddressError: If nothing exists at ``path``
    """
    node = get_path_value(value, path)
    if node is ABSENT:
        raise MissingAddressError(f"Path doesn't exist: {str(path)!r}")
    if isinstance(node, (dict, list)):
        return Branch(path)
    return Leaf(path)
