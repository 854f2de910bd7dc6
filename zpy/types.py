"""Runtime value model for ZPy.

Every runtime datum is one of a closed set of kinds. Immutable kinds use
the matching Python object directly (`int`, `float`, `bool`, `str` and the
`NONE` singleton); containers and callables are wrapped in the classes
below. `type_name` is the kind discriminant every operator checks before
doing anything with a value.

Lists and mappings are shared by reference: binding one to a second name
copies the reference, so mutations are visible through every binding.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple


class NoneVal:
    """Marker object for the ZPy `none` value."""
    _instance: Optional['NoneVal'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'none'

    def __hash__(self) -> int:
        return hash(None)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoneVal)


NONE = NoneVal()


@dataclass(eq=False)
class ListVal:
    """A ZPy list: an ordered, resizable sequence shared by reference."""
    items: List[Any] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"ListVal({self.items!r})"


HASHABLE_KINDS = frozenset({'Integer', 'Float', 'Boolean', 'String', 'None'})


def is_hashable(value: Any) -> bool:
    return type_name(value) in HASHABLE_KINDS


def map_key(value: Any) -> Tuple[str, Any]:
    """Return the dict key a mapping stores `value` under.

    The kind is part of the key so that `1`, `1.0` and `true`, which Python
    considers equal, stay three distinct ZPy keys.
    """
    return (type_name(value), value)


class MapVal:
    """A ZPy mapping from hashable values to values, in insertion order.

    Callers check `is_hashable` before using a key; the mapping itself only
    stores (key, value) pairs under `map_key(key)`.
    """
    def __init__(self, pairs: Optional[List[Tuple[Any, Any]]] = None):
        self.entries: Dict[Tuple[str, Any], Tuple[Any, Any]] = {}
        for key, value in pairs or ():
            self.set(key, value)

    def __repr__(self) -> str:
        return f"MapVal({list(self.entries.values())!r})"

    def __len__(self) -> int:
        return len(self.entries)

    def contains(self, key: Any) -> bool:
        return map_key(key) in self.entries

    def get(self, key: Any, default: Any = None) -> Any:
        pair = self.entries.get(map_key(key))
        return default if pair is None else pair[1]

    def set(self, key: Any, value: Any):
        self.entries[map_key(key)] = (key, value)

    def delete(self, key: Any) -> bool:
        return self.entries.pop(map_key(key), None) is not None

    def keys(self) -> List[Any]:
        return [k for k, _ in self.entries.values()]

    def values(self) -> List[Any]:
        return [v for _, v in self.entries.values()]

    def items(self) -> Iterator[Tuple[Any, Any]]:
        return iter(list(self.entries.values()))

    def clear(self):
        self.entries.clear()


@dataclass(eq=False)
class FunctionVal:
    """A user-defined function together with the scope it closes over."""
    name: str
    params: List[str]
    body: List[Any]
    closure: Any  # Environment

    def __repr__(self) -> str:
        return f"<function {self.name}>"


@dataclass(eq=False)
class NativeFunction:
    """A builtin identified by its registry name.

    `receiver` is set for bound methods (`xs.append`) and is passed to the
    builtin as its first argument.
    """
    name: str
    receiver: Any = None

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


def type_name(value: Any) -> str:
    """Return the ZPy kind name of a runtime value."""
    # bool is a subclass of int; check it first
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, int):
        return 'Integer'
    if isinstance(value, float):
        return 'Float'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, NoneVal):
        return 'None'
    if isinstance(value, ListVal):
        return 'List'
    if isinstance(value, MapVal):
        return 'Mapping'
    if isinstance(value, FunctionVal):
        return 'Function'
    if isinstance(value, NativeFunction):
        return 'NativeFunction'
    return type(value).__name__


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """Truthiness used by the `bool` builtin; conditions require Booleans."""
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0
    if isinstance(value, ListVal):
        return len(value.items) > 0
    if isinstance(value, MapVal):
        return len(value) > 0
    if isinstance(value, NoneVal):
        return False
    return True


def values_equal(a: Any, b: Any, seen: Optional[Set[Tuple[int, int]]] = None) -> bool:
    """Equality across all kinds. Values of different kinds are never equal.

    Containers compare structurally. `seen` holds the container pairs
    already under comparison, so self-referencing values terminate: a pair
    met again is taken as equal.
    """
    kind = type_name(a)
    if kind != type_name(b):
        return False
    if isinstance(a, (ListVal, MapVal)):
        if a is b:
            return True
        if seen is None:
            seen = set()
        pair = (id(a), id(b))
        if pair in seen:
            return True
        seen.add(pair)
        if isinstance(a, ListVal):
            return len(a.items) == len(b.items) and all(
                values_equal(x, y, seen) for x, y in zip(a.items, b.items))
        if len(a) != len(b):
            return False
        for key, value in a.items():
            if not b.contains(key) or not values_equal(value, b.get(key), seen):
                return False
        return True
    if isinstance(a, (FunctionVal, NativeFunction)):
        if isinstance(a, NativeFunction):
            return a.name == b.name and a.receiver is b.receiver
        return a is b
    return a == b


# Host int <-> str conversion is capped at a few thousand digits.
DIGIT_CHUNK = 1000
CHUNK_BASE = 10 ** DIGIT_CHUNK


def format_integer(value: int) -> str:
    if -CHUNK_BASE < value < CHUNK_BASE:
        return str(value)
    chunks = []
    rest = abs(value)
    while rest:
        rest, chunk = divmod(rest, CHUNK_BASE)
        chunks.append(chunk)
    text = str(chunks[-1]) + ''.join(f"{chunk:0{DIGIT_CHUNK}d}" for chunk in reversed(chunks[:-1]))
    return '-' + text if value < 0 else text


def parse_integer(text: str) -> int:
    """Parse an optionally signed run of ASCII decimal digits of any length.

    Raises ValueError for anything else.
    """
    digits = text[1:] if text[:1] in ('+', '-') else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"invalid Integer literal {text!r}")
    value = 0
    for start in range(0, len(digits), DIGIT_CHUNK):
        chunk = digits[start:start + DIGIT_CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return -value if text[:1] == '-' else value


def format_float(value: float) -> str:
    if math.isnan(value):
        return 'nan'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    return repr(value)


def to_string(value: Any) -> str:
    """Convert a value to the text `print` and `str` produce."""
    if isinstance(value, str):
        return value
    return to_repr(value)


def to_repr(value: Any, seen: Optional[Set[int]] = None) -> str:
    """Convert a value to its source-like representation.

    Strings nested in containers are shown quoted. A container reached
    again while it is being printed shows as `[...]` or `{...}`.
    """
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return format_integer(value)
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, str):
        escaped = value.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n').replace('\t', '\\t')
        return f'"{escaped}"'
    if isinstance(value, NoneVal):
        return 'none'
    if isinstance(value, (ListVal, MapVal)):
        if seen is None:
            seen = set()
        if id(value) in seen:
            return '[...]' if isinstance(value, ListVal) else '{...}'
        seen.add(id(value))
        try:
            if isinstance(value, ListVal):
                return '[' + ', '.join(to_repr(item, seen) for item in value.items) + ']'
            entries = ', '.join(f"{to_repr(k, seen)}: {to_repr(v, seen)}" for k, v in value.items())
            return '{' + entries + '}'
        finally:
            seen.discard(id(value))
    return repr(value)
