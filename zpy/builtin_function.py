from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

from zpy.errors import BuiltinFailure


@dataclass
class BuiltinFunction:
    """A native callable registered under a name.

    `arity` is the exact argument count, or None for a variadic builtin;
    `max_arity` widens an exact count into a range. Bound methods count
    their receiver as the first argument.
    """
    name: str
    arity: Optional[int]
    fn: Callable[[List[Any]], Any]
    max_arity: Optional[int] = None

    def __call__(self, args: List[Any]) -> Any:
        if self.arity is not None:
            upper = self.max_arity if self.max_arity is not None else self.arity
            if not self.arity <= len(args) <= upper:
                if upper == self.arity:
                    expected = f"{self.arity}"
                else:
                    expected = f"{self.arity} to {upper}"
                raise BuiltinFailure(f"expected {expected} arguments, got {len(args)}")
        return self.fn(args)

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


class BuiltinRegistry:
    """Mapping from builtin name to a callable taking a list of values.

    The interpreter only relies on `registry[name](args)` returning a value
    or raising `BuiltinFailure`; any callable with that shape may be stored.
    Names containing a dot (`list.append`) are methods reached through
    attribute access, the others are bound as globals.
    """
    def __init__(self):
        self._functions: Dict[str, Callable[[List[Any]], Any]] = {}

    def register(self, name: str, arity: Optional[int], fn: Callable[[List[Any]], Any],
                 max_arity: Optional[int] = None):
        self._functions[name] = BuiltinFunction(name, arity, fn, max_arity)

    def __setitem__(self, name: str, fn: Callable[[List[Any]], Any]):
        self._functions[name] = fn

    def __getitem__(self, name: str) -> Callable[[List[Any]], Any]:
        return self._functions[name]

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def update(self, other: 'BuiltinRegistry'):
        for name in other:
            self._functions[name] = other[name]

    def global_names(self) -> List[str]:
        return [name for name in self._functions if '.' not in name]
