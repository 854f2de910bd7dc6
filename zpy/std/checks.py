from typing import Any, Callable, List

from zpy.errors import BuiltinFailure, ZpyRuntimeError
from zpy.types import type_name

KIND_CHECKS = {
    'Integer': lambda v: isinstance(v, int) and not isinstance(v, bool),
    'Float': lambda v: isinstance(v, float),
    'Number': lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    'Boolean': lambda v: isinstance(v, bool),
    'String': lambda v: isinstance(v, str),
}


def expect_kind(name: str, what: str, value: Any, *kinds: str) -> Any:
    """Raise BuiltinFailure unless `value` is one of `kinds`.

    `kinds` are ZPy kind names, plus 'Number' for Integer or Float.
    """
    for kind in kinds:
        check: Callable[[Any], bool] = KIND_CHECKS.get(kind, lambda v, k=kind: type_name(v) == k)
        if check(value):
            return value
    raise BuiltinFailure(f"{name} {what} must be {' or '.join(kinds)}, got {type_name(value)}")


def reraise(fn: Callable[..., Any], *args: Any) -> Any:
    """Call an operator helper, turning its runtime error into a builtin failure."""
    try:
        return fn(*args)
    except ZpyRuntimeError as e:
        raise BuiltinFailure(e.message) from None


def strings(name: str, items: List[Any]) -> List[str]:
    for item in items:
        if not isinstance(item, str):
            raise BuiltinFailure(f"{name} expects a List of String, found {type_name(item)}")
    return items
