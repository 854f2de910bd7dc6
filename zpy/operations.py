"""Operator and container semantics.

These helpers raise `ZpyRuntimeError` without a position; the interpreter
attributes the error to the node being evaluated.
"""

from __future__ import annotations

import math
from typing import Any

from .errors import ZpyRuntimeError
from .types import (
    ListVal, MapVal, is_hashable, is_integer, is_number, to_repr, type_name, values_equal,
)

ARITHMETIC_OPS = ('+', '-', '*', '/', '%')
ORDERING_OPS = ('<', '>', '<=', '>=')


def unsupported(op: str, a: Any, b: Any) -> ZpyRuntimeError:
    return ZpyRuntimeError('TypeError', f"unsupported operand kinds for {op}: {type_name(a)} and {type_name(b)}")


def require_boolean(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise ZpyRuntimeError('TypeError', f"{what} must be Boolean, got {type_name(value)}")
    return value


def arithmetic(op: str, a: Any, b: Any) -> Any:
    try:
        return apply_arithmetic(op, a, b)
    except OverflowError:
        raise ZpyRuntimeError('OverflowError', f"result of {op} is too large for a Float") from None


def apply_arithmetic(op: str, a: Any, b: Any) -> Any:
    if op == '+' and isinstance(a, str) and isinstance(b, str):
        return a + b
    if not (is_number(a) and is_number(b)):
        raise unsupported(op, a, b)
    if op == '+':
        return a + b
    if op == '-':
        return a - b
    if op == '*':
        return a * b
    if op == '/':
        if b == 0:
            raise ZpyRuntimeError('ZeroDivisionError', 'division by zero')
        return a / b
    return modulo(a, b)


def modulo(a: Any, b: Any) -> Any:
    """Remainder whose sign follows the dividend: -7 % 3 == -1."""
    if is_integer(a) and is_integer(b):
        if b == 0:
            raise ZpyRuntimeError('ZeroDivisionError', 'modulo by zero')
        r = abs(a) % abs(b)
        return -r if a < 0 else r
    if isinstance(a, float) and isinstance(b, float):
        if b == 0.0:
            raise ZpyRuntimeError('ZeroDivisionError', 'modulo by zero')
        return math.fmod(a, b)
    raise unsupported('%', a, b)


def compare(op: str, a: Any, b: Any) -> bool:
    if not ((is_number(a) and is_number(b)) or (isinstance(a, str) and isinstance(b, str))):
        raise unsupported(op, a, b)
    if op == '<':
        return a < b
    if op == '>':
        return a > b
    if op == '<=':
        return a <= b
    return a >= b


def contains(container: Any, item: Any) -> bool:
    """Implement `item in container`."""
    if isinstance(container, ListVal):
        return any(values_equal(element, item) for element in container.items)
    if isinstance(container, MapVal):
        check_key(item)
        return container.contains(item)
    if isinstance(container, str):
        if not isinstance(item, str):
            raise ZpyRuntimeError('TypeError', f"'in <String>' requires a String on the left, got {type_name(item)}")
        return item in container
    raise ZpyRuntimeError('TypeError', f"{type_name(container)} does not support 'in'")


def binary(op: str, a: Any, b: Any) -> Any:
    """Apply a non-short-circuit binary operator to evaluated operands."""
    if op in ARITHMETIC_OPS:
        return arithmetic(op, a, b)
    if op == '==':
        return values_equal(a, b)
    if op == '!=':
        return not values_equal(a, b)
    if op in ORDERING_OPS:
        return compare(op, a, b)
    if op == 'in':
        return contains(b, a)
    if op == 'not in':
        return not contains(b, a)
    raise ZpyRuntimeError('TypeError', f"unknown operator {op}")


def unary(op: str, value: Any) -> Any:
    if op == '-':
        if is_number(value):
            return -value
        raise ZpyRuntimeError('TypeError', f"bad operand kind for unary -: {type_name(value)}")
    if op == 'not':
        return not require_boolean(value, "operand of 'not'")
    raise ZpyRuntimeError('TypeError', f"unknown unary operator {op}")


# Containers


def check_key(key: Any):
    if not is_hashable(key):
        raise ZpyRuntimeError('TypeError', f"unhashable mapping key kind {type_name(key)}")


def normalize_index(index: Any, length: int, kind: str) -> int:
    if not is_integer(index):
        raise ZpyRuntimeError('TypeError', f"{kind} indices must be Integer, got {type_name(index)}")
    position = index + length if index < 0 else index
    if not 0 <= position < length:
        raise ZpyRuntimeError('IndexError', f"{kind} index {to_repr(index)} out of range")
    return position


def get_item(target: Any, index: Any) -> Any:
    if isinstance(target, ListVal):
        return target.items[normalize_index(index, len(target.items), 'List')]
    if isinstance(target, str):
        return target[normalize_index(index, len(target), 'String')]
    if isinstance(target, MapVal):
        check_key(index)
        if not target.contains(index):
            raise ZpyRuntimeError('KeyError', f"key {to_repr(index)} not found")
        return target.get(index)
    raise ZpyRuntimeError('TypeError', f"{type_name(target)} is not indexable")


def set_item(target: Any, index: Any, value: Any):
    if isinstance(target, ListVal):
        target.items[normalize_index(index, len(target.items), 'List')] = value
        return
    if isinstance(target, MapVal):
        check_key(index)
        target.set(index, value)
        return
    raise ZpyRuntimeError('TypeError', f"{type_name(target)} does not support item assignment")


def delete_item(target: Any, index: Any):
    if isinstance(target, ListVal):
        del target.items[normalize_index(index, len(target.items), 'List')]
        return
    if isinstance(target, MapVal):
        check_key(index)
        if not target.delete(index):
            raise ZpyRuntimeError('KeyError', f"key {to_repr(index)} not found")
        return
    raise ZpyRuntimeError('TypeError', f"{type_name(target)} does not support item deletion")


def iteration_items(value: Any) -> list:
    """Snapshot of what a `for` loop visits: list items, mapping keys or characters."""
    if isinstance(value, ListVal):
        return list(value.items)
    if isinstance(value, MapVal):
        return value.keys()
    if isinstance(value, str):
        return list(value)
    raise ZpyRuntimeError('TypeError', f"{type_name(value)} is not iterable")
