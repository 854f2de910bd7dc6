"""Core builtins bound as global names."""

import builtins
import functools
import math
from typing import Any, List

from zpy.builtin_function import BuiltinRegistry
from zpy.errors import BuiltinFailure, ZpyRuntimeError
from zpy.operations import compare, normalize_index
from zpy.types import (
    NONE, ListVal, MapVal, is_truthy, parse_integer, to_repr, to_string, type_name,
)
from .checks import expect_kind, reraise


def less_than(name: str, a: Any, b: Any) -> bool:
    try:
        return compare('<', a, b)
    except ZpyRuntimeError as e:
        raise BuiltinFailure(f"{name} cannot order {type_name(a)} and {type_name(b)}") from e


def ordering_key(name: str):
    def cmp(a: Any, b: Any) -> int:
        if less_than(name, a, b):
            return -1
        if less_than(name, b, a):
            return 1
        return 0
    return functools.cmp_to_key(cmp)


def candidates(name: str, args: List[Any]) -> List[Any]:
    """Arguments of min/max: a single List, or two or more values."""
    if not args:
        raise BuiltinFailure(f"{name} expects at least 1 argument")
    if len(args) == 1:
        expect_kind(name, 'argument', args[0], 'List')
        items = args[0].items
    else:
        items = args
    if not items:
        raise BuiltinFailure(f"{name} of an empty List")
    return items


def round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def register_core(registry: BuiltinRegistry):

    def std_print(args: List[Any]) -> Any:
        print(' '.join(to_string(a) for a in args))
        return NONE

    def std_len(args: List[Any]) -> Any:
        value = args[0]
        if isinstance(value, str):
            return len(value)
        if isinstance(value, ListVal):
            return len(value.items)
        if isinstance(value, MapVal):
            return len(value)
        raise BuiltinFailure(f"object of kind {type_name(value)} has no len")

    def std_input(args: List[Any]) -> Any:
        prompt = expect_kind('input', 'prompt', args[0], 'String') if args else ''
        try:
            return builtins.input(prompt)
        except EOFError:
            return ''

    def std_str(args: List[Any]) -> Any:
        return to_string(args[0])

    def std_int(args: List[Any]) -> Any:
        value = args[0]
        if isinstance(value, bool):
            return 1 if value else 0
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise BuiltinFailure(f"cannot convert {to_repr(value)} to Integer")
            return int(value)
        if isinstance(value, str):
            try:
                return parse_integer(value.strip())
            except ValueError:
                raise BuiltinFailure(f"cannot parse Integer from {to_repr(value)}") from None
        raise BuiltinFailure(f"cannot convert {type_name(value)} to Integer")

    def std_float(args: List[Any]) -> Any:
        value = args[0]
        if isinstance(value, (bool, int, float)):
            try:
                return float(value)
            except OverflowError:
                raise BuiltinFailure("Integer too large to convert to Float") from None
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                raise BuiltinFailure(f"cannot parse Float from {to_repr(value)}") from None
        raise BuiltinFailure(f"cannot convert {type_name(value)} to Float")

    def std_bool(args: List[Any]) -> Any:
        return is_truthy(args[0])

    def std_type(args: List[Any]) -> Any:
        return type_name(args[0])

    def std_range(args: List[Any]) -> Any:
        for arg in args:
            expect_kind('range', 'argument', arg, 'Integer')
        if len(args) == 1:
            start, stop, step = 0, args[0], 1
        elif len(args) == 2:
            start, stop, step = args[0], args[1], 1
        else:
            start, stop, step = args
        if step == 0:
            raise BuiltinFailure('range step must not be zero')
        return ListVal(list(builtins.range(start, stop, step)))

    def std_list(args: List[Any]) -> Any:
        if not args:
            return ListVal()
        value = args[0]
        if isinstance(value, ListVal):
            return ListVal(list(value.items))
        if isinstance(value, str):
            return ListVal(list(value))
        if isinstance(value, MapVal):
            return ListVal(value.keys())
        raise BuiltinFailure(f"cannot convert {type_name(value)} to List")

    def std_append(args: List[Any]) -> Any:
        target = expect_kind('append', 'target', args[0], 'List')
        target.items.append(args[1])
        return NONE

    def std_keys(args: List[Any]) -> Any:
        return ListVal(expect_kind('keys', 'argument', args[0], 'Mapping').keys())

    def std_values(args: List[Any]) -> Any:
        return ListVal(expect_kind('values', 'argument', args[0], 'Mapping').values())

    def std_abs(args: List[Any]) -> Any:
        return abs(expect_kind('abs', 'argument', args[0], 'Number'))

    def std_min(args: List[Any]) -> Any:
        items = candidates('min', args)
        result = items[0]
        for item in items[1:]:
            if less_than('min', item, result):
                result = item
        return result

    def std_max(args: List[Any]) -> Any:
        items = candidates('max', args)
        result = items[0]
        for item in items[1:]:
            if less_than('max', result, item):
                result = item
        return result

    def std_sum(args: List[Any]) -> Any:
        items = expect_kind('sum', 'argument', args[0], 'List').items
        total: Any = 0
        for item in items:
            total += expect_kind('sum', 'element', item, 'Number')
        return total

    def std_pop(args: List[Any]) -> Any:
        target = expect_kind('pop', 'target', args[0], 'List')
        if not target.items:
            raise BuiltinFailure('pop from empty List')
        index = args[1] if len(args) > 1 else -1
        return target.items.pop(reraise(normalize_index, index, len(target.items), 'List'))

    def std_insert(args: List[Any]) -> Any:
        target = expect_kind('insert', 'target', args[0], 'List')
        index = expect_kind('insert', 'index', args[1], 'Integer')
        target.items.insert(index, args[2])
        return NONE

    def std_sorted(args: List[Any]) -> Any:
        items = expect_kind('sorted', 'argument', args[0], 'List').items
        return ListVal(builtins.sorted(items, key=ordering_key('sorted')))

    def std_reversed(args: List[Any]) -> Any:
        value = expect_kind('reversed', 'argument', args[0], 'List', 'String')
        if isinstance(value, str):
            return value[::-1]
        return ListVal(value.items[::-1])

    def std_enumerate(args: List[Any]) -> Any:
        items = expect_kind('enumerate', 'argument', args[0], 'List').items
        return ListVal([ListVal([i, item]) for i, item in builtins.enumerate(items)])

    def std_zip(args: List[Any]) -> Any:
        left = expect_kind('zip', 'argument', args[0], 'List').items
        right = expect_kind('zip', 'argument', args[1], 'List').items
        return ListVal([ListVal([a, b]) for a, b in builtins.zip(left, right)])

    def std_chr(args: List[Any]) -> Any:
        code = expect_kind('chr', 'argument', args[0], 'Integer')
        if not 0 <= code <= 0x10FFFF:
            raise BuiltinFailure(f"code point {to_repr(code)} out of range")
        return builtins.chr(code)

    def std_ord(args: List[Any]) -> Any:
        text = expect_kind('ord', 'argument', args[0], 'String')
        if len(text) != 1:
            raise BuiltinFailure(f"ord expects a single character, got a String of length {len(text)}")
        return builtins.ord(text)

    def std_hex(args: List[Any]) -> Any:
        return builtins.hex(expect_kind('hex', 'argument', args[0], 'Integer'))

    def std_round(args: List[Any]) -> Any:
        value = expect_kind('round', 'argument', args[0], 'Number')
        if len(args) == 1:
            if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
                raise BuiltinFailure(f"cannot round {to_repr(value)} to Integer")
            return round_half_away(value) if isinstance(value, float) else value
        digits = expect_kind('round', 'digits', args[1], 'Integer')
        return builtins.round(float(value), digits)

    registry.register('print', None, std_print)
    registry.register('len', 1, std_len)
    registry.register('input', 0, std_input, max_arity=1)
    registry.register('str', 1, std_str)
    registry.register('int', 1, std_int)
    registry.register('float', 1, std_float)
    registry.register('bool', 1, std_bool)
    registry.register('type', 1, std_type)
    registry.register('range', 1, std_range, max_arity=3)
    registry.register('list', 0, std_list, max_arity=1)
    registry.register('append', 2, std_append)
    registry.register('keys', 1, std_keys)
    registry.register('values', 1, std_values)
    registry.register('abs', 1, std_abs)
    registry.register('min', None, std_min)
    registry.register('max', None, std_max)
    registry.register('sum', 1, std_sum)
    registry.register('pop', 1, std_pop, max_arity=2)
    registry.register('insert', 3, std_insert)
    registry.register('sorted', 1, std_sorted)
    registry.register('reversed', 1, std_reversed)
    registry.register('enumerate', 1, std_enumerate)
    registry.register('zip', 2, std_zip)
    registry.register('chr', 1, std_chr)
    registry.register('ord', 1, std_ord)
    registry.register('hex', 1, std_hex)
    registry.register('round', 1, std_round, max_arity=2)
