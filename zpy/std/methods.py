"""Methods reached through attribute access: `s.upper()`, `xs.append(1)`, `m.get(k)`.

Each method is registered as `<kind>.<name>` and receives its receiver as
the first argument.
"""

from typing import Any, List

from zpy.builtin_function import BuiltinRegistry
from zpy.errors import BuiltinFailure
from zpy.operations import check_key, normalize_index
from zpy.types import NONE, ListVal, MapVal, to_repr, values_equal
from .checks import expect_kind, reraise, strings
from .core import ordering_key


def position(items: List[Any], value: Any) -> int:
    for i, item in enumerate(items):
        if values_equal(item, value):
            return i
    return -1


def register_string_methods(registry: BuiltinRegistry):

    def str_upper(args: List[Any]) -> Any:
        return args[0].upper()

    def str_lower(args: List[Any]) -> Any:
        return args[0].lower()

    def str_strip(args: List[Any]) -> Any:
        return args[0].strip()

    def str_lstrip(args: List[Any]) -> Any:
        return args[0].lstrip()

    def str_rstrip(args: List[Any]) -> Any:
        return args[0].rstrip()

    def str_split(args: List[Any]) -> Any:
        if len(args) == 1:
            return ListVal(args[0].split())
        sep = expect_kind('split', 'separator', args[1], 'String')
        if sep == '':
            raise BuiltinFailure('empty separator')
        return ListVal(args[0].split(sep))

    def str_join(args: List[Any]) -> Any:
        items = expect_kind('join', 'argument', args[1], 'List').items
        return args[0].join(strings('join', items))

    def str_find(args: List[Any]) -> Any:
        return args[0].find(expect_kind('find', 'argument', args[1], 'String'))

    def str_replace(args: List[Any]) -> Any:
        old = expect_kind('replace', 'argument', args[1], 'String')
        new = expect_kind('replace', 'argument', args[2], 'String')
        return args[0].replace(old, new)

    def str_startswith(args: List[Any]) -> Any:
        return args[0].startswith(expect_kind('startswith', 'argument', args[1], 'String'))

    def str_endswith(args: List[Any]) -> Any:
        return args[0].endswith(expect_kind('endswith', 'argument', args[1], 'String'))

    def str_count(args: List[Any]) -> Any:
        return args[0].count(expect_kind('count', 'argument', args[1], 'String'))

    def str_contains(args: List[Any]) -> Any:
        return expect_kind('contains', 'argument', args[1], 'String') in args[0]

    registry.register('str.upper', 1, str_upper)
    registry.register('str.lower', 1, str_lower)
    registry.register('str.strip', 1, str_strip)
    registry.register('str.lstrip', 1, str_lstrip)
    registry.register('str.rstrip', 1, str_rstrip)
    registry.register('str.split', 1, str_split, max_arity=2)
    registry.register('str.join', 2, str_join)
    registry.register('str.find', 2, str_find)
    registry.register('str.replace', 3, str_replace)
    registry.register('str.startswith', 2, str_startswith)
    registry.register('str.endswith', 2, str_endswith)
    registry.register('str.count', 2, str_count)
    registry.register('str.contains', 2, str_contains)


def register_list_methods(registry: BuiltinRegistry):

    def list_append(args: List[Any]) -> Any:
        args[0].items.append(args[1])
        return NONE

    def list_pop(args: List[Any]) -> Any:
        items = args[0].items
        if not items:
            raise BuiltinFailure('pop from empty List')
        index = args[1] if len(args) > 1 else -1
        return items.pop(reraise(normalize_index, index, len(items), 'List'))

    def list_insert(args: List[Any]) -> Any:
        args[0].items.insert(expect_kind('insert', 'index', args[1], 'Integer'), args[2])
        return NONE

    def list_remove(args: List[Any]) -> Any:
        items = args[0].items
        i = position(items, args[1])
        if i < 0:
            raise BuiltinFailure(f"{to_repr(args[1])} not in List")
        del items[i]
        return NONE

    def list_reverse(args: List[Any]) -> Any:
        args[0].items.reverse()
        return NONE

    def list_clear(args: List[Any]) -> Any:
        args[0].items.clear()
        return NONE

    def list_index(args: List[Any]) -> Any:
        i = position(args[0].items, args[1])
        if i < 0:
            raise BuiltinFailure(f"{to_repr(args[1])} not in List")
        return i

    def list_count(args: List[Any]) -> Any:
        return sum(1 for item in args[0].items if values_equal(item, args[1]))

    def list_copy(args: List[Any]) -> Any:
        return ListVal(list(args[0].items))

    def list_extend(args: List[Any]) -> Any:
        other = expect_kind('extend', 'argument', args[1], 'List')
        args[0].items.extend(list(other.items))
        return NONE

    def list_sort(args: List[Any]) -> Any:
        args[0].items.sort(key=ordering_key('sort'))
        return NONE

    registry.register('list.append', 2, list_append)
    registry.register('list.pop', 1, list_pop, max_arity=2)
    registry.register('list.insert', 3, list_insert)
    registry.register('list.remove', 2, list_remove)
    registry.register('list.reverse', 1, list_reverse)
    registry.register('list.clear', 1, list_clear)
    registry.register('list.index', 2, list_index)
    registry.register('list.count', 2, list_count)
    registry.register('list.copy', 1, list_copy)
    registry.register('list.extend', 2, list_extend)
    registry.register('list.sort', 1, list_sort)


def register_map_methods(registry: BuiltinRegistry):

    def map_get(args: List[Any]) -> Any:
        reraise(check_key, args[1])
        default = args[2] if len(args) > 2 else NONE
        return args[0].get(args[1], default)

    def map_keys(args: List[Any]) -> Any:
        return ListVal(args[0].keys())

    def map_values(args: List[Any]) -> Any:
        return ListVal(args[0].values())

    def map_items(args: List[Any]) -> Any:
        return ListVal([ListVal([k, v]) for k, v in args[0].items()])

    def map_clear(args: List[Any]) -> Any:
        args[0].clear()
        return NONE

    def map_update(args: List[Any]) -> Any:
        other: MapVal = expect_kind('update', 'argument', args[1], 'Mapping')
        for key, value in other.items():
            args[0].set(key, value)
        return NONE

    def map_pop(args: List[Any]) -> Any:
        mapping, key = args[0], args[1]
        reraise(check_key, key)
        if mapping.contains(key):
            value = mapping.get(key)
            mapping.delete(key)
            return value
        if len(args) > 2:
            return args[2]
        raise BuiltinFailure(f"key {to_repr(key)} not found")

    registry.register('map.get', 2, map_get, max_arity=3)
    registry.register('map.keys', 1, map_keys)
    registry.register('map.values', 1, map_values)
    registry.register('map.items', 1, map_items)
    registry.register('map.clear', 1, map_clear)
    registry.register('map.update', 2, map_update)
    registry.register('map.pop', 2, map_pop, max_arity=3)


def register_methods(registry: BuiltinRegistry):
    register_string_methods(registry)
    register_list_methods(registry)
    register_map_methods(registry)
