"""`json_parse` and `json_stringify`."""

import json
from typing import Any, List, Optional, Set

from zpy.builtin_function import BuiltinRegistry
from zpy.errors import BuiltinFailure
from zpy.types import NONE, ListVal, MapVal, NoneVal, parse_integer, type_name
from .checks import expect_kind


def from_json(data: Any) -> Any:
    """Convert a decoded JSON document into ZPy values."""
    if data is None:
        return NONE
    if isinstance(data, list):
        return ListVal([from_json(item) for item in data])
    if isinstance(data, dict):
        return MapVal([(key, from_json(value)) for key, value in data.items()])
    return data


def to_json(value: Any, seen: Optional[Set[int]] = None) -> Any:
    """Convert ZPy values into objects the json module can encode."""
    if seen is None:
        seen = set()
    if isinstance(value, NoneVal):
        return None
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (ListVal, MapVal)):
        if id(value) in seen:
            raise BuiltinFailure('cannot stringify a self-referencing value')
        seen.add(id(value))
        try:
            if isinstance(value, ListVal):
                return [to_json(item, seen) for item in value.items]
            out = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise BuiltinFailure(f"JSON object keys must be String, got {type_name(key)}")
                out[key] = to_json(item, seen)
            return out
        finally:
            seen.discard(id(value))
    raise BuiltinFailure(f"{type_name(value)} is not JSON serializable")


def register_json(registry: BuiltinRegistry):

    def json_parse(args: List[Any]) -> Any:
        text = expect_kind('json_parse', 'argument', args[0], 'String')
        try:
            return from_json(json.loads(text, parse_int=parse_integer))
        except json.JSONDecodeError as e:
            raise BuiltinFailure(f"invalid JSON: {e.msg} at line {e.lineno} column {e.colno}") from None

    def json_stringify(args: List[Any]) -> Any:
        indent = None
        if len(args) > 1:
            indent = expect_kind('json_stringify', 'indent', args[1], 'Integer')
        try:
            return json.dumps(to_json(args[0]), indent=indent, ensure_ascii=False)
        except ValueError as e:
            raise BuiltinFailure(str(e)) from None

    registry.register('json_parse', 1, json_parse)
    registry.register('json_stringify', 1, json_stringify, max_arity=2)
